# src/mlprocess/core/planning/planner.py
"""
Planejador do mlprocess.

Este módulo constrói o plano de execução a partir de um cenário e
produz sua ordem topológica determinística.

Pipeline de construção (`build_plan`):
    1. carregar e validar o cenário (`load_scenario`)
    2. resolver dependências por fontes de dados (`resolve_dependencies`)
    3. paralelizar tasks marcadas (`parallelize`)
    4. ordenar topologicamente (`sort_plan`)

Princípios fundamentais:
    - O plano deve formar um DAG válido
    - A ordenação é determinística para a mesma entrada
    - Nenhuma decisão silenciosa ou heurística implícita

Decisões arquiteturais:
    - Ordenação topológica de Kahn
    - Empates resolvidos pela posição atual do nó e depois pelo id
    - Ciclos são falhas fatais (LoopDependencyError)

Limites explícitos:
    - Não expande padrões (a expansão ocorre no momento da reivindicação)
    - Não persiste o plano
"""

from __future__ import annotations

import heapq
from pathlib import Path
from typing import List, Tuple, Union

from mlprocess.core.exceptions import LoopDependencyError
from mlprocess.core.scenario.loader import load_scenario

from .parallelizer import parallelize
from .plan import Plan
from .resolver import resolve_dependencies


def topological_order(plan: Plan) -> List[int]:
    """
    Ordem topológica dos índices do plano (Kahn com heap).

    Raises:
        LoopDependencyError: Se houver ciclo no grafo de dependências.
    """
    incoming = [len(n.depends_on) for n in plan.nodes]
    ready: List[Tuple[int, str]] = [(i, plan.nodes[i].id) for i, c in enumerate(incoming) if c == 0]
    heapq.heapify(ready)

    order: List[int] = []
    while ready:
        i, _ = heapq.heappop(ready)
        order.append(i)
        for child in plan.nodes[i].depended_by:
            incoming[child] -= 1
            if incoming[child] == 0:
                heapq.heappush(ready, (child, plan.nodes[child].id))

    if len(order) != len(plan.nodes):
        stuck = sorted(plan.nodes[i].id for i, c in enumerate(incoming) if c > 0)
        raise LoopDependencyError(
            "Ciclo detectado no grafo de dependências",
            details={"tasks": stuck},
            hint="Verifique as fontes de dados produzidas e consumidas pelas tasks listadas.",
        )
    return order


def sort_plan(plan: Plan) -> Plan:
    plan.permute(topological_order(plan))
    return plan


def build_plan(scenario_path: Union[str, Path], *, workers: int = 1) -> Plan:
    """
    Constrói o plano completo de um cenário, pronto para persistência.

    Raises:
        ScenarioError: (ou subclasses) se o cenário for inválido.
    """
    scenario = load_scenario(scenario_path)
    plan = Plan(nodes=scenario.nodes, scenario=scenario.path)
    resolve_dependencies(plan)
    parallelize(plan, workers=workers)
    return sort_plan(plan)
