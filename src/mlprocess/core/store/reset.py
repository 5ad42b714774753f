# src/mlprocess/core/store/reset.py
"""
Instruções de reset do plano.

Formatos aceitos (CLI `--reset` separado por vírgulas, ou uma instrução
por linha no arquivo `<cenário>.reset`):
    - `<prefixo>` → tasks cujo id começa com o prefixo voltam a PENDING
      (ou WAITING, se algum predecessor não terminou); dependentes
      transitivos vão para WAITING
    - `!`         → reconstrução completa do plano a partir do cenário
    - `#`         → apenas tasks cuja declaração mudou desde a construção

Nós já PENDING ou WAITING não são alterados.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Set

from mlprocess.core.planning.parallelizer import MERGER_ALGORITHM, SPLITTER_ALGORITHM
from mlprocess.core.planning.plan import Plan
from mlprocess.core.scenario.loader import fingerprint_structure
from mlprocess.core.scenario.types import TaskStatus


REBUILD = "!"
CHANGED = "#"

_GENERATED_ALGORITHMS = (SPLITTER_ALGORITHM, MERGER_ALGORITHM)


def parse_reset_instructions(text: str) -> List[str]:
    """Divide texto livre (vírgulas ou linhas) em instruções, ignorando vazios e linhas `//`."""
    items: List[str] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line or line.startswith("//"):
            continue
        for chunk in line.split(","):
            chunk = chunk.strip()
            if chunk:
                items.append(chunk)
    return items


def _settle(plan: Plan, index: int) -> None:
    node = plan.nodes[index]
    node.status = TaskStatus.PENDING if plan.predecessors_done(index) else TaskStatus.WAITING
    node.error = None


def reset_indices(plan: Plan, indices: Iterable[int]) -> List[str]:
    """Reseta os nós dados e seus dependentes transitivos. Retorna os ids alterados."""
    targets = sorted(set(indices))
    changed: List[str] = []

    dependents = plan.dependents_closure(targets)
    for i in dependents:
        node = plan.nodes[i]
        if node.status in (TaskStatus.PENDING, TaskStatus.WAITING):
            continue
        node.status = TaskStatus.WAITING
        node.error = None
        changed.append(node.id)

    dependent_set = set(dependents)
    for i in targets:
        node = plan.nodes[i]
        if node.status in (TaskStatus.PENDING, TaskStatus.WAITING) or i in dependent_set:
            continue
        _settle(plan, i)
        changed.append(node.id)

    return changed


def reset_prefix(plan: Plan, prefix: str) -> List[str]:
    return reset_indices(plan, [i for i, n in enumerate(plan.nodes) if n.id.startswith(prefix)])


def reset_changed(plan: Plan, fresh: Plan) -> Plan:
    """
    Reseta as tasks cuja declaração mudou.

    Mudanças apenas de parâmetros são aplicadas no próprio plano; qualquer
    mudança estrutural (tasks novas, removidas ou com seções diferentes)
    devolve o plano recém-construído.
    """
    current_fp: Dict[str, str] = {}
    for node in plan.nodes:
        current_fp.setdefault(node.origin, node.fingerprint)
    fresh_fp: Dict[str, str] = {}
    fresh_params: Dict[str, str] = {}
    for node in fresh.nodes:
        fresh_fp.setdefault(node.origin, node.fingerprint)
        if node.algorithm.name not in _GENERATED_ALGORITHMS:
            fresh_params.setdefault(node.origin, node.algorithm.parameters)

    if set(current_fp) != set(fresh_fp):
        return fresh
    if any(fingerprint_structure(current_fp[o]) != fingerprint_structure(fresh_fp[o]) for o in current_fp):
        return fresh

    changed_origins: Set[str] = {o for o in current_fp if current_fp[o] != fresh_fp[o]}
    targets: List[int] = []
    for i, node in enumerate(plan.nodes):
        if node.origin not in changed_origins:
            continue
        node.fingerprint = fresh_fp[node.origin]
        if node.algorithm.name not in _GENERATED_ALGORITHMS:
            node.algorithm = replace(node.algorithm, parameters=fresh_params.get(node.origin, ""))
            targets.append(i)

    reset_indices(plan, targets)
    return plan


def apply_resets(plan: Plan, instructions: Iterable[str], *, rebuild: Callable[[], Plan]) -> Plan:
    """Aplica instruções de reset em ordem; `!` e `#` podem reconstruir o plano."""
    for instruction in instructions:
        if instruction == REBUILD:
            plan = rebuild()
        elif instruction == CHANGED:
            plan = reset_changed(plan, rebuild())
        else:
            reset_prefix(plan, instruction)
    return plan
