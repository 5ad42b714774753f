# src/mlprocess/core/planning/parallelizer.py
"""
Paralelização de tasks marcadas como `parallelizable`.

Para um orçamento de `W` workers (threads × instâncias), cada nó
paralelizável com `n` partições (conjuntos de treino) é substituído por:
    - n = 1, W > 1: um splitter `data_splitter`, `W` clones `<id>.part<i>`
      com a i-ésima parte de train/devel/eval e um merger `data_merger`
    - n = W > 1: `W` clones `<id>.part<i>` com o i-ésimo conjunto declarado
    - n > 1, n != W (inclui W = 1): `n` unidades `<id>.train<i>`, ainda
      paralelizáveis com uma partição; com W > 1 cada unidade é
      paralelizada de novo pela primeira regra
    - n = 1, W = 1: o nó fica inalterado

Saídas:
    - pareadas: saídas não-feature em número igual às partições; a parte
      `i` grava a saída `i` (mais as features) e não há merger
    - compartilhadas: qualquer outro caso; a parte `i` grava a i-ésima
      divisão de cada saída e um merger as recompõe

Assim a semântica de I/O de um nó não depende de W.

Ids gerados: `<id>.split`, `<id>.part<i>`, `<id>.train<i>`, `<id>.merge`.

Arestas:
    - splitter e partes herdam os predecessores do nó original
    - partes dependem do splitter; merger depende das partes
    - sucessores passam a depender do merger ou, com saídas pareadas, das
      partes que produzem o que consomem (todas, se nenhuma)

MANIPULATION paralelizável → CannotParallelizeManipulationError.
"""

from __future__ import annotations

from typing import List, Optional

from mlprocess.core.exceptions import CannotParallelizeManipulationError
from mlprocess.core.scenario.data_source import DataSource
from mlprocess.core.scenario.task_node import AlgorithmDescriptor, TaskNode
from mlprocess.core.scenario.types import DataSourceKind, TaskKind

from .plan import Plan


SPLITTER_ALGORITHM = "data_splitter"
MERGER_ALGORITHM = "data_merger"


def worker_budget(*, threads: int, instances: int) -> int:
    return max(1, int(threads) * int(instances))


def _partitions(node: TaskNode) -> int:
    return len(node.train)


def _splitter_for(plan: Plan, node: TaskNode, parts: int) -> TaskNode:
    sources = node.train + node.devel + node.eval
    return TaskNode(
        id=plan.unique_id(f"{node.id}.split"),
        kind=TaskKind.MANIPULATION,
        algorithm=AlgorithmDescriptor(name=SPLITTER_ALGORITHM, parameters=f"num_parts={parts}"),
        input=list(sources),
        output=[part for s in sources for part in s.split(parts)],
        origin=node.origin,
        fingerprint=node.fingerprint,
    )


def _merger_for(plan: Plan, node: TaskNode, parts: int) -> TaskNode:
    return TaskNode(
        id=plan.unique_id(f"{node.id}.merge"),
        kind=TaskKind.MANIPULATION,
        algorithm=AlgorithmDescriptor(name=MERGER_ALGORITHM),
        input=[part for o in node.output for part in o.split(parts)],
        output=list(node.output),
        origin=node.origin,
        fingerprint=node.fingerprint,
    )


def _nth(sources: List[DataSource], i: int, parts: int, *, split: bool) -> List[DataSource]:
    if not sources:
        return []
    if split:
        return [sources[0].split(parts)[i]]
    return [sources[i]]


def _paired_outputs(node: TaskNode, parts: int) -> Optional[List[List[DataSource]]]:
    """Saídas de cada parte quando as não-feature casam com as partições."""
    features = [o for o in node.output if o.kind == DataSourceKind.FEATURE]
    others = [o for o in node.output if o.kind != DataSourceKind.FEATURE]
    if parts < 2 or len(others) != parts:
        return None
    return [features + [others[i]] for i in range(parts)]


def _link_successors(plan: Plan, succs: List[int], producers: List[int]) -> None:
    for s in succs:
        wanted = {src.key for src in plan.nodes[s].input_sources()}
        matching = [
            p for p in producers
            if any(o.key in wanted for o in plan.nodes[p].output_sources())
        ]
        for p in matching or producers:
            plan.link(s, p)


def _fan_out(plan: Plan, index: int, parts: int, *, suffix: str, needs_split: bool, keep_flag: bool) -> List[str]:
    """
    Substitui o nó `index` por `parts` partes (+ splitter/merger).

    Returns:
        List[str]: ids gerados, na ordem splitter, partes, merger.
    """
    node = plan.nodes[index]
    preds = list(node.depends_on)
    succs = list(node.depended_by)
    paired = None if needs_split else _paired_outputs(node, parts)
    generated: List[str] = []

    split_idx = None
    if needs_split:
        split_idx = plan.add(_splitter_for(plan, node, parts))
        generated.append(plan.nodes[split_idx].id)
        for p in preds:
            plan.link(split_idx, p)

    part_idx: List[int] = []
    for i in range(parts):
        part = node.clone(
            plan.unique_id(f"{node.id}.{suffix}{i}"),
            algorithm=AlgorithmDescriptor(
                name=node.algorithm.name,
                parameters=node.algorithm.parameters,
                parallelizable=keep_flag,
            ),
            train=_nth(node.train, i, parts, split=needs_split),
            devel=_nth(node.devel, i, parts, split=needs_split),
            eval=_nth(node.eval, i, parts, split=needs_split),
            output=paired[i] if paired else [o.split(parts)[i] for o in node.output],
        )
        pi = plan.add(part)
        part_idx.append(pi)
        generated.append(part.id)
        for p in preds:
            plan.link(pi, p)
        if split_idx is not None:
            plan.link(pi, split_idx)

    if paired:
        _link_successors(plan, succs, part_idx)
    else:
        merge_idx = plan.add(_merger_for(plan, node, parts))
        generated.append(plan.nodes[merge_idx].id)
        for pi in part_idx:
            plan.link(merge_idx, pi)
        for s in succs:
            plan.link(s, merge_idx)

    plan.remove([index])
    return generated


def parallelize_node(plan: Plan, index: int, workers: int) -> List[int]:
    """
    Substitui o nó `index` conforme as regras do módulo.

    Returns:
        List[int]: índices (após compactação) dos nós gerados; `[index]`
        se o nó ficou inalterado.
    """
    node = plan.nodes[index]
    if node.kind == TaskKind.MANIPULATION:
        raise CannotParallelizeManipulationError(
            f"Task '{node.id}': tasks de manipulação não podem ser paralelizadas",
            details={"task_id": node.id},
        )

    parts = _partitions(node)
    if parts > 1 and parts == workers:
        generated = _fan_out(plan, index, parts, suffix="part", needs_split=False, keep_flag=False)
    elif parts > 1:
        units = _fan_out(plan, index, parts, suffix="train", needs_split=False, keep_flag=True)
        generated = []
        for unit in units:
            ui = plan.index_of(unit)
            if workers > 1 and plan.nodes[ui].algorithm.parallelizable:
                generated.extend(plan.nodes[j].id for j in parallelize_node(plan, ui, workers))
            else:
                generated.append(unit)
    elif workers > 1:
        generated = _fan_out(plan, index, workers, suffix="part", needs_split=True, keep_flag=False)
    else:
        return [index]

    return [plan.index_of(g) for g in generated]


def parallelize(plan: Plan, *, workers: int) -> Plan:
    """Aplica `parallelize_node` a todo nó paralelizável do plano."""
    targets = [n.id for n in plan.nodes if n.algorithm.parallelizable]
    for task_id in targets:
        parallelize_node(plan, plan.index_of(task_id), workers)
    return plan
