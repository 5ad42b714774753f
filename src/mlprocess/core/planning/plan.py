# src/mlprocess/core/planning/plan.py
"""
Arena do plano de execução.

O `Plan` guarda os nós numa lista (`nodes`) e as dependências como
listas de índices em cada nó (`depends_on` / `depended_by`). Todas as
mutações de arestas passam por este módulo, que mantém as duas listas
simétricas.

Decisões arquiteturais:
    - Índices em vez de referências: o plano é serializável como está
    - `remove` compacta a arena e remapeia todos os índices
    - A ordem da lista é a ordem de prioridade do agendamento

Invariantes:
    - `j in nodes[i].depends_on` ⇔ `i in nodes[j].depended_by`
    - Nenhum nó depende de si mesmo
    - Ids são únicos no plano

Limites explícitos:
    - Não resolve dependências a partir de fontes de dados
    - Não persiste nem trava o arquivo do plano
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from mlprocess.core.scenario.task_node import TaskNode
from mlprocess.core.scenario.types import TaskStatus


PLAN_FORMAT_VERSION = 1


@dataclass
class Plan:
    """Conjunto ordenado de nós com arestas por índice."""

    nodes: List[TaskNode] = field(default_factory=list)
    scenario: str = ""
    generated: int = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[TaskNode]:
        return iter(self.nodes)

    # -----------------------------
    # Consulta
    # -----------------------------
    def find(self, task_id: str) -> Optional[int]:
        for i, node in enumerate(self.nodes):
            if node.id == task_id:
                return i
        return None

    def index_of(self, task_id: str) -> int:
        idx = self.find(task_id)
        if idx is None:
            raise KeyError(task_id)
        return idx

    def ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def predecessors_done(self, index: int) -> bool:
        return all(self.nodes[j].status == TaskStatus.DONE for j in self.nodes[index].depends_on)

    def is_ready(self, index: int) -> bool:
        """Pronto para execução: PENDING, ou WAITING com todos os predecessores concluídos."""
        status = self.nodes[index].status
        if status == TaskStatus.PENDING:
            return True
        return status == TaskStatus.WAITING and self.predecessors_done(index)

    def dependents_closure(self, indices: Iterable[int]) -> List[int]:
        """Dependentes transitivos dos índices dados (sem incluí-los), em ordem de plano."""
        start = set(indices)
        seen: Set[int] = set()
        stack = [s for i in start for s in self.nodes[i].depended_by]
        while stack:
            i = stack.pop()
            if i in seen or i in start:
                continue
            seen.add(i)
            stack.extend(self.nodes[i].depended_by)
        return sorted(seen)

    def unique_id(self, base: str) -> str:
        """`base` se livre; senão `base-<n>` com o contador `generated`."""
        candidate = base
        while self.find(candidate) is not None:
            self.generated += 1
            candidate = f"{base}-{self.generated}"
        return candidate

    # -----------------------------
    # Mutação
    # -----------------------------
    def add(self, node: TaskNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def link(self, dependent: int, source: int) -> None:
        """`dependent` passa a depender de `source`; WAITING se `source` não está DONE."""
        if dependent == source:
            return
        dep = self.nodes[dependent]
        if source not in dep.depends_on:
            dep.depends_on.append(source)
            self.nodes[source].depended_by.append(dependent)
        if self.nodes[source].status != TaskStatus.DONE and dep.status == TaskStatus.PENDING:
            dep.status = TaskStatus.WAITING

    def unlink(self, dependent: int, source: int) -> None:
        dep = self.nodes[dependent]
        if source in dep.depends_on:
            dep.depends_on.remove(source)
        src = self.nodes[source]
        if dependent in src.depended_by:
            src.depended_by.remove(dependent)

    def sever(self, index: int) -> None:
        """Remove todas as arestas de um nó."""
        node = self.nodes[index]
        for source in list(node.depends_on):
            self.unlink(index, source)
        for dependent in list(node.depended_by):
            self.unlink(dependent, index)

    def remove(self, indices: Iterable[int]) -> None:
        """Remove nós (cortando suas arestas) e compacta a arena."""
        doomed = set(indices)
        if not doomed:
            return
        for i in doomed:
            self.sever(i)
        keep = [i for i in range(len(self.nodes)) if i not in doomed]
        self.permute(keep)

    def permute(self, order: List[int]) -> None:
        """
        Reordena (e opcionalmente filtra) a arena.

        `order` lista os índices antigos na nova ordem; nós ausentes devem
        estar sem arestas.
        """
        remap: Dict[int, int] = {old: new for new, old in enumerate(order)}
        nodes = [self.nodes[old] for old in order]
        for node in nodes:
            node.depends_on = [remap[j] for j in node.depends_on]
            node.depended_by = [remap[j] for j in node.depended_by]
        self.nodes = nodes

    # -----------------------------
    # Serialização
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": PLAN_FORMAT_VERSION,
            "scenario": self.scenario,
            "generated": self.generated,
            "nodes": [n.to_dict() for n in self.nodes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Plan":
        """
        Restaura um plano serializado.

        Raises:
            ValueError: versão desconhecida, índices fora do intervalo ou arestas assimétricas.
        """
        if not isinstance(data, dict):
            raise ValueError("plan root must be a mapping")
        version = data.get("version")
        if version != PLAN_FORMAT_VERSION:
            raise ValueError(f"unsupported plan version: {version!r}")

        try:
            nodes = [TaskNode.from_dict(d) for d in data.get("nodes", [])]
        except (KeyError, TypeError) as e:
            raise ValueError(f"malformed plan node: {e}") from e

        n = len(nodes)
        for i, node in enumerate(nodes):
            for j in node.depends_on:
                if not 0 <= j < n or i not in nodes[j].depended_by:
                    raise ValueError(f"inconsistent edge {node.id} -> {j}")
            for j in node.depended_by:
                if not 0 <= j < n or i not in nodes[j].depends_on:
                    raise ValueError(f"inconsistent edge {j} -> {node.id}")

        return cls(
            nodes=nodes,
            scenario=str(data.get("scenario", "") or ""),
            generated=int(data.get("generated", 0) or 0),
        )
