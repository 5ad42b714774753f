# src/mlprocess/core/scenario/task_node.py
"""
Nó de task do plano de execução.

Este módulo define a unidade de trabalho agendada pelo mlprocess: o
`TaskNode`, com seu descritor de algoritmo, suas seções de fontes de
dados, suas arestas de dependência e seu status de execução.

Decisões arquiteturais:
    - As arestas são listas de índices numa arena (`Plan.nodes`), não
      referências entre objetos; isso evita ciclos de propriedade e torna
      a serialização do plano trivial
    - Os tipos de task formam uma união etiquetada (`TaskKind`) validada
      por uma única função (`validate_node`), sem subclasses por tipo
    - Ids de clones de expansão seguem `<id>#<token>`

Invariantes:
    - `depends_on` e `depended_by` são mantidos simétricos pelo `Plan`
    - Seções de I/O só mudam por expansão de padrões ou paralelização
    - Manipulações nunca são paralelizáveis

Limites explícitos:
    - Não resolve dependências
    - Não persiste o plano
    - Não executa algoritmos
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from mlprocess.core.exceptions import (
    CannotParallelizeManipulationError,
    InvalidDataSourceError,
    InvalidTaskIdError,
    MissingSectionError,
    NoMatchingDataNumbersError,
)

from .data_source import DataSource
from .types import DataSourceKind, TaskKind, TaskStatus


EXPANSION_SEPARATOR = "#"


def parse_parameters(parameters: str) -> Dict[str, str]:
    """
    Converte a string livre de parâmetros em um dicionário.

    Formato: pares `nome=valor` separados por `;`. Um nome sem `=` vale "".
    Espaços ao redor de nomes e valores são descartados.

    Examples:
        >>> parse_parameters("model=knn; n_neighbors=3")
        {'model': 'knn', 'n_neighbors': '3'}
    """
    result: Dict[str, str] = {}
    for chunk in (parameters or "").split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, _, value = chunk.partition("=")
        result[name.strip()] = value.strip()
    return result


@dataclass(frozen=True)
class AlgorithmDescriptor:
    """Algoritmo de uma task: nome registrado, parâmetros e paralelizabilidade."""

    name: str
    parameters: str = ""
    parallelizable: bool = False

    def parameter_map(self) -> Dict[str, str]:
        return parse_parameters(self.parameters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parameters": self.parameters,
            "parallelizable": self.parallelizable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlgorithmDescriptor":
        return cls(
            name=str(data.get("name", "")),
            parameters=str(data.get("parameters", "") or ""),
            parallelizable=bool(data.get("parallelizable", False)),
        )


def _sources_to_list(sources: List[DataSource]) -> List[Dict[str, Any]]:
    return [s.to_dict() for s in sources]


def _sources_from_list(items: Any) -> List[DataSource]:
    return [DataSource.from_dict(d) for d in (items or [])]


@dataclass
class TaskNode:
    """
    Unidade de trabalho agendada.

    Campos:
        - id: identificador único no plano
        - kind: tipo da task (`TaskKind`)
        - algorithm: descritor do algoritmo
        - input / output: fontes de dados declaradas
        - train / devel / eval: conjuntos de uma COMPUTATION (contagens pareadas)
        - data: datasets avaliados por uma EVALUATION
        - depends_on / depended_by: índices de predecessores/sucessores na arena
        - status: estado de execução
        - origin: id da task do cenário que originou este nó
        - fingerprint: hash da declaração original (usado pelo reset `#`)
        - error: payload serializado da última falha, se houver
    """

    id: str
    kind: TaskKind
    algorithm: AlgorithmDescriptor
    input: List[DataSource] = field(default_factory=list)
    output: List[DataSource] = field(default_factory=list)
    train: List[DataSource] = field(default_factory=list)
    devel: List[DataSource] = field(default_factory=list)
    eval: List[DataSource] = field(default_factory=list)
    data: List[DataSource] = field(default_factory=list)
    depends_on: List[int] = field(default_factory=list)
    depended_by: List[int] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    origin: str = ""
    fingerprint: str = ""
    error: Optional[Dict[str, Any]] = None

    # ------------------------------------------------------------------
    # Fontes de dados derivadas
    # ------------------------------------------------------------------
    def input_sources(self) -> List[DataSource]:
        """
        Todas as fontes consumidas, como vistas pelo resolvedor de dependências.

        Features declaradas em `input` são cruzadas com os datasets da task
        (`<dataset>::<feature>`): em COMPUTATION com train/devel/eval, em
        EVALUATION com `data`.
        """
        sources: List[DataSource] = []
        if self.kind == TaskKind.COMPUTATION:
            sets = self.train + self.devel + self.eval
        elif self.kind == TaskKind.EVALUATION:
            sets = list(self.data)
        else:
            return list(self.input)

        datasets = [s for s in sets if s.kind == DataSourceKind.DATASET]
        for src in self.input:
            if src.kind == DataSourceKind.FEATURE and datasets:
                sources.extend(ds.derive_feature(src) for ds in datasets)
            else:
                sources.append(src)
        sources.extend(sets)
        return sources

    def output_sources(self) -> List[DataSource]:
        """Todas as fontes produzidas; features de COMPUTATION são derivadas por dataset de eval."""
        if self.kind != TaskKind.COMPUTATION:
            return list(self.output)
        datasets = [s for s in self.eval if s.kind == DataSourceKind.DATASET]
        sources: List[DataSource] = []
        for src in self.output:
            if src.kind == DataSourceKind.FEATURE and datasets:
                sources.extend(ds.derive_feature(src) for ds in datasets)
            else:
                sources.append(src)
        return sources

    def task_inputs(self) -> List[DataSource]:
        """Entradas entregues à Task, na ordem train, devel, eval, data, input."""
        return self.train + self.devel + self.eval + self.data + self.input

    # ------------------------------------------------------------------
    # Clonagem (expansão / paralelização)
    # ------------------------------------------------------------------
    def clone(self, new_id: str, **changes: Any) -> "TaskNode":
        """Cópia sem arestas, com status PENDING e listas de I/O independentes."""
        base = replace(
            self,
            id=new_id,
            input=list(self.input),
            output=list(self.output),
            train=list(self.train),
            devel=list(self.devel),
            eval=list(self.eval),
            data=list(self.data),
            depends_on=[],
            depended_by=[],
            status=TaskStatus.PENDING,
            error=None,
        )
        return replace(base, **changes) if changes else base

    @property
    def pattern_replacement(self) -> Optional[str]:
        """Texto que substitui `*` nas saídas: a parte do id após o primeiro `#`, com `#` → `_`."""
        if EXPANSION_SEPARATOR not in self.id:
            return None
        return self.id.split(EXPANSION_SEPARATOR, 1)[1].replace(EXPANSION_SEPARATOR, "_")

    # ------------------------------------------------------------------
    # Serialização
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "algorithm": self.algorithm.to_dict(),
            "input": _sources_to_list(self.input),
            "output": _sources_to_list(self.output),
            "train": _sources_to_list(self.train),
            "devel": _sources_to_list(self.devel),
            "eval": _sources_to_list(self.eval),
            "data": _sources_to_list(self.data),
            "depends_on": list(self.depends_on),
            "depended_by": list(self.depended_by),
            "status": self.status.value,
            "origin": self.origin,
            "fingerprint": self.fingerprint,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskNode":
        return cls(
            id=str(data["id"]),
            kind=TaskKind(data["kind"]),
            algorithm=AlgorithmDescriptor.from_dict(data.get("algorithm", {}) or {}),
            input=_sources_from_list(data.get("input")),
            output=_sources_from_list(data.get("output")),
            train=_sources_from_list(data.get("train")),
            devel=_sources_from_list(data.get("devel")),
            eval=_sources_from_list(data.get("eval")),
            data=_sources_from_list(data.get("data")),
            depends_on=[int(i) for i in data.get("depends_on", []) or []],
            depended_by=[int(i) for i in data.get("depended_by", []) or []],
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            origin=str(data.get("origin", "") or ""),
            fingerprint=str(data.get("fingerprint", "") or ""),
            error=data.get("error"),
        )

    def describe(self) -> str:
        """Linha legível para o arquivo `.status`."""
        ins = ", ".join(s.id for s in self.task_inputs())
        outs = ", ".join(s.id for s in self.output)
        return (
            f"{self.id} [{self.kind.value}] {self.status.value.upper()} "
            f"algorithm={self.algorithm.name} in=({ins}) out=({outs})"
        )


def validate_node(node: TaskNode) -> None:
    """
    Valida as seções de um nó de acordo com seu tipo.

    Regras:
        - id não vazio
        - algoritmo declarado; MANIPULATION não pode ser paralelizável
        - train/devel/eval só em COMPUTATION; data só em EVALUATION
        - COMPUTATION exige train e eval; devel/eval pareados com train;
          train e eval homogêneos e compostos de arquivos ou datasets
        - EVALUATION exige ao menos um arquivo ou dataset em `data`
        - toda task declara saída; MANIPULATION declara também entrada

    Raises:
        InvalidTaskIdError, CannotParallelizeManipulationError,
        InvalidDataSourceError, MissingSectionError, NoMatchingDataNumbersError
    """
    if not isinstance(node.id, str) or not node.id.strip():
        raise InvalidTaskIdError("task id must be a non-empty string", details={"id": node.id})

    details = {"task_id": node.id, "kind": node.kind.value}

    if not node.algorithm.name:
        raise MissingSectionError(f"Task '{node.id}': algoritmo não declarado", details=details)

    if node.kind == TaskKind.MANIPULATION and node.algorithm.parallelizable:
        raise CannotParallelizeManipulationError(
            f"Task '{node.id}': tasks de manipulação não podem ser paralelizadas",
            details=details,
            hint="Remova 'parallelizable: true' da task ou declare-a como computation.",
        )

    if node.kind != TaskKind.COMPUTATION and (node.train or node.devel or node.eval):
        raise InvalidDataSourceError(
            f"Task '{node.id}': seções train/devel/eval só são válidas em computation",
            details=details,
        )
    if node.kind != TaskKind.EVALUATION and node.data:
        raise InvalidDataSourceError(
            f"Task '{node.id}': seção data só é válida em evaluation",
            details=details,
        )

    if node.kind == TaskKind.COMPUTATION:
        if not node.train:
            raise MissingSectionError(f"Task '{node.id}': nenhum conjunto de treino", details=details)
        if not node.eval:
            raise MissingSectionError(f"Task '{node.id}': nenhum conjunto de avaliação", details=details)
        if len(node.eval) != len(node.train) or (node.devel and len(node.devel) != len(node.train)):
            raise NoMatchingDataNumbersError(
                f"Task '{node.id}': quantidades de train, devel e eval não coincidem",
                details={**details, "train": len(node.train), "devel": len(node.devel), "eval": len(node.eval)},
            )
        for section_name, section in (("train", node.train), ("eval", node.eval)):
            kinds = {s.kind for s in section}
            if len(kinds) > 1 or kinds - {DataSourceKind.FILE, DataSourceKind.DATASET}:
                raise InvalidDataSourceError(
                    f"Task '{node.id}': seção {section_name} deve conter apenas arquivos ou apenas datasets",
                    details=details,
                )

    if node.kind == TaskKind.EVALUATION:
        if not node.data:
            raise MissingSectionError(f"Task '{node.id}': evaluation sem seção data", details=details)
        if any(s.kind == DataSourceKind.FEATURE for s in node.data):
            raise InvalidDataSourceError(f"Task '{node.id}': seção data aceita apenas arquivos ou datasets", details=details)

    if not node.output:
        raise MissingSectionError(f"Task '{node.id}': seção output ausente ou vazia", details=details)
    if node.kind == TaskKind.MANIPULATION and not node.input:
        raise MissingSectionError(f"Task '{node.id}': seção input ausente ou vazia", details=details)
