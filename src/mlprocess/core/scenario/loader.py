# src/mlprocess/core/scenario/loader.py
"""
Loader canônico de cenários do mlprocess.

Um cenário é um documento YAML ou JSON com uma lista `tasks`. Cada task
declara `id`, `kind`, o elemento de algoritmo e suas seções de fontes de
dados (`input`, `output`, `train`, `devel`, `eval`, `data`).

Responsabilidades do módulo:
    - Ler o documento do cenário (YAML/JSON)
    - Converter cada declaração em `TaskNode` e validá-la
    - Rejeitar ids duplicados
    - Dividir computações com vários conjuntos de treino em tasks `<id>.train<i>`
    - Calcular a fingerprint de cada declaração (reset `#`)

Princípios fundamentais:
    - Cenários inválidos são falhas fatais (ScenarioError)
    - A mesma entrada sempre produz os mesmos nós, na mesma ordem

Limites explícitos:
    - Não resolve dependências
    - Não paraleliza nem expande padrões
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Set, Union

import yaml  # PyYAML

from mlprocess.core.config.hashing import compute_config_hash
from mlprocess.core.exceptions import (
    DuplicateTaskIdError,
    InvalidDataSourceError,
    InvalidTaskIdError,
    MissingSectionError,
    NoMatchingDataNumbersError,
    ScenarioError,
)

from .data_source import DataSource
from .task_node import AlgorithmDescriptor, TaskNode, validate_node
from .types import DataSourceKind, TaskKind


SECTIONS = ("input", "output", "train", "devel", "eval", "data")
ALGORITHM_KEYS = ("algorithm", "filter", "metric")


@dataclass
class Scenario:
    """Cenário carregado: caminho de origem e nós na ordem de declaração."""

    path: str
    nodes: List[TaskNode] = field(default_factory=list)

    def by_origin(self) -> Dict[str, TaskNode]:
        """Primeiro nó de cada task declarada (nós divididos compartilham a declaração)."""
        result: Dict[str, TaskNode] = {}
        for node in self.nodes:
            result.setdefault(node.origin, node)
        return result


# ---------------------------------------------------------------------------
# Fingerprints
# ---------------------------------------------------------------------------

def declaration_fingerprint(node: TaskNode) -> str:
    """
    Fingerprint `<estrutura>:<parâmetros>` de uma declaração.

    A primeira metade ignora os parâmetros do algoritmo; assim o reset `#`
    distingue mudanças só de parâmetros (corrigidas no próprio plano) de
    mudanças estruturais (que exigem reconstrução).
    """
    declared = node.to_dict()
    for volatile in ("depends_on", "depended_by", "status", "origin", "fingerprint", "error"):
        declared.pop(volatile, None)
    parameters = declared["algorithm"].pop("parameters", "")
    structure = compute_config_hash(declared)
    params = compute_config_hash({"parameters": parameters})
    return f"{structure}:{params}"


def fingerprint_structure(fingerprint: str) -> str:
    return (fingerprint or "").split(":", 1)[0]


# ---------------------------------------------------------------------------
# Leitura do documento
# ---------------------------------------------------------------------------

def _read_document(path: Path) -> Any:
    if not path.is_file():
        raise ScenarioError(
            f"Cenário não encontrado: {path}",
            details={"path": str(path)},
        )

    suffix = path.suffix.lower()
    try:
        with path.open("r", encoding="utf-8") as f:
            if suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ScenarioError(
            f"Cenário malformado: {path}",
            details={"path": str(path), "reason": str(e)},
        ) from e


def _parameters_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return "; ".join(f"{k}={v}" for k, v in value.items())
    return str(value)


def _parse_algorithm(raw: Dict[str, Any], kind: TaskKind, task_id: str) -> AlgorithmDescriptor:
    present = [k for k in ALGORITHM_KEYS if k in raw]
    details = {"task_id": task_id, "kind": kind.value}

    if not present:
        raise MissingSectionError(
            f"Task '{task_id}': elemento '{kind.algorithm_element}' ausente",
            details=details,
        )
    if len(present) > 1:
        raise InvalidDataSourceError(
            f"Task '{task_id}': mais de um elemento de algoritmo declarado ({', '.join(present)})",
            details=details,
        )

    key = present[0]
    if key not in ("algorithm", kind.algorithm_element):
        raise InvalidDataSourceError(
            f"Task '{task_id}': elemento '{key}' inválido para tasks {kind.value}",
            details=details,
            hint=f"Use '{kind.algorithm_element}' (ou 'algorithm').",
        )

    value = raw[key]
    if isinstance(value, str):
        return AlgorithmDescriptor(name=value.strip())
    if not isinstance(value, dict):
        raise InvalidDataSourceError(f"Task '{task_id}': algoritmo malformado", details=details)

    return AlgorithmDescriptor(
        name=str(value.get("name", "") or "").strip(),
        parameters=_parameters_to_string(value.get("parameters")),
        parallelizable=bool(value.get("parallelizable", False)),
    )


def _parse_section(raw: Dict[str, Any], section: str, task_id: str) -> List[DataSource]:
    items = raw.get(section)
    if items is None:
        return []
    if not isinstance(items, list):
        raise InvalidDataSourceError(
            f"Task '{task_id}': seção {section} deve ser uma lista",
            details={"task_id": task_id, "section": section},
        )
    sources: List[DataSource] = []
    for item in items:
        try:
            sources.append(DataSource.from_dict(item))
        except ValueError as e:
            raise InvalidDataSourceError(
                f"Task '{task_id}': fonte de dados inválida na seção {section}",
                details={"task_id": task_id, "section": section, "reason": str(e)},
            ) from e
    return sources


def parse_task(raw: Any) -> TaskNode:
    """
    Converte uma declaração de task em `TaskNode` validado.

    Raises:
        ScenarioError: (ou subclasses) para qualquer declaração inválida.
    """
    if not isinstance(raw, dict):
        raise ScenarioError(f"Declaração de task deve ser um mapa, recebido: {type(raw).__name__}")

    task_id = raw.get("id")
    if not isinstance(task_id, str) or not task_id.strip():
        raise InvalidTaskIdError("task id must be a non-empty string", details={"id": task_id})
    task_id = task_id.strip()

    try:
        kind = TaskKind(str(raw.get("kind", "")).lower())
    except ValueError as e:
        raise ScenarioError(
            f"Task '{task_id}': tipo de task desconhecido: {raw.get('kind')!r}",
            details={"task_id": task_id},
            hint="Tipos válidos: computation, manipulation, evaluation.",
        ) from e

    sections = {s: _parse_section(raw, s, task_id) for s in SECTIONS}
    node = TaskNode(
        id=task_id,
        kind=kind,
        algorithm=_parse_algorithm(raw, kind, task_id),
        origin=task_id,
        **sections,
    )
    validate_node(node)
    node.fingerprint = declaration_fingerprint(node)
    return node


# ---------------------------------------------------------------------------
# Divisão por conjunto de treino
# ---------------------------------------------------------------------------

def _unique_id(base: str, taken: Set[str]) -> str:
    candidate, n = base, 0
    while candidate in taken:
        n += 1
        candidate = f"{base}-{n}"
    taken.add(candidate)
    return candidate


def split_by_train_set(node: TaskNode, taken: Set[str]) -> List[TaskNode]:
    """
    Divide uma computação com `n > 1` conjuntos de treino em `n` tasks.

    Cada parte recebe o i-ésimo elemento de train/devel/eval. Saídas feature
    são mantidas (derivadas por dataset de eval); as demais saídas devem
    ser `n` e são pareadas com os conjuntos.

    Computações paralelizáveis não são divididas aqui: o paralelizador,
    que conhece o orçamento de workers, decide entre usar as partições
    diretamente e dividir por conjunto de treino.
    """
    n = len(node.train)
    if node.kind != TaskKind.COMPUTATION or n <= 1 or node.algorithm.parallelizable:
        return [node]

    features = [o for o in node.output if o.kind == DataSourceKind.FEATURE]
    others = [o for o in node.output if o.kind != DataSourceKind.FEATURE]
    if others and len(others) != n:
        raise NoMatchingDataNumbersError(
            f"Task '{node.id}': {len(others)} saídas não-feature para {n} conjuntos de treino",
            details={"task_id": node.id, "train": n, "output": len(others)},
        )

    parts: List[TaskNode] = []
    for i in range(n):
        parts.append(
            node.clone(
                _unique_id(f"{node.id}.train{i}", taken),
                train=[node.train[i]],
                devel=[node.devel[i]] if node.devel else [],
                eval=[node.eval[i]],
                output=features + ([others[i]] if others else []),
            )
        )
    return parts


# ---------------------------------------------------------------------------
# API pública
# ---------------------------------------------------------------------------

def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Carrega, valida e normaliza um cenário.

    Returns:
        Scenario: nós na ordem de declaração (com divisões por treino aplicadas).

    Raises:
        ScenarioError: cenário ausente, malformado ou inválido.
        DuplicateTaskIdError: duas tasks com o mesmo id.
    """
    path = Path(path)
    document = _read_document(path)

    if isinstance(document, dict):
        tasks = document.get("tasks")
    else:
        tasks = document
    if not isinstance(tasks, list):
        raise ScenarioError(
            f"Cenário sem lista 'tasks': {path}",
            details={"path": str(path)},
        )

    declared: List[TaskNode] = []
    seen: Set[str] = set()
    for raw in tasks:
        node = parse_task(raw)
        if node.id in seen:
            raise DuplicateTaskIdError(
                f"Duplicate task id: {node.id}",
                details={"task_id": node.id},
            )
        seen.add(node.id)
        declared.append(node)

    taken: Set[str] = set(seen)
    nodes: List[TaskNode] = []
    for node in declared:
        nodes.extend(split_by_train_set(node, taken))

    return Scenario(path=str(path), nodes=nodes)

