"""
mlprocess: Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do mlprocess.

Objetivo:
- Permitir que loader, planejamento, Plan Store e Tasks levantem exceções
  semânticas tipadas, agrupadas por categoria de tratamento
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Categorias (e política de tratamento):
- ParamError      → parâmetros de linha de comando; fatal antes de qualquer plano
- ScenarioError   → cenário/dados inválidos; fatal na construção do plano
- TaskError       → falha de execução de uma Task; recuperada por nó (FAILED)
- PlanStoreError  → lock/arquivo do plano; fatal apenas para o worker

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Mensagem curta e humana; nunca embutir stack trace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class MLProcessException(Exception):
    """Base class para exceções internas do mlprocess.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Parâmetros (CLI)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ParamError(MLProcessException):
    """Parâmetro de linha de comando ausente, malformado ou fora do domínio."""


# ---------------------------------------------------------------------------
# Cenário / Dados
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ScenarioError(MLProcessException):
    """Cenário inválido: nenhum plano parcial é persistido."""


@dataclass(eq=False)
class InvalidTaskIdError(ScenarioError):
    """Id de task ausente ou vazio."""


@dataclass(eq=False)
class DuplicateTaskIdError(ScenarioError):
    """Duas tasks declaram o mesmo id."""


@dataclass(eq=False)
class DuplicateOutputError(ScenarioError):
    """Uma mesma fonte de dados é produzida por mais de uma task."""


@dataclass(eq=False)
class DatasetNeverProducedError(ScenarioError):
    """Um dataset é consumido, mas nenhuma task o produz."""


@dataclass(eq=False)
class CannotParallelizeManipulationError(ScenarioError):
    """Tasks de manipulação não podem ser marcadas como paralelizáveis."""


@dataclass(eq=False)
class MissingSectionError(ScenarioError):
    """Seção obrigatória (input, output, train, eval, data) ausente."""


@dataclass(eq=False)
class NoMatchingDataNumbersError(ScenarioError):
    """Quantidades de train/devel/eval não coincidem."""


@dataclass(eq=False)
class InvalidDataSourceError(ScenarioError):
    """Seção, tipo de fonte de dados ou elemento de algoritmo inválido."""


@dataclass(eq=False)
class LoopDependencyError(ScenarioError):
    """O grafo de dependências contém um ciclo."""


@dataclass(eq=False)
class PatternSpecificationError(ScenarioError):
    """Padrões `*`, `**` ou `***` especificados de forma inconsistente."""


# ---------------------------------------------------------------------------
# Execução de Tasks
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class TaskError(MLProcessException):
    """Falha de execução de uma Task (recuperada no nível do nó)."""


@dataclass(eq=False)
class WrongNumberOfInputsError(TaskError):
    """Cardinalidade de entradas incompatível com a Task."""


@dataclass(eq=False)
class WrongNumberOfOutputsError(TaskError):
    """Cardinalidade de saídas incompatível com a Task."""


@dataclass(eq=False)
class InvalidParametersError(TaskError):
    """Parâmetros da Task ausentes ou inválidos."""


@dataclass(eq=False)
class TaskIOError(TaskError):
    """Erro de I/O durante a execução da Task."""


@dataclass(eq=False)
class UnknownAlgorithmError(TaskError):
    """Nome de algoritmo não registrado no AlgorithmRegistry."""


# ---------------------------------------------------------------------------
# Plan Store
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class PlanStoreError(MLProcessException):
    """Falha de acesso ao Plan Store (fatal apenas para o worker)."""


@dataclass(eq=False)
class PlanIOError(PlanStoreError):
    """Lock ou arquivo do plano inacessível."""


@dataclass(eq=False)
class InvalidPlanError(PlanStoreError):
    """Conteúdo do arquivo do plano corrompido ou inconsistente."""
