"""
mlprocess: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do mlprocess.
Erros são artefatos persistidos no plano (campo `error` de nós FAILED)
e fazem parte do contrato operacional do sistema, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import MLProcessException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do mlprocess.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorPayload":
        return cls(
            type=str(data.get("type", "")),
            message=str(data.get("message", "")),
            details=dict(data.get("details", {}) or {}),
            hint=data.get("hint"),
        )


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Execução de Tasks
TASK_EXECUTION_ERROR = "TASK_EXECUTION_ERROR"
TASK_EXPANSION_ERROR = "TASK_EXPANSION_ERROR"

# Plan Store
PLAN_IO_ERROR = "PLAN_IO_ERROR"
PLAN_INVALID = "PLAN_INVALID"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def task_execution_error(
    *,
    task_id: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log do worker e os arquivos de entrada da task. Use --reset para reexecutá-la.",
) -> ErrorPayload:
    return ErrorPayload(
        type=TASK_EXECUTION_ERROR,
        message="Falha inesperada durante a execução da task",
        details={
            "task_id": task_id,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def task_expansion_error(
    *,
    task_id: str,
    reason: str,
    hint: str = "Revise os padrões '*', '**' e '***' das entradas e saídas da task no cenário.",
) -> ErrorPayload:
    return ErrorPayload(
        type=TASK_EXPANSION_ERROR,
        message="Expansão de padrões da task falhou",
        details={"task_id": task_id, "reason": reason},
        hint=hint,
    )


def plan_io_error(*, path: str, reason: str) -> ErrorPayload:
    return ErrorPayload(
        type=PLAN_IO_ERROR,
        message="Não foi possível acessar o arquivo do plano",
        details={"path": path, "reason": reason},
        hint="Verifique permissões do diretório do cenário e se o sistema de arquivos suporta locks.",
    )


def exception_to_payload(exc: BaseException, *, task_id: Optional[str] = None) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - MLProcessException: já vem com message/details/hint; o nome da classe é o código.
    - Outras exceções: encapsular como TASK_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, MLProcessException):
        details = dict(exc.details or {})
        if task_id is not None:
            details.setdefault("task_id", task_id)
        return ErrorPayload(
            type=exc.__class__.__name__,
            message=str(exc) or "Erro de execução",
            details=details,
            hint=exc.hint,
        )

    return task_execution_error(
        task_id=task_id or "",
        exc_type=exc.__class__.__name__,
        exc_message=str(exc),
    )
