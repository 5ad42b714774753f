# src/mlprocess/core/tasks/task.py
"""
Contrato canônico de Task do mlprocess.

Uma Task é a implementação concreta de um algoritmo do cenário. O Worker
a obtém pelo `AlgorithmRegistry` e chama `perform()` uma única vez.

Contrato:
    - fábrica: `factory(*, task_id, parameters, inputs, outputs) -> Task`
    - `perform()` é síncrono e idempotente numa reexecução
    - falhas são sinalizadas com exceções da família `TaskError`

Entradas e saídas chegam como strings: caminhos já resolvidos contra o
diretório de trabalho para arquivos, ids lógicos para datasets/features.

Limites explícitos:
    - Tasks não conhecem o plano, o Plan Store nem outros Workers
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, runtime_checkable

from mlprocess.core.exceptions import (
    InvalidParametersError,
    WrongNumberOfInputsError,
    WrongNumberOfOutputsError,
)


@runtime_checkable
class Task(Protocol):
    """Objeto executável devolvido pelas fábricas registradas."""

    task_id: str

    def perform(self) -> None:
        ...


class TaskFactory(Protocol):
    def __call__(
        self,
        *,
        task_id: str,
        parameters: Dict[str, str],
        inputs: List[str],
        outputs: List[str],
    ) -> Task:
        ...


class BaseTask:
    """
    Base opcional para Tasks embutidas.

    Guarda os argumentos da fábrica e oferece validação de cardinalidade e
    leitura tipada de parâmetros, sempre com exceções `TaskError`.
    """

    def __init__(
        self,
        *,
        task_id: str,
        parameters: Dict[str, str],
        inputs: List[str],
        outputs: List[str],
    ) -> None:
        self.task_id = task_id
        self.parameters = dict(parameters or {})
        self.inputs = list(inputs)
        self.outputs = list(outputs)

    def perform(self) -> None:  # pragma: no cover
        raise NotImplementedError

    # -----------------------------
    # Cardinalidade
    # -----------------------------
    def require_inputs(self, *, minimum: int = 1, maximum: Optional[int] = None) -> None:
        n = len(self.inputs)
        if n < minimum or (maximum is not None and n > maximum):
            raise WrongNumberOfInputsError(
                f"Task '{self.task_id}': {n} entradas (esperado {minimum}..{maximum if maximum is not None else 'n'})",
                details={"task_id": self.task_id, "inputs": n},
            )

    def require_outputs(self, expected: int) -> None:
        if len(self.outputs) != expected:
            raise WrongNumberOfOutputsError(
                f"Task '{self.task_id}': {len(self.outputs)} saídas, esperado {expected}",
                details={"task_id": self.task_id, "outputs": len(self.outputs), "expected": expected},
            )

    # -----------------------------
    # Parâmetros
    # -----------------------------
    def param(self, name: str, default: Optional[str] = None) -> str:
        if name in self.parameters:
            return self.parameters[name]
        if default is None:
            raise InvalidParametersError(
                f"Task '{self.task_id}': parâmetro obrigatório '{name}' ausente",
                details={"task_id": self.task_id, "parameter": name},
            )
        return default

    def int_param(self, name: str, default: Optional[int] = None, *, minimum: Optional[int] = None) -> int:
        raw = self.param(name, None if default is None else str(default))
        try:
            value = int(raw)
        except ValueError as e:
            raise InvalidParametersError(
                f"Task '{self.task_id}': parâmetro '{name}' deve ser inteiro, recebido {raw!r}",
                details={"task_id": self.task_id, "parameter": name},
            ) from e
        if minimum is not None and value < minimum:
            raise InvalidParametersError(
                f"Task '{self.task_id}': parâmetro '{name}' deve ser >= {minimum}",
                details={"task_id": self.task_id, "parameter": name, "value": value},
            )
        return value
