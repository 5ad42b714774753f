# src/mlprocess/core/tasks/registry.py
"""
Registro explícito de algoritmos.

O `AlgorithmRegistry` associa o nome declarado no cenário
(`algorithm.name`) à fábrica da Task correspondente. Não há descoberta
automática: toda implementação é registrada por código.

Invariantes:
    - Cada nome é registrado uma única vez
    - Nomes desconhecidos levantam UnknownAlgorithmError no momento da execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from mlprocess.core.exceptions import UnknownAlgorithmError

from .task import Task, TaskFactory


@dataclass
class AlgorithmRegistry:
    """Catálogo nome → fábrica de Task."""

    _factories: Dict[str, TaskFactory] = field(default_factory=dict, init=False, repr=False)

    def register(self, name: str, factory: TaskFactory) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("algorithm name must be a non-empty string")
        if name in self._factories:
            raise ValueError(f"algorithm already registered: {name}")
        self._factories[name] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def create(
        self,
        name: str,
        *,
        task_id: str,
        parameters: Dict[str, str],
        inputs: List[str],
        outputs: List[str],
    ) -> Task:
        if name not in self._factories:
            raise UnknownAlgorithmError(
                f"Algoritmo desconhecido: {name}",
                details={"algorithm": name, "task_id": task_id, "known": self.names()},
                hint="Registre o algoritmo no AlgorithmRegistry ou corrija o nome no cenário.",
            )
        return self._factories[name](
            task_id=task_id,
            parameters=parameters,
            inputs=inputs,
            outputs=outputs,
        )
