# src/mlprocess/core/engine/worker.py
"""
Worker: laço de reivindicação e execução de tasks.

Cada Worker repete:
    1. reivindica nós prontos no Plan Store
    2. NOTHING_READY → espera `base_delay + uniform(0, jitter)` e tenta de novo
    3. EXHAUSTED → encerra
    4. executa cada nó reivindicado e relata DONE ou FAILED

Política de erros:
    - exceção da Task → nó FAILED com ErrorPayload; o laço continua
    - PlanStoreError → registrada no log; encerra apenas este Worker

Id do Worker: `<número>@<host>`.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from mlprocess.core.context import ProcessContext, hostname
from mlprocess.core.errors import exception_to_payload
from mlprocess.core.exceptions import PlanStoreError
from mlprocess.core.scenario.task_node import TaskNode
from mlprocess.core.scenario.types import DataSourceKind, TaskStatus
from mlprocess.core.store.plan_store import ClaimState, PlanStore
from mlprocess.core.tasks.task import Task


@dataclass
class WorkerStats:
    done: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    waits: int = 0
    stopped_by_error: bool = False


def instantiate(ctx: ProcessContext, node: TaskNode) -> Task:
    """Cria a Task de um nó pelo registro de algoritmos do contexto."""

    def as_arg(source) -> str:
        if source.kind == DataSourceKind.FILE:
            return str(ctx.resolve(source.id))
        return source.id

    return ctx.registry.create(
        node.algorithm.name,
        task_id=node.id,
        parameters=node.algorithm.parameter_map(),
        inputs=[as_arg(s) for s in node.task_inputs()],
        outputs=[as_arg(s) for s in node.output],
    )


class Worker:
    def __init__(
        self,
        ctx: ProcessContext,
        store: PlanStore,
        number: int,
        *,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.ctx = ctx
        self.store = store
        self.number = number
        self.id = f"{number}@{hostname()}"
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.stats = WorkerStats()

    def _backoff(self) -> float:
        backoff: Dict[str, Any] = self.ctx.scheduler["backoff"]
        return float(backoff["base_delay"]) + self._rng.uniform(0.0, float(backoff["jitter"]))

    def execute(self, node: TaskNode) -> Tuple[TaskStatus, Optional[Dict[str, Any]]]:
        """Executa um nó; nunca propaga exceções da Task."""
        self.ctx.log(task_id=node.id, level="info", message=f"Iniciando ({node.algorithm.name})", worker=self.id)
        started = time.monotonic()
        try:
            task = instantiate(self.ctx, node)
            task.perform()
        except Exception as e:
            payload = exception_to_payload(e, task_id=node.id)
            self.ctx.log(
                task_id=node.id,
                level="error",
                message=f"Falhou: {payload.message}",
                worker=self.id,
                error=payload.to_dict(),
            )
            return TaskStatus.FAILED, payload.to_dict()

        self.ctx.log(
            task_id=node.id,
            level="info",
            message="Concluída",
            worker=self.id,
            seconds=round(time.monotonic() - started, 3),
        )
        return TaskStatus.DONE, None

    def run(self) -> WorkerStats:
        count = int(self.ctx.scheduler["retrieve_count"])
        while True:
            try:
                claim = self.store.claim(self.id, count)
            except PlanStoreError as e:
                self.ctx.log(task_id=None, level="error", message=f"Plan Store inacessível: {e}", worker=self.id)
                self.stats.stopped_by_error = True
                return self.stats

            if claim.state == ClaimState.EXHAUSTED:
                self.ctx.log(task_id=None, level="debug", message="Nenhuma task restante", worker=self.id)
                return self.stats

            if claim.state == ClaimState.NOTHING_READY:
                delay = self._backoff()
                self.stats.waits += 1
                self.ctx.log(task_id=None, level="debug", message=f"Aguardando {delay:.2f}s", worker=self.id)
                self._sleep(delay)
                continue

            for node in claim.nodes:
                status, error = self.execute(node)
                (self.stats.done if status == TaskStatus.DONE else self.stats.failed).append(node.id)
                try:
                    self.store.report(node.id, status, error)
                except PlanStoreError as e:
                    self.ctx.log(task_id=node.id, level="error", message=f"Plan Store inacessível: {e}", worker=self.id)
                    self.stats.stopped_by_error = True
                    return self.stats
