# src/mlprocess/core/engine/process.py
"""
Process: um processo mlprocess com `threads` Workers.

Responsabilidades:
    - garantir que o plano existe (construção + resets numa seção crítica)
    - lançar os Workers em threads e aguardá-los

Vários processos podem rodar o mesmo cenário simultaneamente; toda a
coordenação passa pelo Plan Store.
"""

from __future__ import annotations

import threading
from typing import List, Optional, Sequence

from mlprocess.core.context import ProcessContext
from mlprocess.core.planning.plan import Plan
from mlprocess.core.planning.planner import build_plan
from mlprocess.core.store.plan_store import PlanStore

from .worker import Worker, WorkerStats


class Process:
    def __init__(self, ctx: ProcessContext, *, store: Optional[PlanStore] = None) -> None:
        self.ctx = ctx
        self.store = store or PlanStore(
            ctx.scenario_path,
            config=ctx.config,
            workdir=ctx.workdir,
            log=ctx.log,
        )
        self.workers: List[Worker] = []

    def build(self) -> Plan:
        return build_plan(self.ctx.scenario_path, workers=self.ctx.workers)

    def prepare(self, resets: Sequence[str] = ()) -> Plan:
        """Constrói o plano se necessário e aplica resets. ScenarioError propaga."""
        return self.store.ensure_built(self.build, resets=resets)

    def run(self, resets: Sequence[str] = ()) -> List[WorkerStats]:
        self.prepare(resets)

        self.workers = [Worker(self.ctx, self.store, n) for n in range(self.ctx.threads)]
        threads = [
            threading.Thread(target=w.run, name=f"worker-{w.number}", daemon=True)
            for w in self.workers
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = [w.stats for w in self.workers]
        done = sum(len(s.done) for s in stats)
        failed = sum(len(s.failed) for s in stats)
        self.ctx.log(
            task_id=None,
            level="warning" if failed else "info",
            message=f"Processo encerrado: {done} concluída(s), {failed} com falha",
        )
        return stats
