# src/mlprocess/core/store/plan_store.py
"""
Plan Store: plano persistente compartilhado entre processos.

O plano vive em `<cenário>.todo` (JSON) e toda leitura-modificação-escrita
acontece sob um lock exclusivo em `<cenário>.todo.lock` (`filelock`),
combinado com um lock de thread para os workers do mesmo processo.

Operações:
    - ensure_built: constrói o plano se ausente e aplica resets pendentes
    - claim: reivindica até `count` nós prontos (expandindo padrões antes)
    - report: registra DONE/FAILED e promove dependentes
    - reset: aplica instruções de reset sob demanda

Após cada escrita, um resumo legível é gravado em `<cenário>.status`.

Resultado de `claim`:
    - CLAIMED: ao menos um nó reivindicado
    - NOTHING_READY: nenhum nó pronto, mas algum está IN_PROGRESS
      (o worker espera e tenta de novo)
    - EXHAUSTED: nenhum nó pronto e nenhum IN_PROGRESS. Inclui o caso em
      que restam nós WAITING atrás de um nó FAILED: sem reset, eles nunca
      ficam prontos, e o worker encerra.

Invariantes:
    - Um nó é reivindicado por no máximo um worker (lock + troca de status)
    - Erros de cenário durante a construção não deixam plano parcial
    - Falhas de lock ou de arquivo viram PlanStoreError
"""

from __future__ import annotations

import json
import os
import threading
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

from filelock import FileLock, Timeout

from mlprocess.core.config import DEFAULT_CONFIG
from mlprocess.core.errors import plan_io_error, task_expansion_error
from mlprocess.core.exceptions import InvalidPlanError, PatternSpecificationError, PlanIOError
from mlprocess.core.planning.expander import expand_node, needs_expansion
from mlprocess.core.planning.plan import Plan
from mlprocess.core.scenario.task_node import TaskNode
from mlprocess.core.scenario.types import TaskStatus

from .reset import apply_resets, parse_reset_instructions


LogFn = Callable[..., None]


class ClaimState(str, Enum):
    CLAIMED = "claimed"
    NOTHING_READY = "nothing_ready"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Claim:
    """Resultado de `PlanStore.claim`."""

    state: ClaimState
    nodes: List[TaskNode] = field(default_factory=list)


def _noop_log(**_: Any) -> None:
    return None


class PlanStore:
    """Acesso travado ao arquivo `.todo` de um cenário."""

    def __init__(
        self,
        scenario_path: Union[str, Path],
        *,
        config: Optional[Dict[str, Any]] = None,
        workdir: Optional[Union[str, Path]] = None,
        log: Optional[LogFn] = None,
    ) -> None:
        plan_cfg = (config or DEFAULT_CONFIG)["plan"]
        scenario = str(scenario_path)

        self.scenario_path = Path(scenario)
        self.todo_path = Path(scenario + plan_cfg["todo_suffix"])
        self.lock_path = Path(str(self.todo_path) + ".lock")
        self.status_path = Path(scenario + plan_cfg["status_suffix"])
        self.reset_path = Path(scenario + plan_cfg["reset_suffix"])
        self.workdir = Path(workdir) if workdir is not None else self.scenario_path.resolve().parent

        self._file_lock = FileLock(str(self.lock_path), timeout=float(plan_cfg["lock_timeout"]))
        self._thread_lock = threading.Lock()
        self._log = log or _noop_log

    # ------------------------------------------------------------------
    # Lock e I/O
    # ------------------------------------------------------------------
    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._thread_lock:
            try:
                self._file_lock.acquire()
            except (Timeout, OSError) as e:
                payload = plan_io_error(path=str(self.lock_path), reason=str(e))
                raise PlanIOError(payload.message, details=payload.details, hint=payload.hint) from e
            try:
                yield
            finally:
                self._file_lock.release()

    def _io_error(self, path: Path, exc: BaseException) -> PlanIOError:
        payload = plan_io_error(path=str(path), reason=str(exc))
        return PlanIOError(payload.message, details=payload.details, hint=payload.hint)

    def _read(self) -> Optional[Plan]:
        try:
            text = self.todo_path.read_text(encoding="utf-8") if self.todo_path.exists() else ""
        except OSError as e:
            raise self._io_error(self.todo_path, e) from e

        if not text.strip():
            return None
        try:
            return Plan.from_dict(json.loads(text))
        except ValueError as e:
            raise InvalidPlanError(
                f"Arquivo de plano inválido: {self.todo_path}",
                details={"path": str(self.todo_path), "reason": str(e)},
                hint="Use --reset '!' para reconstruir o plano a partir do cenário.",
            ) from e

    def _require(self) -> Plan:
        plan = self._read()
        if plan is None:
            raise InvalidPlanError(
                f"Plano ainda não construído: {self.todo_path}",
                details={"path": str(self.todo_path)},
            )
        return plan

    def _write(self, plan: Plan) -> None:
        tmp = self.todo_path.with_name(self.todo_path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(plan.to_dict(), indent=1, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.todo_path)
            self.status_path.write_text(render_status(plan), encoding="utf-8")
        except OSError as e:
            raise self._io_error(self.todo_path, e) from e

    def _consume_reset_file(self) -> List[str]:
        if not self.reset_path.exists():
            return []
        try:
            instructions = parse_reset_instructions(self.reset_path.read_text(encoding="utf-8"))
            self.reset_path.unlink()
        except OSError as e:
            raise self._io_error(self.reset_path, e) from e
        return instructions

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------
    def ensure_built(self, build: Callable[[], Plan], *, resets: Sequence[str] = ()) -> Plan:
        """
        Garante que o plano existe e aplica resets, numa única seção crítica.

        `build` é chamado apenas quando o arquivo está ausente ou vazio (ou
        por instruções `!`/`#`); se levantar ScenarioError, nada é escrito.
        """
        with self.locked():
            plan = self._read()
            built = plan is None
            if plan is None:
                plan = build()
                self._log(task_id=None, level="info", message=f"Plano construído com {len(plan)} tasks")

            instructions = list(resets) + self._consume_reset_file()
            if instructions:
                plan = apply_resets(plan, instructions, rebuild=build)
                self._log(task_id=None, level="info", message=f"Resets aplicados: {', '.join(instructions)}")

            if built or instructions:
                self._write(plan)
            return plan

    def snapshot(self) -> Plan:
        with self.locked():
            return self._require()

    def reset(self, instructions: Sequence[str], *, build: Callable[[], Plan]) -> Plan:
        with self.locked():
            plan = apply_resets(self._require(), instructions, rebuild=build)
            self._write(plan)
            return plan

    def claim(self, worker_id: str, count: int = 1) -> Claim:
        """
        Reivindica até `count` nós prontos, na ordem do plano.

        Nós com padrões de arquivo são expandidos antes da reivindicação;
        uma expansão inválida marca o nó como FAILED e a busca continua.
        """
        with self.locked():
            plan = self._require()
            claimed: List[TaskNode] = []
            changed = False

            i = 0
            while i < len(plan.nodes) and len(claimed) < max(1, count):
                if not plan.is_ready(i):
                    i += 1
                    continue

                node = plan.nodes[i]
                if needs_expansion(node):
                    changed = True
                    # expande numa cópia: uma falha não deixa clones parciais
                    work = Plan.from_dict(plan.to_dict())
                    try:
                        created = expand_node(work, i, base_dir=self.workdir)
                    except PatternSpecificationError as e:
                        node.status = TaskStatus.FAILED
                        node.error = task_expansion_error(task_id=node.id, reason=str(e)).to_dict()
                        self._log(task_id=node.id, level="error", message=f"Expansão falhou: {e}")
                    else:
                        plan = work
                        self._log(
                            task_id=node.id,
                            level="debug",
                            message=f"Expandido em {len(created)} task(s)",
                            created=created,
                        )
                    continue

                node.status = TaskStatus.IN_PROGRESS
                node.error = None
                claimed.append(node)
                changed = True
                self._log(task_id=node.id, level="debug", message=f"Reivindicada por {worker_id}", worker=worker_id)
                i += 1

            if changed:
                self._write(plan)

            if claimed:
                return Claim(ClaimState.CLAIMED, claimed)
            if any(n.status == TaskStatus.IN_PROGRESS for n in plan.nodes):
                return Claim(ClaimState.NOTHING_READY)
            return Claim(ClaimState.EXHAUSTED)

    def report(self, task_id: str, status: TaskStatus, error: Optional[Dict[str, Any]] = None) -> None:
        """Registra o resultado de uma task e promove dependentes prontos."""
        if status not in (TaskStatus.DONE, TaskStatus.FAILED):
            raise ValueError(f"status de retorno inválido: {status!r}")

        with self.locked():
            plan = self._require()
            index = plan.find(task_id)
            if index is None:
                raise InvalidPlanError(
                    f"Task desconhecida no plano: {task_id}",
                    details={"task_id": task_id, "path": str(self.todo_path)},
                )

            node = plan.nodes[index]
            node.status = status
            node.error = error if status == TaskStatus.FAILED else None

            if status == TaskStatus.DONE:
                for d in node.depended_by:
                    if plan.nodes[d].status == TaskStatus.WAITING and plan.predecessors_done(d):
                        plan.nodes[d].status = TaskStatus.PENDING

            self._write(plan)


def render_status(plan: Plan) -> str:
    """Resumo legível do plano (arquivo `.status`)."""
    counts = Counter(n.status.value for n in plan.nodes)
    header = ", ".join(f"{s.value}={counts.get(s.value, 0)}" for s in TaskStatus)
    lines = [f"# {plan.scenario}", f"# {len(plan.nodes)} tasks: {header}", ""]
    for node in plan.nodes:
        lines.append(node.describe())
        if node.depends_on:
            lines.append("    depends on: " + ", ".join(plan.nodes[j].id for j in node.depends_on))
        if node.error:
            lines.append(f"    error: {node.error.get('type')}: {node.error.get('message')}")
    return "\n".join(lines) + "\n"
