# src/mlprocess/core/context.py
"""
ProcessContext: contexto canônico de execução de um processo mlprocess.

Este módulo define o **ProcessContext**, a estrutura passada
explicitamente ao Plan Store, aos Workers e às Tasks. Substitui
qualquer estado global: configuração efetiva, caminhos, registro de
algoritmos e log estruturado vivem aqui.

Responsabilidades:
- expor a configuração efetiva (defaults ⟵ arquivo ⟵ CLI)
- resolver caminhos de arquivos relativos ao diretório de trabalho
- registrar eventos estruturados (thread-safe) e repassá-los ao `logging`

Princípios fundamentais:
- Um contexto por processo; threads de worker compartilham a mesma instância
- Nenhum componente lê parâmetros de variáveis globais
"""

from __future__ import annotations

import logging
import os
import socket
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, Dict, Optional, Union

from mlprocess.core.config import resolve_config
from mlprocess.core.planning.parallelizer import worker_budget


LOGGER_NAME = "mlprocess"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(message)s"
MAX_EVENTS = 10_000

# 0 = nada, 1 = importante, 2 = warnings, 3 = info, 4 = debug
VERBOSITY_LEVELS = {
    0: logging.CRITICAL + 10,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}

_LEVEL_NAMES = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def configure_logging(verbosity: int) -> logging.Logger:
    """Configura o logger `mlprocess` para a verbosidade 0–4 da CLI."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(VERBOSITY_LEVELS.get(int(verbosity), logging.WARNING))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def hostname() -> str:
    return socket.gethostname() or "localhost"


@dataclass
class ProcessContext:
    """
    Contexto de execução compartilhado por um processo.

    Campos canônicos:
    - process_id: `<pid>@<host>`
    - created_at: timestamp UTC de criação do contexto
    - config: configuração efetiva
    - scenario_path: arquivo do cenário
    - workdir: diretório base dos arquivos do cenário
    - registry: registro de algoritmos (AlgorithmRegistry)
    - events: log estruturado dos eventos mais recentes (`logging.max_events`)
    """

    process_id: str
    created_at: str
    config: Dict[str, Any]
    scenario_path: Path
    workdir: Path
    registry: Any = None

    events: Deque[Dict[str, Any]] = field(default_factory=lambda: deque(maxlen=MAX_EVENTS))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def create(
        cls,
        *,
        scenario_path: Union[str, Path],
        workdir: Optional[Union[str, Path]] = None,
        config: Optional[Dict[str, Any]] = None,
        registry: Any = None,
    ) -> "ProcessContext":
        scenario = Path(scenario_path)
        cfg = config if config is not None else resolve_config()
        return cls(
            process_id=f"{os.getpid()}@{hostname()}",
            created_at=datetime.now(timezone.utc).isoformat(),
            config=cfg,
            scenario_path=scenario,
            workdir=Path(workdir) if workdir is not None else scenario.resolve().parent,
            registry=registry,
            events=deque(maxlen=int(cfg["logging"].get("max_events", MAX_EVENTS))),
        )

    # -----------------------------
    # Configuração
    # -----------------------------
    @property
    def scheduler(self) -> Dict[str, Any]:
        return self.config["scheduler"]

    @property
    def threads(self) -> int:
        return int(self.scheduler["threads"])

    @property
    def workers(self) -> int:
        """Orçamento de paralelização: threads × instâncias (mínimo 1)."""
        return worker_budget(threads=self.threads, instances=int(self.scheduler["instances"]))

    def resolve(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.workdir / p

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, task_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "process_id": self.process_id,
            "task_id": task_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

        prefix = f"[{task_id}] " if task_id else ""
        logging.getLogger(LOGGER_NAME).log(
            _LEVEL_NAMES.get(level.lower(), logging.INFO), "%s%s", prefix, message
        )
