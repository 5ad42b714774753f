# src/mlprocess/core/config/defaults.py
"""Configuração padrão (v1) de um processo mlprocess."""

from __future__ import annotations

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "scheduler": {
        # threads de worker neste processo
        "threads": 1,
        # número informativo de processos simultâneos (orçamento de paralelização)
        "instances": 1,
        # quantos nós um worker reivindica por acesso ao plano
        "retrieve_count": 1,
        "backoff": {
            # espera = base_delay + uniform(0, jitter), em segundos
            "base_delay": 2.0,
            "jitter": 3.0,
        },
    },
    "plan": {
        "todo_suffix": ".todo",
        "status_suffix": ".status",
        "reset_suffix": ".reset",
        # segundos; -1 espera indefinidamente pelo lock
        "lock_timeout": -1,
    },
    "logging": {
        # 0 = nada, 1 = importante, 2 = warnings, 3 = info, 4 = debug
        "verbosity": 2,
        # eventos estruturados retidos em memória pelo ProcessContext
        "max_events": 10000,
    },
}
