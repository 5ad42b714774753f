# tests/conftest.py
"""
Fixtures compartilhados para testes do mlprocess.

Este módulo define fixtures reutilizáveis que fornecem:
- escrita de cenários YAML em diretórios temporários
- contexto de processo (ProcessContext) com backoff nulo
- pequenos datasets CSV de classificação

Decisões arquiteturais:
    - Todo I/O acontece sob `tmp_path`
    - Configuração é resolvida pelo mesmo caminho da CLI (`resolve_config`)
    - Tasks usadas nos testes são as embutidas (`default_registry`)

Limites explícitos:
    - Não executa Workers nem Process
    - Não contém asserts
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import pytest
import yaml

from mlprocess.core.config import resolve_config
from mlprocess.core.context import ProcessContext
from mlprocess.tasks import default_registry


@pytest.fixture
def write_scenario(tmp_path: Path) -> Callable[..., Path]:
    """Grava `{"tasks": tasks}` em `tmp_path/<name>` e devolve o caminho."""

    def _write(tasks: List[Dict[str, Any]], name: str = "scenario.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump({"tasks": tasks}, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_ctx() -> Callable[..., ProcessContext]:
    """Cria um ProcessContext sem espera entre tentativas de reivindicação."""

    def _make(scenario_path: Path, *, workdir: Optional[Path] = None, **scheduler: Any) -> ProcessContext:
        overrides = {
            "scheduler": {"backoff": {"base_delay": 0.0, "jitter": 0.0}, **scheduler},
            "logging": {"verbosity": 0},
        }
        return ProcessContext.create(
            scenario_path=scenario_path,
            workdir=workdir,
            config=resolve_config(overrides=overrides),
            registry=default_registry(),
        )

    return _make


@pytest.fixture
def iris_like() -> pd.DataFrame:
    """Doze linhas, duas features numéricas e rótulos separáveis."""
    rows = []
    for i in range(6):
        rows.append({"x1": 0.1 * i, "x2": 1.0 + 0.1 * i, "label": "a"})
        rows.append({"x1": 5.0 + 0.1 * i, "x2": 9.0 - 0.1 * i, "label": "b"})
    return pd.DataFrame(rows)


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[pd.DataFrame, str], Path]:
    def _write(df: pd.DataFrame, relative: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False)
        return path

    return _write
