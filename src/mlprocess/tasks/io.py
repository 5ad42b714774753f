# src/mlprocess/tasks/io.py
"""Leitura e escrita de tabelas CSV para as Tasks embutidas."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import pandas as pd

from mlprocess.core.exceptions import TaskIOError


def read_table(path: Union[str, Path], *, task_id: str) -> pd.DataFrame:
    p = Path(path)
    try:
        return pd.read_csv(p)
    except FileNotFoundError as e:
        raise TaskIOError(
            f"Task '{task_id}': arquivo de entrada não encontrado: {p}",
            details={"task_id": task_id, "path": str(p)},
        ) from e
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise TaskIOError(
            f"Task '{task_id}': não foi possível ler {p}",
            details={"task_id": task_id, "path": str(p), "reason": str(e)},
        ) from e


def write_table(df: pd.DataFrame, path: Union[str, Path], *, task_id: str) -> None:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(p, index=False)
    except OSError as e:
        raise TaskIOError(
            f"Task '{task_id}': não foi possível escrever {p}",
            details={"task_id": task_id, "path": str(p), "reason": str(e)},
        ) from e
