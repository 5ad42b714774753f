# src/mlprocess/tasks/evaluation/eval_classification.py
"""Task embutida: eval_classification (v1).

Compara rótulos de referência com rótulos preditos.

Entradas: pares gold/teste, a primeira metade são os arquivos de
referência e a segunda metade os arquivos preditos (mesma ordem).
Todos os pares são concatenados antes do cálculo.

Parâmetros:
- class_arg (obrigatório): coluna com o rótulo

Saída única (YAML):
- accuracy, precision_macro, recall_macro, f1_macro, support
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd
import yaml  # PyYAML
from sklearn.metrics import accuracy_score, precision_recall_fscore_support

from mlprocess.core.exceptions import InvalidParametersError, TaskIOError, WrongNumberOfInputsError
from mlprocess.core.tasks.task import BaseTask

from ..io import read_table


class EvalClassification(BaseTask):
    def _column(self, path: str, target: str) -> pd.Series:
        frame = read_table(path, task_id=self.task_id)
        if target not in frame.columns:
            raise InvalidParametersError(
                f"Task '{self.task_id}': coluna '{target}' ausente em {path}",
                details={"task_id": self.task_id, "path": path, "class_arg": target},
            )
        return frame[target].astype(str)

    def metrics(self) -> Dict[str, Any]:
        self.require_inputs(minimum=2)
        if len(self.inputs) % 2:
            raise WrongNumberOfInputsError(
                f"Task '{self.task_id}': entradas devem formar pares gold/teste",
                details={"task_id": self.task_id, "inputs": len(self.inputs)},
            )
        target = self.param("class_arg")

        half = len(self.inputs) // 2
        gold = [self._column(p, target) for p in self.inputs[:half]]
        pred = [self._column(p, target) for p in self.inputs[half:]]
        for g, t, path in zip(gold, pred, self.inputs[half:]):
            if len(g) != len(t):
                raise TaskIOError(
                    f"Task '{self.task_id}': {path} tem {len(t)} linhas, referência tem {len(g)}",
                    details={"task_id": self.task_id, "path": path},
                )

        y_true = pd.concat(gold, ignore_index=True)
        y_pred = pd.concat(pred, ignore_index=True)
        precision, recall, f1, _ = precision_recall_fscore_support(
            y_true, y_pred, average="macro", zero_division=0
        )
        return {
            "accuracy": float(accuracy_score(y_true, y_pred)),
            "precision_macro": float(precision),
            "recall_macro": float(recall),
            "f1_macro": float(f1),
            "support": int(len(y_true)),
        }

    def perform(self) -> None:
        self.require_outputs(1)
        result = self.metrics()
        out = Path(self.outputs[0])
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            with out.open("w", encoding="utf-8") as f:
                yaml.safe_dump(result, f, sort_keys=True)
        except OSError as e:
            raise TaskIOError(
                f"Task '{self.task_id}': não foi possível escrever {out}",
                details={"task_id": self.task_id, "path": str(out), "reason": str(e)},
            ) from e
