# src/mlprocess/tasks/computation/classifier.py
"""Task embutida: classifier (v1).

Treina um classificador do ModelRegistry sobre a primeira entrada e
rotula cada uma das entradas seguintes (devel e eval).

Parâmetros:
- class_arg (obrigatório): coluna alvo
- model: id do modelo no ModelRegistry (padrão: dummy)
- features: colunas usadas, separadas por vírgula (padrão: colunas numéricas exceto o alvo)
- model_file: caminho opcional para persistir o modelo treinado (joblib)
- demais parâmetros: ajustes do modelo (ex.: n_neighbors=3)

Saídas: uma por entrada rotulada, com a coluna alvo substituída pela predição.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import joblib
import pandas as pd

from mlprocess.core.exceptions import InvalidParametersError, TaskIOError
from mlprocess.core.tasks.task import BaseTask

from ..io import read_table, write_table
from .model_registry import ModelRegistry


class Classifier(BaseTask):
    def __init__(self, *, registry: Optional[ModelRegistry] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.models = registry or ModelRegistry.v1()

    def _features(self, train: pd.DataFrame, target: str) -> List[str]:
        raw = self.parameters.get("features", "")
        if raw.strip():
            cols = [c.strip() for c in raw.split(",") if c.strip()]
        else:
            cols = [c for c in train.select_dtypes(include="number").columns if c != target]
        missing = [c for c in cols if c not in train.columns]
        if not cols or missing:
            raise InvalidParametersError(
                f"Task '{self.task_id}': colunas de features inválidas",
                details={"task_id": self.task_id, "features": cols, "missing": missing},
            )
        return cols

    def _estimator(self):
        model_id = self.param("model", "dummy")
        try:
            spec = self.models.get(model_id)
            return spec.build(spec.coerce(self.parameters))
        except KeyError as e:
            raise InvalidParametersError(
                f"Task '{self.task_id}': modelo desconhecido: {model_id}",
                details={"task_id": self.task_id, "model": model_id, "known": self.models.list_ids()},
            ) from e
        except (TypeError, ValueError) as e:
            raise InvalidParametersError(
                f"Task '{self.task_id}': parâmetros inválidos para {model_id}: {e}",
                details={"task_id": self.task_id, "model": model_id},
            ) from e

    def perform(self) -> None:
        self.require_inputs(minimum=2)
        self.require_outputs(len(self.inputs) - 1)
        target = self.param("class_arg")

        train = read_table(self.inputs[0], task_id=self.task_id)
        if target not in train.columns:
            raise InvalidParametersError(
                f"Task '{self.task_id}': coluna alvo '{target}' ausente no treino",
                details={"task_id": self.task_id, "class_arg": target},
            )
        features = self._features(train, target)

        estimator = self._estimator()
        estimator.fit(train[features], train[target])

        model_file = self.parameters.get("model_file")
        if model_file:
            try:
                Path(model_file).parent.mkdir(parents=True, exist_ok=True)
                joblib.dump(estimator, model_file)
            except OSError as e:
                raise TaskIOError(
                    f"Task '{self.task_id}': não foi possível salvar o modelo em {model_file}",
                    details={"task_id": self.task_id, "path": model_file, "reason": str(e)},
                ) from e

        for path, out in zip(self.inputs[1:], self.outputs):
            frame = read_table(path, task_id=self.task_id)
            missing = [c for c in features if c not in frame.columns]
            if missing:
                raise InvalidParametersError(
                    f"Task '{self.task_id}': colunas ausentes em {path}: {missing}",
                    details={"task_id": self.task_id, "path": path, "missing": missing},
                )
            labeled = frame.copy()
            labeled[target] = estimator.predict(frame[features]) if len(frame) else []
            write_table(labeled, out, task_id=self.task_id)
