# src/mlprocess/tasks/manipulation/data_merger.py
"""Task embutida: data_merger (v1).

Concatena grupos consecutivos de entradas CSV, um grupo por saída.
O número de entradas deve ser múltiplo do número de saídas.
"""

from __future__ import annotations

import pandas as pd

from mlprocess.core.exceptions import WrongNumberOfInputsError
from mlprocess.core.tasks.task import BaseTask

from ..io import read_table, write_table


class DataMerger(BaseTask):
    def perform(self) -> None:
        self.require_inputs(minimum=1)
        if not self.outputs or len(self.inputs) % len(self.outputs):
            raise WrongNumberOfInputsError(
                f"Task '{self.task_id}': {len(self.inputs)} entradas não se dividem em {len(self.outputs)} saídas",
                details={"task_id": self.task_id, "inputs": len(self.inputs), "outputs": len(self.outputs)},
            )

        group = len(self.inputs) // len(self.outputs)
        for k, out in enumerate(self.outputs):
            frames = [read_table(p, task_id=self.task_id) for p in self.inputs[k * group:(k + 1) * group]]
            write_table(pd.concat(frames, ignore_index=True), out, task_id=self.task_id)
