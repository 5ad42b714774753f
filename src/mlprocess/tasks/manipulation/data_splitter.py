# src/mlprocess/tasks/manipulation/data_splitter.py
"""Task embutida: data_splitter (v1).

Divide cada CSV de entrada em `num_parts` blocos contíguos de linhas.

Parâmetros:
- num_parts (obrigatório, >= 1)

Saídas: `num_parts` por entrada, agrupadas por entrada
(entrada j → saídas `j*num_parts .. j*num_parts + num_parts - 1`).
Com menos linhas que partes, as últimas partes ficam vazias (apenas cabeçalho).
"""

from __future__ import annotations

import numpy as np

from mlprocess.core.tasks.task import BaseTask

from ..io import read_table, write_table


class DataSplitter(BaseTask):
    def perform(self) -> None:
        parts = self.int_param("num_parts", minimum=1)
        self.require_inputs(minimum=1)
        self.require_outputs(len(self.inputs) * parts)

        for j, path in enumerate(self.inputs):
            df = read_table(path, task_id=self.task_id)
            for i, rows in enumerate(np.array_split(np.arange(len(df)), parts)):
                write_table(df.iloc[rows], self.outputs[j * parts + i], task_id=self.task_id)
