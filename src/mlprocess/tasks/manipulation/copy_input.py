# src/mlprocess/tasks/manipulation/copy_input.py
"""Task embutida: copy_input (v1).

Copia entradas selecionadas para as saídas, byte a byte.

Parâmetros:
- input_no: índices das entradas, separados por vírgula (padrão: todas)

O número de saídas deve ser igual ao número de entradas selecionadas.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from mlprocess.core.exceptions import InvalidParametersError, TaskIOError
from mlprocess.core.tasks.task import BaseTask


class CopyInput(BaseTask):
    def _selected(self) -> List[int]:
        raw = self.parameters.get("input_no", "")
        if not raw.strip():
            return list(range(len(self.inputs)))
        try:
            selected = [int(x) for x in raw.split(",") if x.strip()]
        except ValueError as e:
            raise InvalidParametersError(
                f"Task '{self.task_id}': input_no inválido: {raw!r}",
                details={"task_id": self.task_id, "input_no": raw},
            ) from e
        bad = [i for i in selected if not 0 <= i < len(self.inputs)]
        if bad:
            raise InvalidParametersError(
                f"Task '{self.task_id}': input_no fora do intervalo: {bad}",
                details={"task_id": self.task_id, "input_no": raw, "inputs": len(self.inputs)},
            )
        return selected

    def perform(self) -> None:
        self.require_inputs(minimum=1)
        selected = self._selected()
        self.require_outputs(len(selected))

        for i, out in zip(selected, self.outputs):
            src, dst = Path(self.inputs[i]), Path(out)
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(src, dst)
            except OSError as e:
                raise TaskIOError(
                    f"Task '{self.task_id}': falha ao copiar {src} para {dst}",
                    details={"task_id": self.task_id, "source": str(src), "target": str(dst), "reason": str(e)},
                ) from e
