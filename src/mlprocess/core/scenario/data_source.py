# src/mlprocess/core/scenario/data_source.py
"""
Fontes de dados do cenário (arquivo, dataset ou feature).

Uma fonte de dados é identificada pelo par `(kind, id)`. Para arquivos,
o `id` é o caminho declarado no cenário (relativo ao diretório de
trabalho); para datasets e features, um identificador lógico.

Responsabilidades do módulo:
    - Definir a estrutura imutável `DataSource`
    - Dividir uma fonte em `k` partes (base da paralelização)
    - Derivar features por dataset (`<dataset>::<feature>`)
    - Serializar/restaurar fontes para o arquivo do plano

Invariantes:
    - Duas fontes são iguais se e somente se `kind` e `id` coincidem
    - `split(k)` preserva o tipo e produz ids distintos e determinísticos
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List

from .types import DataSourceKind


FEATURE_SEPARATOR = "::"


@dataclass(frozen=True)
class DataSource:
    """Fonte de dados tipada e imutável."""

    kind: DataSourceKind
    id: str

    @classmethod
    def file(cls, name: str) -> "DataSource":
        return cls(DataSourceKind.FILE, name)

    @classmethod
    def dataset(cls, ds_id: str) -> "DataSource":
        return cls(DataSourceKind.DATASET, ds_id)

    @classmethod
    def feature(cls, feat_id: str) -> "DataSource":
        return cls(DataSourceKind.FEATURE, feat_id)

    @property
    def key(self) -> str:
        """Identidade textual estável, usada em tabelas de ocorrência e logs."""
        return f"{self.kind.value}:{self.id}"

    @property
    def has_pattern(self) -> bool:
        """Indica se o nome do arquivo contém `*` (só arquivos são expandidos)."""
        return self.kind == DataSourceKind.FILE and "*" in posixpath.basename(self.id)

    def with_id(self, new_id: str) -> "DataSource":
        return DataSource(self.kind, new_id)

    def part_id(self, index: int) -> str:
        """Id da parte `index`; para arquivos o índice antecede a extensão."""
        if self.kind == DataSourceKind.FILE:
            head, tail = posixpath.split(self.id)
            stem, dot, ext = tail.rpartition(".")
            if dot and stem:
                return posixpath.join(head, f"{stem}_{index}.{ext}")
        return f"{self.id}_{index}"

    def split(self, k: int) -> List["DataSource"]:
        """
        Divide a fonte em `k` partes com ids sufixados pelo índice da parte.

        Raises:
            ValueError: Se `k < 1`.
        """
        if not isinstance(k, int) or k < 1:
            raise ValueError(f"split requer k >= 1, recebido: {k!r}")
        return [self.with_id(self.part_id(i)) for i in range(k)]

    def derive_feature(self, feature: "DataSource") -> "DataSource":
        """Feature `feature` calculada sobre este dataset (`<dataset>::<feature>`)."""
        return DataSource.feature(f"{self.id}{FEATURE_SEPARATOR}{feature.id}")

    def to_dict(self) -> Dict[str, Any]:
        return {self.kind.value: self.id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataSource":
        """
        Restaura uma fonte a partir de `{"file": ...}`, `{"dataset": ...}` ou `{"feature": ...}`.

        Raises:
            ValueError: Se o dicionário não tiver exatamente uma chave de tipo válida.
        """
        if not isinstance(data, dict):
            raise ValueError(f"fonte de dados deve ser um mapa, recebido: {type(data).__name__}")
        keys = [k for k in data if k in {m.value for m in DataSourceKind}]
        if len(keys) != 1 or len(data) != 1:
            raise ValueError(f"fonte de dados deve declarar exatamente um de file/dataset/feature: {data!r}")
        value = data[keys[0]]
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"id de fonte de dados inválido: {value!r}")
        return cls(DataSourceKind(keys[0]), value)

    def __str__(self) -> str:
        return self.key
