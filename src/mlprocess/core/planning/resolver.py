# src/mlprocess/core/planning/resolver.py
"""
Resolução de dependências a partir do uso declarado de fontes de dados.

Cada fonte de dados (par `kind`/`id`) recebe uma ocorrência com no
máximo um produtor e uma lista de consumidores. Depois da varredura,
cada consumidor passa a depender do produtor.

Regras:
    - Uma segunda task produzindo a mesma fonte → DuplicateOutputError
    - Dataset consumido e nunca produzido → DatasetNeverProducedError
    - Arquivo ou feature sem produtor → pré-existente, sem aresta
    - Uma task que consome a própria saída não ganha auto-aresta

Executado uma única vez, na construção do plano.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mlprocess.core.exceptions import DatasetNeverProducedError, DuplicateOutputError
from mlprocess.core.scenario.data_source import DataSource
from mlprocess.core.scenario.types import DataSourceKind

from .plan import Plan


@dataclass
class Occurrence:
    """Uso de uma fonte de dados no plano."""

    source: DataSource
    producer: Optional[int] = None
    consumers: List[int] = field(default_factory=list)


def build_occurrence_table(plan: Plan) -> Dict[str, Occurrence]:
    """Tabela `source.key → Occurrence`, na ordem de primeira aparição."""
    table: Dict[str, Occurrence] = {}

    for index, node in enumerate(plan.nodes):
        for source in node.input_sources():
            occ = table.setdefault(source.key, Occurrence(source=source))
            if index not in occ.consumers:
                occ.consumers.append(index)

        for source in node.output_sources():
            occ = table.setdefault(source.key, Occurrence(source=source))
            if occ.producer is not None and occ.producer != index:
                raise DuplicateOutputError(
                    f"'{source}' é produzido por '{plan.nodes[occ.producer].id}' e '{node.id}'",
                    details={
                        "source": source.key,
                        "producers": [plan.nodes[occ.producer].id, node.id],
                    },
                )
            occ.producer = index

    return table


def resolve_dependencies(plan: Plan) -> Dict[str, Occurrence]:
    """
    Adiciona ao plano as arestas consumidor → produtor.

    Returns:
        Dict[str, Occurrence]: a tabela de ocorrências, para inspeção.
    """
    table = build_occurrence_table(plan)

    for occ in table.values():
        if occ.producer is None:
            if occ.source.kind == DataSourceKind.DATASET:
                raise DatasetNeverProducedError(
                    f"Dataset '{occ.source.id}' é consumido mas nunca produzido",
                    details={
                        "source": occ.source.key,
                        "consumers": [plan.nodes[i].id for i in occ.consumers],
                    },
                    hint="Declare uma task que produza o dataset ou use uma fonte 'file'.",
                )
            continue

        for consumer in occ.consumers:
            plan.link(consumer, occ.producer)

    return table
