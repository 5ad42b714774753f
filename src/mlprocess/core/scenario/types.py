# src/mlprocess/core/scenario/types.py
"""
Tipos canônicos do modelo de cenário do mlprocess.

Este módulo define os enums que padronizam a comunicação entre loader,
planejamento, Plan Store e Workers.

Componentes principais:
    - TaskKind       → união etiquetada dos tipos de task
    - TaskStatus     → estados de execução persistidos no plano
    - DataSourceKind → variantes de fonte de dados

Princípios fundamentais:
    - Valores textuais são estáveis e serializáveis em JSON
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não valida tasks
    - Não planeja nem executa
"""

from __future__ import annotations

from enum import Enum


class TaskKind(str, Enum):
    """
    Tipo de uma task do cenário.

    Tipos definidos:
        - COMPUTATION: treino/aplicação de um algoritmo sobre train/devel/eval
        - MANIPULATION: conversões, divisões e junções de dados
        - EVALUATION: cálculo de estatísticas sobre conjuntos de dados

    Decisões arquiteturais:
        - Um único enum substitui hierarquias de classes por tipo
        - A validação de seções é uma função única parametrizada pelo tipo

    Invariantes:
        - Toda task possui exatamente um `kind`
        - MANIPULATION nunca é paralelizável
    """
    COMPUTATION = "computation"
    MANIPULATION = "manipulation"
    EVALUATION = "evaluation"

    @property
    def algorithm_element(self) -> str:
        """Nome do elemento de algoritmo aceito para este tipo no cenário."""
        return _ALGORITHM_ELEMENTS[self]


_ALGORITHM_ELEMENTS = {
    TaskKind.COMPUTATION: "algorithm",
    TaskKind.EVALUATION: "filter",
    TaskKind.MANIPULATION: "metric",
}


class TaskStatus(str, Enum):
    """
    Estados de execução de um nó do plano.

    Transições permitidas:
        - PENDING/WAITING → IN_PROGRESS → DONE | FAILED
        - qualquer estado → PENDING/WAITING apenas via reset explícito

    Decisões arquiteturais:
        - WAITING indica predecessores ainda não concluídos
        - FAILED bloqueia dependentes até um reset
    """
    PENDING = "pending"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.FAILED)


class DataSourceKind(str, Enum):
    """Variantes de fonte de dados: arquivo, dataset ou feature."""
    FILE = "file"
    DATASET = "dataset"
    FEATURE = "feature"

