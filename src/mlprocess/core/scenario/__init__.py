# src/mlprocess/core/scenario/__init__.py
"""
Modelo de cenário do mlprocess: fontes de dados, nós de task e loader.
"""

from .data_source import FEATURE_SEPARATOR, DataSource
from .loader import Scenario, load_scenario, parse_task
from .task_node import AlgorithmDescriptor, TaskNode, parse_parameters, validate_node
from .types import DataSourceKind, TaskKind, TaskStatus

__all__ = [
    "FEATURE_SEPARATOR",
    "AlgorithmDescriptor",
    "DataSource",
    "DataSourceKind",
    "Scenario",
    "TaskKind",
    "TaskNode",
    "TaskStatus",
    "load_scenario",
    "parse_parameters",
    "parse_task",
    "validate_node",
]
