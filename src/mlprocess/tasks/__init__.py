# src/mlprocess/tasks/__init__.py
"""
Tasks embutidas do mlprocess.

Registradas em `default_registry()`:
    - data_splitter        (manipulation)
    - data_merger          (manipulation)
    - copy_input           (manipulation)
    - classifier           (computation)
    - eval_classification  (evaluation)
"""

from mlprocess.core.tasks.registry import AlgorithmRegistry

from .computation.classifier import Classifier
from .evaluation.eval_classification import EvalClassification
from .manipulation.copy_input import CopyInput
from .manipulation.data_merger import DataMerger
from .manipulation.data_splitter import DataSplitter


def default_registry() -> AlgorithmRegistry:
    registry = AlgorithmRegistry()
    registry.register("data_splitter", DataSplitter)
    registry.register("data_merger", DataMerger)
    registry.register("copy_input", CopyInput)
    registry.register("classifier", Classifier)
    registry.register("eval_classification", EvalClassification)
    return registry


__all__ = [
    "Classifier",
    "CopyInput",
    "DataMerger",
    "DataSplitter",
    "EvalClassification",
    "default_registry",
]
