# src/mlprocess/core/tasks/__init__.py

from .registry import AlgorithmRegistry
from .task import BaseTask, Task, TaskFactory

__all__ = ["AlgorithmRegistry", "BaseTask", "Task", "TaskFactory"]
