# src/mlprocess/core/engine/__init__.py

from .process import Process
from .worker import Worker, WorkerStats, instantiate

__all__ = ["Process", "Worker", "WorkerStats", "instantiate"]
