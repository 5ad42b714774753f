# src/mlprocess/core/planning/__init__.py
"""
Planejamento do mlprocess: arena do plano, resolução de dependências,
paralelização, expansão de padrões e ordenação topológica.
"""

from .expander import expand_node, needs_expansion
from .parallelizer import parallelize, worker_budget
from .plan import Plan
from .planner import build_plan, sort_plan, topological_order
from .resolver import Occurrence, resolve_dependencies

__all__ = [
    "Occurrence",
    "Plan",
    "build_plan",
    "expand_node",
    "needs_expansion",
    "parallelize",
    "resolve_dependencies",
    "sort_plan",
    "topological_order",
    "worker_budget",
]
