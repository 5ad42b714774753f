# src/mlprocess/core/store/__init__.py

from .plan_store import Claim, ClaimState, PlanStore, render_status
from .reset import apply_resets, parse_reset_instructions, reset_prefix

__all__ = [
    "Claim",
    "ClaimState",
    "PlanStore",
    "apply_resets",
    "parse_reset_instructions",
    "render_status",
    "reset_prefix",
]
