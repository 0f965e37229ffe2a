"""Reconciliation core between the issue tracker and the calendar.

Layered flow of one pass:
1) fetch both snapshots
2) project them into canonical items
3) diff each item into operations
4) execute the operations in order
"""

from __future__ import annotations

from .actuator import ActuationError, Actuator, ExecutionResult
from .diff import compute_operations, operations_for_item
from .engine import ReconciliationEngine, SyncPassResult
from .projector import ProjectionResult, classify_phase, mint_uid, project
from .transitions import LEGAL_TRANSITIONS, is_legal_transition

__all__ = [
    "LEGAL_TRANSITIONS",
    "ActuationError",
    "Actuator",
    "ExecutionResult",
    "ProjectionResult",
    "ReconciliationEngine",
    "SyncPassResult",
    "classify_phase",
    "compute_operations",
    "is_legal_transition",
    "mint_uid",
    "operations_for_item",
    "project",
]
