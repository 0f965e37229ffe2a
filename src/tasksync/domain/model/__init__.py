"""Domain model for calendar and issue reconciliation."""

from __future__ import annotations

from .entities import (
    CanonicalItem,
    EventTime,
    ExternalEvent,
    ExternalIssue,
    LinkHint,
    Operation,
    as_datetime,
    is_all_day,
)
from .enums import EventStatus, IssueState, OperationKind, Phase, SizeBucket
from .settings import SyncSettings, WorkingHours
from .sizing import (
    DEFAULT_BUCKET,
    bucket_for_duration,
    bucket_for_points,
    minutes_for_bucket,
    points_for_bucket,
)
from .titles import Glyph, add_prefix, completion_glyph, has_prefix, strip_prefix

__all__ = [
    "DEFAULT_BUCKET",
    "CanonicalItem",
    "EventStatus",
    "EventTime",
    "ExternalEvent",
    "ExternalIssue",
    "Glyph",
    "IssueState",
    "LinkHint",
    "Operation",
    "OperationKind",
    "Phase",
    "SizeBucket",
    "SyncSettings",
    "WorkingHours",
    "add_prefix",
    "as_datetime",
    "bucket_for_duration",
    "bucket_for_points",
    "completion_glyph",
    "has_prefix",
    "is_all_day",
    "minutes_for_bucket",
    "points_for_bucket",
    "strip_prefix",
]
