"""Entities observed in the external systems and the canonical items fused from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, tzinfo
from typing import TYPE_CHECKING

from .enums import EventStatus, IssueState, OperationKind, Phase, SizeBucket
from .sizing import DEFAULT_BUCKET, minutes_for_bucket

if TYPE_CHECKING:
    from collections.abc import Mapping

type EventTime = datetime | date


def as_datetime(value: EventTime, tz: tzinfo = UTC) -> datetime:
    """Interpret ``value`` as an aware datetime; dates become midnight in ``tz``."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError("Event timestamps must include timezone information")
        return value
    return datetime.combine(value, time.min, tzinfo=tz)


def is_all_day(value: EventTime | None) -> bool:
    return value is not None and not isinstance(value, datetime)


@dataclass(slots=True, kw_only=True)
class ExternalEvent:
    """A timed item owned by the calendar system."""

    id: str
    title: str
    start: EventTime
    end: EventTime
    notes: str | None = None
    status: EventStatus = EventStatus.CONFIRMED
    private: Mapping[str, str] = field(default_factory=dict["str", "str"])

    @property
    def is_cancelled(self) -> bool:
        return self.status is EventStatus.CANCELLED

    @property
    def duration_minutes(self) -> int:
        delta = as_datetime(self.end) - as_datetime(self.start)
        return int(delta.total_seconds() // 60)


@dataclass(slots=True, kw_only=True)
class ExternalIssue:
    """A trackable work item owned by the issue tracker."""

    id: str
    title: str
    state: IssueState
    notes: str | None = None
    target_date: date | None = None
    estimate: int | None = None
    key: str | None = None
    url: str | None = None


@dataclass(slots=True, kw_only=True)
class CanonicalItem:
    """Fused, authoritative record for one unit of work."""

    uid: str
    title: str
    phase: Phase
    last_observed_at: datetime
    description: str | None = None
    start_time: EventTime | None = None
    end_time: EventTime | None = None
    duration_minutes: int = field(default_factory=lambda: minutes_for_bucket(DEFAULT_BUCKET))
    size: SizeBucket = DEFAULT_BUCKET
    issue_id: str | None = None
    issue_key: str | None = None
    issue_url: str | None = None
    issue_state: IssueState | None = None
    event_id: str | None = None
    current_event_title: str | None = None
    current_issue_title: str | None = None
    event_link_current: bool = False
    issue_link_current: bool = False

    def __post_init__(self) -> None:
        if self.issue_id is None and self.event_id is None:
            raise ValueError("Canonical item must reference an issue or an event")

    @property
    def issue_ref(self) -> str | None:
        """Human readable issue reference, preferring the short code."""

        return self.issue_key or self.issue_id


@dataclass(slots=True, frozen=True)
class Operation:
    """A single typed instruction produced by the diff step."""

    kind: OperationKind
    item: CanonicalItem
    reason: str


@dataclass(slots=True, frozen=True)
class LinkHint:
    """An unlinked event that mentions the short code of an unlinked issue."""

    event_id: str
    issue_id: str
    code: str
