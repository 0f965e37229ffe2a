"""Capability ports for the issue tracker and the calendar."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date, datetime

    from tasksync.domain.model import EventStatus, EventTime, ExternalEvent, ExternalIssue, IssueState


@dataclass(slots=True, kw_only=True)
class IssueDraft:
    title: str
    state: IssueState
    notes: str | None = None
    target_date: date | None = None
    estimate: int | None = None


@dataclass(slots=True, kw_only=True)
class IssueChanges:
    """Partial issue update; fields left as ``None`` are not sent."""

    title: str | None = None
    state: IssueState | None = None
    notes: str | None = None
    target_date: date | None = None
    estimate: int | None = None


@dataclass(slots=True, frozen=True)
class IssueFilter:
    """Issues to fetch: the union of explicit ids, every issue in ``states`` and,
    when ``tagged`` is set, every issue whose notes carry an event tag.
    """

    ids: tuple[str, ...] = ()
    states: frozenset[IssueState] = field(default_factory=frozenset["IssueState"])
    tagged: bool = False


@dataclass(slots=True, kw_only=True)
class EventDraft:
    title: str
    start: EventTime
    end: EventTime
    notes: str | None = None
    private: Mapping[str, str] = field(default_factory=dict["str", "str"])


@dataclass(slots=True, kw_only=True)
class EventChanges:
    """Partial event update; fields left as ``None`` are not sent."""

    title: str | None = None
    notes: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None
    status: EventStatus | None = None
    private: Mapping[str, str] | None = None


@runtime_checkable
class IssueClient(Protocol):
    async def create_issue(self, draft: IssueDraft) -> ExternalIssue: ...

    async def update_issue(self, issue_id: str, changes: IssueChanges) -> ExternalIssue: ...

    async def list_issues(self, issue_filter: IssueFilter) -> list[ExternalIssue]: ...


@runtime_checkable
class EventClient(Protocol):
    async def create_event(self, draft: EventDraft) -> ExternalEvent: ...

    async def update_event(self, event_id: str, changes: EventChanges) -> ExternalEvent: ...

    async def list_events(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ExternalEvent]: ...

    async def copy_event(
        self,
        event_id: str,
        target_calendar_id: str,
        title_override: str | None = None,
    ) -> ExternalEvent: ...


__all__ = [
    "EventChanges",
    "EventClient",
    "EventDraft",
    "IssueChanges",
    "IssueClient",
    "IssueDraft",
    "IssueFilter",
]
