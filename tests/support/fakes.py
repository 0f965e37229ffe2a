"""In-memory issue and event clients plus builders for reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import TYPE_CHECKING

from tasksync.domain.metadata import TAG_MARKER
from tasksync.domain.model import EventStatus, ExternalEvent, ExternalIssue, IssueState

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping
    from datetime import date

    from tasksync.domain.model import EventTime
    from tasksync.domain.ports import (
        EventChanges,
        EventDraft,
        IssueChanges,
        IssueDraft,
        IssueFilter,
    )

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)  # a Monday


def fixed_clock(now: datetime = NOW) -> Callable[[], datetime]:
    def clock() -> datetime:
        return now

    return clock


def make_issue(
    issue_id: str = "issue-1",
    *,
    title: str = "Write report",
    state: IssueState = IssueState.TRIAGE,
    notes: str | None = None,
    target_date: date | None = None,
    estimate: int | None = None,
    key: str | None = None,
    url: str | None = None,
) -> ExternalIssue:
    return ExternalIssue(
        id=issue_id,
        title=title,
        state=state,
        notes=notes,
        target_date=target_date,
        estimate=estimate,
        key=key,
        url=url,
    )


def make_event(
    event_id: str = "event-1",
    *,
    title: str = "Write report",
    start: EventTime | None = None,
    end: EventTime | None = None,
    minutes: int = 30,
    notes: str | None = None,
    status: EventStatus = EventStatus.CONFIRMED,
    private: Mapping[str, str] | None = None,
) -> ExternalEvent:
    effective_start = start or NOW + timedelta(days=1)
    effective_end = end or effective_start + timedelta(minutes=minutes)
    return ExternalEvent(
        id=event_id,
        title=title,
        start=effective_start,
        end=effective_end,
        notes=notes,
        status=status,
        private=dict(private or {}),
    )


@dataclass(slots=True)
class InMemoryIssueClient:
    issues: dict[str, ExternalIssue] = field(default_factory=dict[str, ExternalIssue])
    created: list[IssueDraft] = field(default_factory=list["IssueDraft"])
    updates: list[tuple[str, IssueChanges]] = field(default_factory=list["tuple[str, IssueChanges]"])
    filters: list[IssueFilter] = field(default_factory=list["IssueFilter"])
    fail_on: set[str] = field(default_factory=set[str])
    _ids: Iterator[int] = field(default_factory=lambda: count(1), repr=False)

    @classmethod
    def with_issues(cls, *issues: ExternalIssue) -> InMemoryIssueClient:
        return cls(issues={issue.id: issue for issue in issues})

    async def create_issue(self, draft: IssueDraft) -> ExternalIssue:
        if "create" in self.fail_on:
            raise RuntimeError("issue create rejected")
        self.created.append(draft)
        number = next(self._ids)
        issue = ExternalIssue(
            id=f"new-issue-{number}",
            title=draft.title,
            state=draft.state,
            notes=draft.notes,
            target_date=draft.target_date,
            estimate=draft.estimate,
            key=f"ENG-{100 + number}",
            url=f"https://tracker.example/ENG-{100 + number}",
        )
        self.issues[issue.id] = issue
        return issue

    async def update_issue(self, issue_id: str, changes: IssueChanges) -> ExternalIssue:
        if "update" in self.fail_on:
            raise RuntimeError("issue update rejected")
        self.updates.append((issue_id, changes))
        current = self.issues[issue_id]
        updated = replace(
            current,
            title=changes.title if changes.title is not None else current.title,
            state=changes.state if changes.state is not None else current.state,
            notes=changes.notes if changes.notes is not None else current.notes,
            target_date=changes.target_date if changes.target_date is not None else current.target_date,
            estimate=changes.estimate if changes.estimate is not None else current.estimate,
        )
        self.issues[issue_id] = updated
        return updated

    async def list_issues(self, issue_filter: IssueFilter) -> list[ExternalIssue]:
        if "list" in self.fail_on:
            raise RuntimeError("tracker unavailable")
        self.filters.append(issue_filter)
        return [
            issue
            for issue in self.issues.values()
            if issue.id in issue_filter.ids
            or issue.state in issue_filter.states
            or (issue_filter.tagged and TAG_MARKER in (issue.notes or ""))
        ]


@dataclass(slots=True)
class InMemoryEventClient:
    events: dict[str, ExternalEvent] = field(default_factory=dict[str, ExternalEvent])
    history: list[ExternalEvent] = field(default_factory=list[ExternalEvent])
    created: list[EventDraft] = field(default_factory=list["EventDraft"])
    updates: list[tuple[str, EventChanges]] = field(default_factory=list["tuple[str, EventChanges]"])
    fail_on: set[str] = field(default_factory=set[str])
    _ids: Iterator[int] = field(default_factory=lambda: count(1), repr=False)

    @classmethod
    def with_events(cls, *events: ExternalEvent) -> InMemoryEventClient:
        return cls(events={event.id: event for event in events})

    async def create_event(self, draft: EventDraft) -> ExternalEvent:
        if "create" in self.fail_on:
            raise RuntimeError("event create rejected")
        self.created.append(draft)
        event = ExternalEvent(
            id=f"new-event-{next(self._ids)}",
            title=draft.title,
            start=draft.start,
            end=draft.end,
            notes=draft.notes,
            private=dict(draft.private),
        )
        self.events[event.id] = event
        return event

    async def update_event(self, event_id: str, changes: EventChanges) -> ExternalEvent:
        if "update" in self.fail_on:
            raise RuntimeError("event update rejected")
        self.updates.append((event_id, changes))
        current = self.events[event_id]
        updated = replace(
            current,
            title=changes.title if changes.title is not None else current.title,
            notes=changes.notes if changes.notes is not None else current.notes,
            start=changes.start if changes.start is not None else current.start,
            end=changes.end if changes.end is not None else current.end,
            status=changes.status if changes.status is not None else current.status,
            private={**current.private, **(changes.private or {})},
        )
        self.events[event_id] = updated
        return updated

    async def list_events(self, calendar_id: str, start: datetime, end: datetime) -> list[ExternalEvent]:
        if "list" in self.fail_on:
            raise RuntimeError("calendar unavailable")
        return sorted(self.events.values(), key=lambda event: (str(event.start), event.id))

    async def copy_event(
        self,
        event_id: str,
        target_calendar_id: str,
        title_override: str | None = None,
    ) -> ExternalEvent:
        if "copy" in self.fail_on:
            raise RuntimeError("history copy rejected")
        source = self.events[event_id]
        copied = replace(
            source,
            id=f"history-{len(self.history) + 1}",
            title=title_override or source.title,
            private=dict(source.private),
        )
        self.history.append(copied)
        return copied
