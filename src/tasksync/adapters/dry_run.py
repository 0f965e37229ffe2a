"""Client wrappers that read for real and only log writes.

Reads delegate to the wrapped client and are remembered so that synthesized
write results look like what the real system would return.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from itertools import count
from logging import getLogger
from typing import TYPE_CHECKING

from tasksync.domain.model import EventStatus, ExternalEvent, ExternalIssue, IssueState

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from tasksync.domain.ports import (
        EventChanges,
        EventClient,
        EventDraft,
        IssueChanges,
        IssueClient,
        IssueDraft,
        IssueFilter,
    )

log = getLogger(__name__)

DRY_RUN_PREFIX = "[dry run]"


@dataclass(slots=True)
class DryRunIssueClient:
    inner: IssueClient
    known: dict[str, ExternalIssue] = field(default_factory=dict[str, ExternalIssue])
    _ids: Iterator[int] = field(default_factory=lambda: count(1), repr=False)

    async def list_issues(self, issue_filter: IssueFilter) -> list[ExternalIssue]:
        issues = await self.inner.list_issues(issue_filter)
        self.known.update((issue.id, issue) for issue in issues)
        return issues

    async def create_issue(self, draft: IssueDraft) -> ExternalIssue:
        log.info(
            "%s Would create issue %r in %s (estimate %s, target %s)",
            DRY_RUN_PREFIX,
            draft.title,
            draft.state.value,
            draft.estimate,
            draft.target_date,
        )
        issue = ExternalIssue(
            id=f"dry-run-issue-{next(self._ids)}",
            title=draft.title,
            state=draft.state,
            notes=draft.notes,
            target_date=draft.target_date,
            estimate=draft.estimate,
        )
        self.known[issue.id] = issue
        return issue

    async def update_issue(self, issue_id: str, changes: IssueChanges) -> ExternalIssue:
        log.info("%s Would update issue %s: %s", DRY_RUN_PREFIX, issue_id, _describe(changes))
        current = self.known.get(issue_id) or ExternalIssue(
            id=issue_id,
            title=changes.title or "",
            state=changes.state or IssueState.TRIAGE,
        )
        updated = replace(
            current,
            title=changes.title if changes.title is not None else current.title,
            state=changes.state if changes.state is not None else current.state,
            notes=changes.notes if changes.notes is not None else current.notes,
            target_date=changes.target_date if changes.target_date is not None else current.target_date,
            estimate=changes.estimate if changes.estimate is not None else current.estimate,
        )
        self.known[issue_id] = updated
        return updated


@dataclass(slots=True)
class DryRunEventClient:
    inner: EventClient
    known: dict[str, ExternalEvent] = field(default_factory=dict[str, ExternalEvent])
    _ids: Iterator[int] = field(default_factory=lambda: count(1), repr=False)

    async def list_events(self, calendar_id: str, start: datetime, end: datetime) -> list[ExternalEvent]:
        events = await self.inner.list_events(calendar_id, start, end)
        self.known.update((event.id, event) for event in events)
        return events

    async def create_event(self, draft: EventDraft) -> ExternalEvent:
        log.info(
            "%s Would create event %r from %s to %s",
            DRY_RUN_PREFIX,
            draft.title,
            draft.start.isoformat(),
            draft.end.isoformat(),
        )
        event = ExternalEvent(
            id=f"dry-run-event-{next(self._ids)}",
            title=draft.title,
            start=draft.start,
            end=draft.end,
            notes=draft.notes,
            private=dict(draft.private),
        )
        self.known[event.id] = event
        return event

    async def update_event(self, event_id: str, changes: EventChanges) -> ExternalEvent:
        log.info("%s Would update event %s: %s", DRY_RUN_PREFIX, event_id, _describe(changes))
        current = self.known.get(event_id)
        if current is None:
            raise LookupError(f"Event {event_id} was not part of the snapshot")
        updated = replace(
            current,
            title=changes.title if changes.title is not None else current.title,
            notes=changes.notes if changes.notes is not None else current.notes,
            start=changes.start if changes.start is not None else current.start,
            end=changes.end if changes.end is not None else current.end,
            status=changes.status if changes.status is not None else current.status,
            private={**current.private, **(changes.private or {})},
        )
        self.known[event_id] = updated
        return updated

    async def copy_event(
        self,
        event_id: str,
        target_calendar_id: str,
        title_override: str | None = None,
    ) -> ExternalEvent:
        log.info(
            "%s Would copy event %s to %s as %r",
            DRY_RUN_PREFIX,
            event_id,
            target_calendar_id,
            title_override,
        )
        current = self.known.get(event_id)
        if current is None:
            raise LookupError(f"Event {event_id} was not part of the snapshot")
        return replace(
            current,
            id=f"dry-run-copy-{next(self._ids)}",
            title=title_override or current.title,
            status=EventStatus.CONFIRMED,
            private=dict(current.private),
        )


def _describe(changes: IssueChanges | EventChanges) -> str:
    changed = [item.name for item in fields(changes) if getattr(changes, item.name) is not None]
    return ", ".join(changed) or "nothing"
