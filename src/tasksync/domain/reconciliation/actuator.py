"""Execute operations against the issue tracker and the calendar.

Responsibilities of this stage:
- translate each operation into one or more client calls
- isolate failures per operation so one bad call never aborts the pass
- keep embedded cross-references from accumulating across rewrites

Composite operations create their primary entity first and then patch the other
side with the new cross-reference on a best-effort basis; a failed link patch is
logged and repaired by a later pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from tasksync.domain.metadata import (
    EventLink,
    IssueEventTag,
    compose_event_notes,
    compose_issue_notes,
)
from tasksync.domain.model import (
    ExternalEvent,
    Glyph,
    IssueState,
    OperationKind,
    add_prefix,
    as_datetime,
    points_for_bucket,
)
from tasksync.domain.ports import EventChanges, EventDraft, IssueChanges, IssueDraft
from tasksync.domain.scheduling import TimeSlot, find_slot
from tasksync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tasksync.domain.model import (
        CanonicalItem,
        EventTime,
        ExternalIssue,
        Operation,
        SyncSettings,
    )
    from tasksync.domain.ports import EventClient, IssueClient
    from tasksync.domain.time_windows import Clock

log = getLogger(__name__)


class ActuationError(RuntimeError):
    """Raised when an operation cannot be translated into client calls."""


@dataclass(slots=True)
class ExecutionResult:
    operation: Operation
    success: bool
    value: ExternalIssue | ExternalEvent | None = None
    error: str | None = None


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


@dataclass(slots=True)
class Actuator:
    issues: IssueClient
    events: EventClient
    settings: SyncSettings
    clock: Clock = utcnow
    _calendar: list[ExternalEvent] | None = field(default=None, init=False, repr=False)

    async def execute(self, operations: Sequence[Operation]) -> list[ExecutionResult]:
        """Run ``operations`` strictly in order, one result per operation."""

        self._calendar = None
        results: list[ExecutionResult] = []
        for operation in operations:
            try:
                value = await self.apply(operation)
            except Exception as exc:  # noqa: BLE001 - failures are recorded per operation
                log.warning(
                    "Operation %s failed for %r: %s",
                    operation.kind.value,
                    operation.item.title,
                    _describe(exc),
                )
                results.append(ExecutionResult(operation=operation, success=False, error=_describe(exc)))
            else:
                log.debug("Operation %s succeeded for %r", operation.kind.value, operation.item.title)
                results.append(ExecutionResult(operation=operation, success=True, value=value))
        return results

    async def apply(self, operation: Operation) -> ExternalIssue | ExternalEvent | None:
        item = operation.item
        match operation.kind:
            case OperationKind.CREATE_ISSUE:
                return await self._create_issue(item)
            case OperationKind.CREATE_EVENT:
                return await self._create_event(item)
            case OperationKind.PATCH_EVENT:
                return await self._patch_event(item)
            case OperationKind.PATCH_ISSUE:
                return await self._patch_issue(item)
            case OperationKind.COPY_TO_HISTORY:
                return await self._copy_to_history(item)
            case OperationKind.RESCHEDULE_EVENT:
                return await self._reschedule_event(item)
            case OperationKind.CREATE_ISSUE_AND_LINK_EVENT:
                return await self._create_issue_and_link_event(item)
            case OperationKind.CREATE_EVENT_AND_LINK_ISSUE:
                return await self._create_event_and_link_issue(item)

    # ------------------------------------------------------------------ issues

    async def _create_issue(self, item: CanonicalItem) -> ExternalIssue:
        tag = None
        if item.event_id is not None and item.start_time is not None:
            tag = self._tag(item.event_id, item.start_time, item.duration_minutes)
        draft = IssueDraft(
            title=add_prefix(item.title, Glyph.INBOX),
            state=item.issue_state or IssueState.TRIAGE,
            notes=compose_issue_notes(item.description, tag),
            target_date=self._local_date(item.start_time),
            estimate=points_for_bucket(item.size),
        )
        return await self.issues.create_issue(draft)

    async def _patch_issue(self, item: CanonicalItem) -> ExternalIssue:
        issue_id = self._require(item.issue_id, "issue id", item)
        event_id = self._require(item.event_id, "event id", item)
        start = self._require(item.start_time, "start time", item)
        tag = self._tag(event_id, start, item.duration_minutes)
        return await self.issues.update_issue(
            issue_id,
            IssueChanges(notes=compose_issue_notes(item.description, tag)),
        )

    async def _link_issue(self, item: CanonicalItem, event: ExternalEvent) -> None:
        if item.issue_id is None:
            return
        tag = self._tag(event.id, event.start, event.duration_minutes)
        try:
            await self.issues.update_issue(
                item.issue_id,
                IssueChanges(notes=compose_issue_notes(item.description, tag)),
            )
        except Exception as exc:  # noqa: BLE001 - the next pass repairs the link
            log.warning("Failed to link issue %s to event %s: %s", item.issue_id, event.id, _describe(exc))

    # ------------------------------------------------------------------ events

    async def _create_event(self, item: CanonicalItem) -> ExternalEvent:
        if isinstance(item.start_time, datetime) and isinstance(item.end_time, datetime):
            slot = TimeSlot(start=item.start_time, end=item.end_time)
        else:
            slot = await self._find_slot(item.duration_minutes, self._local_date(item.start_time))
        draft = EventDraft(
            title=add_prefix(item.title, Glyph.SCHEDULED),
            start=slot.start,
            end=slot.end,
            notes=compose_event_notes(item.description, item.issue_ref, item.issue_url),
            private=EventLink(uid=item.uid, linked_issue_id=item.issue_id).to_private(),
        )
        created = await self.events.create_event(draft)
        self._remember(created)
        return created

    async def _patch_event(self, item: CanonicalItem) -> ExternalEvent:
        event_id = self._require(item.event_id, "event id", item)
        changes = EventChanges(
            title=item.title,
            notes=compose_event_notes(item.description, item.issue_ref, item.issue_url),
            private=EventLink(uid=item.uid, linked_issue_id=item.issue_id).to_private(),
        )
        return await self.events.update_event(event_id, changes)

    async def _copy_to_history(self, item: CanonicalItem) -> ExternalEvent | None:
        event_id = self._require(item.event_id, "event id", item)
        history_calendar_id = self.settings.history_calendar_id
        if not history_calendar_id:
            log.info("No history calendar configured, not archiving event %s", event_id)
            return None
        return await self.events.copy_event(event_id, history_calendar_id, title_override=item.title)

    async def _reschedule_event(self, item: CanonicalItem) -> ExternalEvent:
        event_id = self._require(item.event_id, "event id", item)
        slot = await self._find_slot(item.duration_minutes, None)
        changes = EventChanges(
            title=item.title,
            notes=compose_event_notes(item.description, item.issue_ref, item.issue_url),
            start=slot.start,
            end=slot.end,
            private=EventLink(uid=item.uid, linked_issue_id=item.issue_id).to_private(),
        )
        updated = await self.events.update_event(event_id, changes)
        self._remember(updated)
        log.info("Rescheduled %r to %s", item.title, slot.start.isoformat())
        await self._link_issue(item, updated)
        return updated

    # -------------------------------------------------------------- composites

    async def _create_issue_and_link_event(self, item: CanonicalItem) -> ExternalIssue:
        issue = await self._create_issue(item)
        if item.event_id is None:
            return issue
        changes = EventChanges(
            title=item.title,
            notes=compose_event_notes(item.description, issue.key or issue.id, issue.url),
            private=EventLink(uid=item.uid, linked_issue_id=issue.id).to_private(),
        )
        try:
            await self.events.update_event(item.event_id, changes)
        except Exception as exc:  # noqa: BLE001 - the next pass repairs the link
            log.warning("Failed to link event %s to issue %s: %s", item.event_id, issue.id, _describe(exc))
        return issue

    async def _create_event_and_link_issue(self, item: CanonicalItem) -> ExternalEvent:
        event = await self._create_event(item)
        await self._link_issue(item, event)
        return event

    # ----------------------------------------------------------------- helpers

    async def _find_slot(self, duration_minutes: int, preferred_date: date | None) -> TimeSlot:
        calendar = await self._calendar_snapshot()
        return find_slot(
            duration_minutes,
            preferred_date,
            calendar,
            self.settings.working_hours,
            now=self.clock(),
            timezone=self.settings.timezone,
            horizon_days=self.settings.search_horizon_days,
            buffer_minutes=self.settings.buffer_minutes,
        )

    async def _calendar_snapshot(self) -> list[ExternalEvent]:
        if self._calendar is None:
            now = self.clock()
            # One day of slack on each side covers timezone shifts and the fallback day.
            start = now - timedelta(days=1)
            end = now + timedelta(days=self.settings.search_horizon_days + 2)
            self._calendar = list(await self.events.list_events(self.settings.calendar_id, start, end))
        return self._calendar

    def _remember(self, event: ExternalEvent) -> None:
        if self._calendar is None:
            return
        self._calendar = [known for known in self._calendar if known.id != event.id]
        self._calendar.append(event)

    def _tag(self, event_id: str, start: EventTime, duration_minutes: int) -> IssueEventTag:
        return IssueEventTag(
            event_id=event_id,
            start=as_datetime(start, self.settings.timezone),
            duration_minutes=duration_minutes,
        )

    def _local_date(self, value: EventTime | None) -> date | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.astimezone(self.settings.timezone).date()
        return value

    @staticmethod
    def _require[T](value: T | None, what: str, item: CanonicalItem) -> T:
        if value is None:
            raise ActuationError(f"Cannot act on {item.title!r} without {what}")
        return value


__all__ = ["ActuationError", "Actuator", "ExecutionResult"]
