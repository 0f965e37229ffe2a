"""Orchestrator for one reconciliation pass.

The engine composes the stages but does not prescribe concrete adapters; any
``IssueClient``/``EventClient`` pair works, including the dry-run wrappers.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from tasksync.domain.metadata import EventLink
from tasksync.domain.model import IssueState
from tasksync.domain.ports import IssueFilter
from tasksync.domain.time_windows import snapshot_window, utcnow

from .actuator import Actuator
from .diff import compute_operations
from .projector import project

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tasksync.domain.model import (
        ExternalEvent,
        ExternalIssue,
        LinkHint,
        Operation,
        OperationKind,
        SyncSettings,
    )
    from tasksync.domain.ports import EventClient, IssueClient
    from tasksync.domain.time_windows import Clock

    from .actuator import ExecutionResult

log = getLogger(__name__)


@dataclass(slots=True)
class SyncPassResult:
    """Outcome of a single reconciliation pass."""

    started_at: datetime
    items_processed: int = 0
    operations: list[Operation] = field(default_factory=list["Operation"])
    results: list[ExecutionResult] = field(default_factory=list["ExecutionResult"])
    errors: list[str] = field(default_factory=list[str])
    link_hints: list[LinkHint] = field(default_factory=list["LinkHint"])
    duration: timedelta = timedelta(0)

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def operations_by_kind(self) -> dict[OperationKind, int]:
        return dict(Counter(operation.kind for operation in self.operations))


def linked_issue_ids(events: Sequence[ExternalEvent]) -> tuple[str, ...]:
    """Issue ids named by the private bags of ``events``, first occurrence first."""

    seen: dict[str, None] = {}
    for event in events:
        issue_id = EventLink.from_private(event.private).linked_issue_id
        if issue_id is not None:
            seen.setdefault(issue_id, None)
    return tuple(seen)


@dataclass(slots=True)
class ReconciliationEngine:
    """Fetch both snapshots, fuse them and converge both systems."""

    issues: IssueClient
    events: EventClient
    settings: SyncSettings
    clock: Clock = utcnow

    async def fetch_snapshot(self) -> tuple[list[ExternalIssue], list[ExternalEvent]]:
        start, end = snapshot_window(self.settings, clock=self.clock)
        log.debug("Fetching events between %s and %s", start.isoformat(), end.isoformat())
        events = list(await self.events.list_events(self.settings.calendar_id, start, end))
        issue_filter = IssueFilter(
            ids=linked_issue_ids(events),
            states=frozenset({IssueState.SCHEDULED}),
            tagged=True,
        )
        issues = list(await self.issues.list_issues(issue_filter))
        log.info("Snapshot holds %s events and %s issues", len(events), len(issues))
        return issues, events

    async def run_pass(self) -> SyncPassResult:
        """Run one pass; a snapshot failure ends it before any write."""

        started_at = self.clock()
        result = SyncPassResult(started_at=started_at)

        try:
            issues, events = await self.fetch_snapshot()
        except Exception as exc:  # noqa: BLE001 - reported as the pass outcome
            log.error("Snapshot fetch failed: %s", exc)
            result.errors.append(f"Snapshot fetch failed: {exc}")
            result.duration = self.clock() - started_at
            return result

        projection = project(
            issues,
            events,
            started_at,
            timezone=self.settings.timezone,
            overdue_after=self.settings.overdue_after,
        )
        result.items_processed = len(projection.items)
        result.link_hints = projection.link_hints
        for hint in projection.link_hints:
            log.info(
                "Event %s mentions %s; link it to issue %s by hand if they belong together",
                hint.event_id,
                hint.code,
                hint.issue_id,
            )

        result.operations = compute_operations(projection.items)
        if result.operations:
            breakdown = ", ".join(
                f"{kind.value}={count}" for kind, count in sorted(result.operations_by_kind.items())
            )
            log.info("Planned %s operations (%s)", len(result.operations), breakdown)
        else:
            log.info("Nothing to do for %s items", result.items_processed)

        actuator = Actuator(self.issues, self.events, self.settings, clock=self.clock)
        result.results = await actuator.execute(result.operations)
        result.errors.extend(
            f"{outcome.operation.kind.value} {outcome.operation.item.title!r}: {outcome.error}"
            for outcome in result.results
            if not outcome.success
        )

        result.duration = self.clock() - started_at
        log.info(
            "Pass finished: %s items, %s operations, %s errors",
            result.items_processed,
            len(result.operations),
            len(result.errors),
        )
        return result


__all__ = ["ReconciliationEngine", "SyncPassResult", "linked_issue_ids"]
