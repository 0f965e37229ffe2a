"""Fuse issue and event snapshots into canonical items.

Pure and deterministic: the same snapshots and ``now`` always produce the same
items in the same order with the same uids.

Pairing runs in a fixed priority order so every entity is consumed exactly once:

1) events whose private bag names a known issue (calendar side is authoritative)
2) issues whose notes tag names an event; a tag naming a vanished event still
   consumes the issue, which becomes issue-only
3) leftover issues become issue-only items
4) leftover events become event-only items

Short codes (``ENG-42``) found in free text never pair anything; they only
surface as ``LinkHint`` values between leftover items.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, timedelta, tzinfo
from logging import getLogger
from typing import TYPE_CHECKING, Final
from uuid import NAMESPACE_URL, uuid5

from tasksync.domain.metadata import (
    EventLink,
    find_short_codes,
    parse_all_issue_tags,
    strip_cross_references,
)
from tasksync.domain.model import (
    DEFAULT_BUCKET,
    CanonicalItem,
    IssueState,
    LinkHint,
    Phase,
    as_datetime,
    bucket_for_duration,
    bucket_for_points,
    minutes_for_bucket,
    strip_prefix,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from tasksync.domain.model import EventTime, ExternalEvent, ExternalIssue, SizeBucket

log = getLogger(__name__)

UID_NAMESPACE: Final = uuid5(NAMESPACE_URL, "https://tasksync.invalid/uid")
DEFAULT_OVERDUE_AFTER: Final = timedelta(hours=24)


@dataclass(slots=True)
class ProjectionResult:
    items: list[CanonicalItem] = field(default_factory=list["CanonicalItem"])
    orphaned_issues: list[ExternalIssue] = field(default_factory=list["ExternalIssue"])
    orphaned_events: list[ExternalEvent] = field(default_factory=list["ExternalEvent"])
    link_hints: list[LinkHint] = field(default_factory=list["LinkHint"])


def mint_uid(*, event_id: str | None = None, issue_id: str | None = None) -> str:
    """Derive a stable uid from the entity that first carried the item."""

    if event_id is not None:
        return str(uuid5(UID_NAMESPACE, f"event:{event_id}"))
    if issue_id is not None:
        return str(uuid5(UID_NAMESPACE, f"issue:{issue_id}"))
    raise ValueError("A uid needs an event id or an issue id")


def classify_phase(
    issue: ExternalIssue | None,
    event: ExternalEvent | None,
    *,
    now: datetime,
    timezone: tzinfo = UTC,
    overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
) -> Phase:
    if event is not None and issue is None:
        return Phase.EVENT_ONLY
    if issue is not None and event is None:
        return Phase.ISSUE_ONLY
    if issue is None or event is None:
        raise ValueError("Cannot classify an item without an issue or an event")

    if issue.state.is_terminal:
        return Phase.COMPLETED
    ended_at = as_datetime(event.end, timezone)
    if now - ended_at > overdue_after and issue.state is not IssueState.DONE:
        return Phase.OVERDUE
    return Phase.ACTIVE


def _fuse_size(
    issue: ExternalIssue | None,
    event: ExternalEvent | None,
) -> tuple[int, SizeBucket]:
    duration: int | None = None
    bucket: SizeBucket | None = None
    if event is not None:
        duration = event.duration_minutes
        bucket = bucket_for_duration(duration)
    # Zero points means unestimated.
    if issue is not None and issue.estimate:
        bucket = bucket_for_points(issue.estimate)
    if bucket is None:
        bucket = DEFAULT_BUCKET
    if duration is None or duration <= 0:
        duration = minutes_for_bucket(bucket)
    return duration, bucket


def _build_item(
    uid: str,
    issue: ExternalIssue | None,
    event: ExternalEvent | None,
    *,
    now: datetime,
    timezone: tzinfo,
    overdue_after: timedelta,
) -> CanonicalItem:
    if issue is not None:
        title = strip_prefix(issue.title)
    elif event is not None:
        title = strip_prefix(event.title)
    else:  # pragma: no cover - guarded by callers
        raise ValueError("Cannot build an item without an issue or an event")
    description = (
        strip_cross_references(issue.notes if issue else None)
        or strip_cross_references(event.notes if event else None)
        or None
    )

    start_time: EventTime | None
    end_time: EventTime | None
    if event is not None:
        start_time, end_time = event.start, event.end
    else:
        start_time = issue.target_date if issue is not None else None
        end_time = None

    duration, bucket = _fuse_size(issue, event)

    event_link_current = False
    issue_link_current = False
    if issue is not None and event is not None:
        link = EventLink.from_private(event.private)
        event_link_current = link.uid == uid and link.linked_issue_id == issue.id
        issue_link_current = any(
            tag.event_id == event.id for tag in parse_all_issue_tags(issue.notes)
        )

    return CanonicalItem(
        uid=uid,
        title=title,
        description=description,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=duration,
        size=bucket,
        issue_id=issue.id if issue else None,
        issue_key=issue.key if issue else None,
        issue_url=issue.url if issue else None,
        issue_state=issue.state if issue else None,
        event_id=event.id if event else None,
        current_event_title=event.title if event else None,
        current_issue_title=issue.title if issue else None,
        event_link_current=event_link_current,
        issue_link_current=issue_link_current,
        phase=classify_phase(
            issue,
            event,
            now=now,
            timezone=timezone,
            overdue_after=overdue_after,
        ),
        last_observed_at=now,
    )


def _link_hints(
    items: Sequence[CanonicalItem],
    issues_by_id: dict[str, ExternalIssue],
    events_by_id: dict[str, ExternalEvent],
) -> list[LinkHint]:
    codes_to_issue: dict[str, str] = {}
    for item in items:
        if item.phase is not Phase.ISSUE_ONLY or item.issue_id is None:
            continue
        issue = issues_by_id[item.issue_id]
        for code in ([issue.key] if issue.key else []) + find_short_codes(issue.title):
            codes_to_issue.setdefault(code, issue.id)

    hints: list[LinkHint] = []
    for item in items:
        if item.phase is not Phase.EVENT_ONLY or item.event_id is None:
            continue
        event = events_by_id[item.event_id]
        for code in find_short_codes(f"{event.title}\n{event.notes or ''}"):
            issue_id = codes_to_issue.get(code)
            if issue_id is not None:
                hints.append(LinkHint(event_id=event.id, issue_id=issue_id, code=code))
                break
    return hints


def project(
    issues: Sequence[ExternalIssue],
    events: Sequence[ExternalEvent],
    now: datetime,
    *,
    timezone: tzinfo = UTC,
    overdue_after: timedelta = DEFAULT_OVERDUE_AFTER,
) -> ProjectionResult:
    """Fuse ``issues`` and ``events`` into canonical items observed at ``now``."""

    if now.tzinfo is None:
        raise ValueError("now must include timezone information")

    live_events = [event for event in events if not event.is_cancelled]
    if len(live_events) != len(events):
        log.debug("Ignoring %s cancelled events", len(events) - len(live_events))

    issues_by_id = {issue.id: issue for issue in issues}
    events_by_id = {event.id: event for event in live_events}

    consumed_issues: set[str] = set()
    consumed_events: set[str] = set()
    used_uids: set[str] = set()
    result = ProjectionResult()

    def emit(uid: str | None, issue: ExternalIssue | None, event: ExternalEvent | None) -> None:
        if uid is None or uid in used_uids:
            # Two events can carry the same bag uid when one was duplicated by hand.
            uid = mint_uid(
                event_id=event.id if event else None,
                issue_id=issue.id if issue else None,
            )
        used_uids.add(uid)
        if issue is not None:
            consumed_issues.add(issue.id)
        if event is not None:
            consumed_events.add(event.id)
        result.items.append(
            _build_item(
                uid,
                issue,
                event,
                now=now,
                timezone=timezone,
                overdue_after=overdue_after,
            )
        )

    for event in live_events:
        link = EventLink.from_private(event.private)
        if link.linked_issue_id is None:
            continue
        issue = issues_by_id.get(link.linked_issue_id)
        if issue is None or issue.id in consumed_issues or event.id in consumed_events:
            continue
        emit(link.uid, issue, event)

    for issue in issues:
        tags = parse_all_issue_tags(issue.notes)
        if not tags or issue.id in consumed_issues:
            continue
        partner = next(
            (
                events_by_id[tag.event_id]
                for tag in tags
                if tag.event_id in events_by_id and tag.event_id not in consumed_events
            ),
            None,
        )
        if partner is None:
            log.debug("Issue %s only references missing or claimed events", issue.id)
            emit(None, issue, None)
        else:
            emit(EventLink.from_private(partner.private).uid, issue, partner)

    for issue in issues:
        if issue.id not in consumed_issues:
            emit(None, issue, None)

    for event in live_events:
        if event.id not in consumed_events:
            emit(EventLink.from_private(event.private).uid, None, event)

    result.orphaned_issues = [
        issues_by_id[item.issue_id]
        for item in result.items
        if item.phase is Phase.ISSUE_ONLY and item.issue_id is not None
    ]
    result.orphaned_events = [
        events_by_id[item.event_id]
        for item in result.items
        if item.phase is Phase.EVENT_ONLY and item.event_id is not None
    ]
    result.link_hints = _link_hints(result.items, issues_by_id, events_by_id)
    return result


__all__ = ["UID_NAMESPACE", "ProjectionResult", "classify_phase", "mint_uid", "project"]
