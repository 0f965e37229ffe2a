from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from tasksync.domain.metadata import EventLink, IssueEventTag
from tasksync.domain.model import (
    ExternalEvent,
    ExternalIssue,
    Glyph,
    IssueState,
    OperationKind,
    Phase,
    add_prefix,
)
from tasksync.domain.reconciliation import compute_operations, operations_for_item, project
from tests.support.fakes import NOW, make_event, make_issue

if TYPE_CHECKING:
    from tasksync.domain.model import Operation


def _linked_pair(
    *,
    state: IssueState,
    title: str = "Write report",
    event_title: str | None = None,
    ended_hours_ago: float | None = None,
) -> tuple[ExternalIssue, ExternalEvent]:
    if ended_hours_ago is None:
        start = NOW + timedelta(days=1)
    else:
        start = NOW - timedelta(hours=ended_hours_ago, minutes=30)
    event = make_event(
        "evt-1",
        title=event_title or add_prefix(title, Glyph.SCHEDULED),
        start=start,
        private=EventLink(uid="uid-1", linked_issue_id="iss-1").to_private(),
    )
    tag = IssueEventTag(event_id="evt-1", start=start, duration_minutes=30)
    issue = make_issue("iss-1", title=title, state=state, notes=tag.format())
    return issue, event


def _operations(issues: list[ExternalIssue], events: list[ExternalEvent]) -> list[Operation]:
    return compute_operations(project(issues, events, NOW).items)


def test_unlinked_event_creates_triage_issue() -> None:
    [operation] = _operations([], [make_event("evt-1", title="Dentist")])

    assert operation.kind is OperationKind.CREATE_ISSUE_AND_LINK_EVENT
    assert operation.item.issue_state is IssueState.TRIAGE
    assert operation.item.title == add_prefix("Dentist", Glyph.INBOX)
    assert operation.item.event_id == "evt-1"


def test_scheduled_issue_without_event_creates_event() -> None:
    [operation] = _operations([make_issue(state=IssueState.SCHEDULED)], [])

    assert operation.kind is OperationKind.CREATE_EVENT_AND_LINK_ISSUE
    assert operation.item.title == add_prefix("Write report", Glyph.SCHEDULED)


def test_unscheduled_issue_without_event_is_left_alone() -> None:
    assert _operations([make_issue(state=IssueState.TRIAGE)], []) == []
    assert _operations([make_issue(state=IssueState.DONE)], []) == []


def test_done_issue_marks_event_title() -> None:
    issue, event = _linked_pair(state=IssueState.DONE)

    [operation] = _operations([issue], [event])

    assert operation.kind is OperationKind.PATCH_EVENT
    assert operation.item.phase is Phase.COMPLETED
    assert operation.item.title == add_prefix("Write report", Glyph.DONE)


def test_done_issue_with_marked_event_needs_nothing() -> None:
    issue, event = _linked_pair(
        state=IssueState.DONE,
        event_title=add_prefix("Write report", Glyph.DONE),
    )

    assert _operations([issue], [event]) == []


def test_canceled_and_failed_issues_use_their_own_glyph() -> None:
    for state, glyph in ((IssueState.CANCELED, Glyph.CANCELED), (IssueState.FAILED, Glyph.FAILED)):
        issue, event = _linked_pair(state=state)

        [operation] = _operations([issue], [event])

        assert operation.item.title == add_prefix("Write report", glyph)


def test_overdue_event_is_archived_and_rescheduled() -> None:
    issue, event = _linked_pair(state=IssueState.SCHEDULED, ended_hours_ago=30)

    operations = _operations([issue], [event])

    assert [operation.kind for operation in operations] == [
        OperationKind.COPY_TO_HISTORY,
        OperationKind.RESCHEDULE_EVENT,
    ]
    archive, reschedule = operations
    assert archive.item.phase is Phase.OVERDUE
    assert archive.item.title == add_prefix("Write report", Glyph.CARRIED_OVER)
    assert reschedule.item.title == add_prefix("Write report", Glyph.SCHEDULED)
    assert reschedule.item.start_time is None
    assert reschedule.item.end_time is None


def test_overdue_triage_issue_is_rescheduled_with_inbox_glyph() -> None:
    issue, event = _linked_pair(state=IssueState.TRIAGE, ended_hours_ago=30)

    _, reschedule = _operations([issue], [event])

    assert reschedule.item.title == add_prefix("Write report", Glyph.INBOX)


def test_fully_linked_active_pair_needs_nothing() -> None:
    issue, event = _linked_pair(state=IssueState.SCHEDULED)

    assert _operations([issue], [event]) == []


def test_active_pair_missing_issue_tag_patches_issue() -> None:
    issue, event = _linked_pair(state=IssueState.SCHEDULED)
    issue.notes = None

    [operation] = _operations([issue], [event])

    assert operation.kind is OperationKind.PATCH_ISSUE


def test_active_pair_missing_event_bag_patches_event_keeping_its_title() -> None:
    issue, event = _linked_pair(state=IssueState.SCHEDULED, event_title="Renamed by hand")
    event.private = {}

    [operation] = _operations([issue], [event])

    assert operation.kind is OperationKind.PATCH_EVENT
    assert operation.item.title == "Renamed by hand"


def test_operations_follow_item_order() -> None:
    items = project(
        [make_issue("iss-1", state=IssueState.SCHEDULED), make_issue("iss-2", state=IssueState.TRIAGE)],
        [make_event("evt-1")],
        NOW,
    ).items

    operations = compute_operations(items)

    assert operations == [op for item in items for op in operations_for_item(item)]
    assert [operation.kind for operation in operations] == [
        OperationKind.CREATE_EVENT_AND_LINK_ISSUE,
        OperationKind.CREATE_ISSUE_AND_LINK_EVENT,
    ]


def test_diff_is_deterministic() -> None:
    issue, event = _linked_pair(state=IssueState.SCHEDULED, ended_hours_ago=30)
    extra = make_event("evt-2", title="Standup")

    assert _operations([issue], [event, extra]) == _operations([issue], [event, extra])
