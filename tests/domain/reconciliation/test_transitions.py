from __future__ import annotations

from datetime import timedelta

import pytest

from tasksync.domain.metadata import EventLink, IssueEventTag
from tasksync.domain.model import IssueState, Phase
from tasksync.domain.reconciliation import LEGAL_TRANSITIONS, is_legal_transition, project
from tests.support.fakes import NOW, make_event, make_issue


def test_every_phase_has_an_entry() -> None:
    assert set(LEGAL_TRANSITIONS) == set(Phase)


def test_completed_is_terminal() -> None:
    assert all(not is_legal_transition(Phase.COMPLETED, phase) for phase in Phase)


@pytest.mark.parametrize(
    ("previous", "current", "legal"),
    [
        (Phase.EVENT_ONLY, Phase.ACTIVE, True),
        (Phase.ISSUE_ONLY, Phase.ACTIVE, True),
        (Phase.ACTIVE, Phase.OVERDUE, True),
        (Phase.OVERDUE, Phase.ACTIVE, True),
        (Phase.OVERDUE, Phase.COMPLETED, False),
        (Phase.EVENT_ONLY, Phase.ISSUE_ONLY, False),
        (Phase.ISSUE_ONLY, Phase.COMPLETED, False),
    ],
)
def test_is_legal_transition(previous: Phase, current: Phase, legal: bool) -> None:
    assert is_legal_transition(previous, current) is legal


def test_linked_item_ages_from_active_into_overdue() -> None:
    start = NOW + timedelta(hours=1)
    event = make_event(
        "evt-1",
        start=start,
        private=EventLink(uid="uid-1", linked_issue_id="iss-1").to_private(),
    )
    issue = make_issue(
        "iss-1",
        state=IssueState.SCHEDULED,
        notes=IssueEventTag("evt-1", start, 30).format(),
    )

    [before] = project([issue], [event], NOW).items
    [after] = project([issue], [event], NOW + timedelta(days=3)).items

    assert (before.phase, after.phase) == (Phase.ACTIVE, Phase.OVERDUE)
    assert is_legal_transition(before.phase, after.phase)
