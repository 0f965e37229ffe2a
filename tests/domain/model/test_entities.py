from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from tasksync.domain.model import (
    CanonicalItem,
    EventStatus,
    ExternalEvent,
    IssueState,
    Phase,
    as_datetime,
    is_all_day,
)


def test_issue_state_from_name_is_lenient(caplog: pytest.LogCaptureFixture) -> None:
    assert IssueState.from_name("scheduled") is IssueState.SCHEDULED
    assert IssueState.from_name(" Done ") is IssueState.DONE
    assert IssueState.from_name("Cancelled") is IssueState.CANCELED

    assert IssueState.from_name("In Review") is IssueState.TRIAGE
    assert "In Review" in caplog.text


def test_terminal_states() -> None:
    assert {state for state in IssueState if state.is_terminal} == {
        IssueState.DONE,
        IssueState.CANCELED,
        IssueState.FAILED,
    }


def test_as_datetime_treats_dates_as_midnight() -> None:
    assert as_datetime(date(2025, 3, 10)) == datetime(2025, 3, 10, tzinfo=UTC)
    assert is_all_day(date(2025, 3, 10))
    assert not is_all_day(datetime(2025, 3, 10, tzinfo=UTC))
    assert not is_all_day(None)


def test_as_datetime_rejects_naive_timestamps() -> None:
    with pytest.raises(ValueError, match="timezone"):
        as_datetime(datetime(2025, 3, 10, 9))  # noqa: DTZ001


def test_event_duration_and_cancellation() -> None:
    event = ExternalEvent(
        id="evt",
        title="Sync",
        start=datetime(2025, 3, 10, 9, tzinfo=UTC),
        end=datetime(2025, 3, 10, 10, 30, tzinfo=UTC),
        status=EventStatus.CANCELLED,
    )

    assert event.duration_minutes == 90
    assert event.is_cancelled


def test_canonical_item_requires_a_side() -> None:
    with pytest.raises(ValueError, match="issue or an event"):
        CanonicalItem(
            uid="uid",
            title="Orphan",
            phase=Phase.ACTIVE,
            last_observed_at=datetime(2025, 3, 10, tzinfo=UTC),
        )


def test_canonical_item_issue_ref_prefers_key() -> None:
    item = CanonicalItem(
        uid="uid",
        title="Task",
        phase=Phase.ISSUE_ONLY,
        last_observed_at=datetime(2025, 3, 10, tzinfo=UTC),
        issue_id="abc",
        issue_key="ENG-1",
    )

    assert item.issue_ref == "ENG-1"
