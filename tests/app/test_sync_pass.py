from __future__ import annotations

import asyncio

import pytest

from tasksync.app import run_sync_pass
from tasksync.domain.model import IssueState, SyncSettings
from tests.support.fakes import InMemoryEventClient, InMemoryIssueClient, fixed_clock, make_event, make_issue

SETTINGS = SyncSettings(calendar_id="primary")


def test_run_sync_pass_with_injected_clients() -> None:
    issues = InMemoryIssueClient.with_issues(make_issue("iss-1", state=IssueState.SCHEDULED))
    events = InMemoryEventClient.with_events(make_event("evt-1", title="Dentist"))

    result = asyncio.run(
        run_sync_pass(settings=SETTINGS, issue_client=issues, event_client=events, clock=fixed_clock())
    )

    assert result.succeeded
    assert len(result.operations) == 2
    assert list(events.events) == ["evt-1", "new-event-1"]
    assert "new-issue-1" in issues.issues


def test_dry_run_plans_without_writing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO")
    issues = InMemoryIssueClient.with_issues(make_issue("iss-1", state=IssueState.SCHEDULED))
    events = InMemoryEventClient.with_events(make_event("evt-1", title="Dentist"))

    result = asyncio.run(
        run_sync_pass(
            dry_run=True,
            settings=SETTINGS,
            issue_client=issues,
            event_client=events,
            clock=fixed_clock(),
        )
    )

    assert result.succeeded
    assert len(result.operations) == 2
    assert issues.created == []
    assert issues.updates == []
    assert events.created == []
    assert events.updates == []
    assert "[dry run] Would create event" in caplog.text
