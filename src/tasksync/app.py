"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from tasksync.adapters.dry_run import DryRunEventClient, DryRunIssueClient
from tasksync.adapters.gcal import GoogleCalendarClient, ServiceAccountTokenSource
from tasksync.adapters.linear import LinearIssueClient
from tasksync.config import get_gcal_config, get_linear_config, get_sync_settings
from tasksync.domain.reconciliation import ReconciliationEngine, SyncPassResult
from tasksync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from tasksync.domain.model import SyncSettings
    from tasksync.domain.ports import EventClient, IssueClient
    from tasksync.domain.time_windows import Clock


log = getLogger(__name__)


async def run_sync_pass(
    *,
    dry_run: bool = False,
    settings: SyncSettings | None = None,
    issue_client: IssueClient | None = None,
    event_client: EventClient | None = None,
    clock: Clock | None = None,
) -> SyncPassResult:
    """Run one reconciliation pass with the configured adapters."""

    effective_settings = settings or get_sync_settings()
    async with AsyncExitStack() as stack:
        issues = issue_client
        if issues is None:
            issues = await stack.enter_async_context(LinearIssueClient(get_linear_config()))
        events = event_client
        if events is None:
            gcal_config = get_gcal_config()
            events = await stack.enter_async_context(
                GoogleCalendarClient(
                    config=gcal_config,
                    calendar_id=effective_settings.calendar_id,
                    token_provider=ServiceAccountTokenSource(
                        gcal_config.service_account_json,
                        gcal_config.scopes,
                    ),
                )
            )
        if dry_run:
            issues = DryRunIssueClient(issues)
            events = DryRunEventClient(events)

        log.info(
            "Starting sync: calendar=%s, history=%s, dry_run=%s",
            effective_settings.calendar_id,
            effective_settings.history_calendar_id,
            dry_run,
        )
        engine = ReconciliationEngine(issues, events, effective_settings, clock=clock or utcnow)
        result = await engine.run_pass()

    log.info(
        f"Finished sync: items={result.items_processed}, operations={len(result.operations)}, "
        f"errors={len(result.errors)}, duration={result.duration.total_seconds():.1f}s"
    )
    return result


def sync_calendar_and_issues(*, dry_run: bool = False) -> SyncPassResult:
    return asyncio.run(run_sync_pass(dry_run=dry_run))
