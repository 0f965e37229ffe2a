"""Reconciliation settings loaded from the environment."""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tasksync.domain.model import SyncSettings, WorkingHours
from tasksync.domain.model.settings import DEFAULT_WORKING_DAYS

from .env import env_int, env_int_list, optional_env_var, require_env_vars
from .errors import ConfigurationError

DEFAULT_TIMEZONE = "America/New_York"


def get_sync_settings() -> SyncSettings:
    values = require_env_vars(("GCAL_CALENDAR_ID",))
    timezone_name = optional_env_var("TIMEZONE") or DEFAULT_TIMEZONE
    try:
        timezone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {timezone_name!r}") from exc

    try:
        working_hours = WorkingHours(
            start_hour=env_int("WORK_START_HOUR", 9),
            end_hour=env_int("WORK_END_HOUR", 17),
            working_days=env_int_list("WORKING_DAYS", DEFAULT_WORKING_DAYS),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    lookback_days = env_int("LOOKBACK_DAYS", 2)
    lookahead_days = env_int("LOOKAHEAD_DAYS", 14)
    if lookback_days < 0 or lookahead_days < 0:
        raise ConfigurationError("LOOKBACK_DAYS and LOOKAHEAD_DAYS must be non-negative")

    return SyncSettings(
        calendar_id=values["GCAL_CALENDAR_ID"],
        history_calendar_id=optional_env_var("GCAL_HISTORY_CALENDAR_ID"),
        timezone=timezone,
        working_hours=working_hours,
        lookback_days=lookback_days,
        lookahead_days=lookahead_days,
    )
