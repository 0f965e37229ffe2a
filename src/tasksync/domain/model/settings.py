"""Reconciliation settings threaded explicitly through the core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, timedelta, tzinfo

DEFAULT_WORKING_DAYS = (1, 2, 3, 4, 5)


@dataclass(frozen=True, slots=True)
class WorkingHours:
    """Working day window; ``working_days`` uses ISO weekdays (1=Monday)."""

    start_hour: int = 9
    end_hour: int = 17
    working_days: tuple[int, ...] = DEFAULT_WORKING_DAYS
    preferred_start_hour: int = 10
    preferred_end_hour: int = 16

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError("Working hours must satisfy 0 <= start < end <= 24")
        if any(day not in range(1, 8) for day in self.working_days):
            raise ValueError("Working days must be ISO weekdays between 1 and 7")

    @property
    def preferred_window(self) -> tuple[int, int]:
        """Preferred placement hours, narrowed to the working window."""

        return (
            max(self.preferred_start_hour, self.start_hour),
            min(self.preferred_end_hour, self.end_hour),
        )


@dataclass(frozen=True, slots=True)
class SyncSettings:
    calendar_id: str
    history_calendar_id: str | None = None
    timezone: tzinfo = UTC
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    lookback_days: int = 2
    lookahead_days: int = 14
    overdue_after: timedelta = timedelta(hours=24)
    search_horizon_days: int = 14
    buffer_minutes: int = 15
