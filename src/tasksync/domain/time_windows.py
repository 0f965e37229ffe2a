"""Utilities for constraining snapshot fetches to specific time windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tasksync.domain.model import SyncSettings


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow:
    """Describe the temporal bounds of a calendar snapshot."""

    start: datetime
    end: datetime

    def resolve(self) -> tuple[datetime, datetime]:
        """Resolve the window into validated UTC timestamps."""

        resolved_start = _ensure_aware(self.start)
        resolved_end = _ensure_aware(self.end)
        if resolved_start > resolved_end:
            raise ValueError("Time window start must be before end")
        return resolved_start, resolved_end


def snapshot_window(settings: SyncSettings, *, clock: Clock = utcnow) -> tuple[datetime, datetime]:
    """Whole-day window from ``lookback_days`` ago to the end of ``lookahead_days`` ahead."""

    if settings.lookback_days < 0 or settings.lookahead_days < 0:
        raise ValueError("Lookback and lookahead days must be non-negative")
    local_now = clock().astimezone(settings.timezone)
    first_day = local_now.date() - timedelta(days=settings.lookback_days)
    last_day = local_now.date() + timedelta(days=settings.lookahead_days + 1)
    window = TimeWindow(
        start=datetime.combine(first_day, time.min, tzinfo=settings.timezone),
        end=datetime.combine(last_day, time.min, tzinfo=settings.timezone),
    )
    return window.resolve()


__all__ = ["Clock", "TimeWindow", "snapshot_window", "utcnow"]
