"""First-fit placement of new timed work into free calendar time.

The search walks forward day by day from ``max(preferred_date, tomorrow)``. On
each working day it tries the preferred window first and the full working window
second. Inside a window the candidates are, in order, the window start, the gap
after each existing event and the time after the last event; every candidate
keeps ``buffer_minutes`` of clearance to its neighbours and must end inside the
window. When nothing fits within the horizon the slot falls back to the start of
working hours on the day after the horizon, conflicts notwithstanding.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tasksync.domain.model import ExternalEvent, WorkingHours

log = getLogger(__name__)

DEFAULT_HORIZON_DAYS = 14
DEFAULT_BUFFER_MINUTES = 15


@dataclass(frozen=True, slots=True)
class TimeSlot:
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


type Interval = tuple[datetime, datetime]


def _busy_intervals(events: Iterable[ExternalEvent]) -> list[Interval]:
    """Timed, non-cancelled events as sorted intervals; all-day events never block."""

    intervals = [
        (event.start, event.end)
        for event in events
        if isinstance(event.start, datetime)
        and isinstance(event.end, datetime)
        and not event.is_cancelled
    ]
    return sorted(intervals)


def _at_hour(day: date, hour: int, tz: tzinfo) -> datetime:
    if hour == 24:
        return datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return datetime.combine(day, time(hour=hour), tzinfo=tz)


def _fit_in_window(
    window_start: datetime,
    window_end: datetime,
    duration: timedelta,
    busy: list[Interval],
    buffer: timedelta,
) -> TimeSlot | None:
    relevant = [
        (start, end)
        for start, end in busy
        if start < window_end + buffer and end > window_start - buffer
    ]

    cursor = window_start
    for start, end in relevant:
        candidate_end = cursor + duration
        if candidate_end + buffer <= start and candidate_end <= window_end:
            return TimeSlot(start=cursor, end=candidate_end)
        cursor = max(cursor, end + buffer)

    candidate_end = cursor + duration
    if candidate_end <= window_end:
        return TimeSlot(start=cursor, end=candidate_end)
    return None


def _fit_on_day(
    day: date,
    duration: timedelta,
    busy: list[Interval],
    working_hours: WorkingHours,
    tz: tzinfo,
    buffer: timedelta,
) -> TimeSlot | None:
    preferred_start, preferred_end = working_hours.preferred_window
    windows = []
    if preferred_start < preferred_end:
        windows.append((preferred_start, preferred_end))
    windows.append((working_hours.start_hour, working_hours.end_hour))

    for start_hour, end_hour in windows:
        slot = _fit_in_window(
            _at_hour(day, start_hour, tz),
            _at_hour(day, end_hour, tz),
            duration,
            busy,
            buffer,
        )
        if slot is not None:
            return slot
    return None


def find_slot(
    duration_minutes: int,
    preferred_date: date | None,
    existing_events: Iterable[ExternalEvent],
    working_hours: WorkingHours,
    *,
    now: datetime,
    timezone: tzinfo = UTC,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
) -> TimeSlot:
    """Return the first free slot of ``duration_minutes``; never raises for a full calendar."""

    if duration_minutes <= 0:
        raise ValueError("Slot duration must be positive")
    if now.tzinfo is None:
        raise ValueError("now must include timezone information")

    duration = timedelta(minutes=duration_minutes)
    buffer = timedelta(minutes=buffer_minutes)
    busy = _busy_intervals(existing_events)

    tomorrow = now.astimezone(timezone).date() + timedelta(days=1)
    first_day = max(preferred_date, tomorrow) if preferred_date else tomorrow

    for offset in range(horizon_days):
        day = first_day + timedelta(days=offset)
        if day.isoweekday() not in working_hours.working_days:
            continue
        slot = _fit_on_day(day, duration, busy, working_hours, timezone, buffer)
        if slot is not None:
            log.debug("Placed %s minute slot at %s", duration_minutes, slot.start.isoformat())
            return slot

    fallback_start = _at_hour(first_day + timedelta(days=horizon_days), working_hours.start_hour, timezone)
    log.warning(
        "No free %s minute slot within %s days of %s, falling back to %s",
        duration_minutes,
        horizon_days,
        first_day.isoformat(),
        fallback_start.isoformat(),
    )
    return TimeSlot(start=fallback_start, end=fallback_start + duration)


__all__ = ["DEFAULT_BUFFER_MINUTES", "DEFAULT_HORIZON_DAYS", "TimeSlot", "find_slot"]
