from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from tasksync.domain.model import EventStatus, WorkingHours
from tasksync.domain.scheduling import TimeSlot, find_slot
from tests.support.fakes import NOW, make_event

HOURS = WorkingHours()
TUESDAY = date(2025, 3, 11)


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def test_empty_calendar_uses_start_of_preferred_window() -> None:
    slot = find_slot(30, None, [], HOURS, now=NOW)

    assert slot == TimeSlot(start=_at(TUESDAY, 10), end=_at(TUESDAY, 10, 30))
    assert slot.duration_minutes == 30


def test_slot_keeps_buffer_after_existing_event() -> None:
    busy = make_event(start=_at(TUESDAY, 10), end=_at(TUESDAY, 11))

    slot = find_slot(30, None, [busy], HOURS, now=NOW)

    assert slot.start == _at(TUESDAY, 11, 15)


def test_slot_keeps_buffer_before_next_event() -> None:
    early = make_event("early", start=_at(TUESDAY, 9), end=_at(TUESDAY, 9, 50))
    late = make_event("late", start=_at(TUESDAY, 10, 40), end=_at(TUESDAY, 12))

    slot = find_slot(30, None, [early, late], HOURS, now=NOW)

    # 10:05-10:35 would end 5 minutes before the 10:40 event
    assert slot.start == _at(TUESDAY, 12, 15)


def test_gap_between_events_is_used_when_wide_enough() -> None:
    morning = make_event("morning", start=_at(TUESDAY, 10), end=_at(TUESDAY, 11))
    afternoon = make_event("afternoon", start=_at(TUESDAY, 12), end=_at(TUESDAY, 15))

    slot = find_slot(30, None, [afternoon, morning], HOURS, now=NOW)

    assert slot == TimeSlot(start=_at(TUESDAY, 11, 15), end=_at(TUESDAY, 11, 45))


def test_full_working_window_used_when_preferred_window_is_full() -> None:
    blocker = make_event(start=_at(TUESDAY, 10), end=_at(TUESDAY, 16))

    slot = find_slot(30, None, [blocker], HOURS, now=NOW)

    assert slot.start == _at(TUESDAY, 9)


def test_all_day_and_cancelled_events_never_block() -> None:
    all_day = make_event("holiday", start=TUESDAY, end=TUESDAY + timedelta(days=1))
    cancelled = make_event(
        "cancelled",
        start=_at(TUESDAY, 10),
        end=_at(TUESDAY, 12),
        status=EventStatus.CANCELLED,
    )

    slot = find_slot(30, None, [all_day, cancelled], HOURS, now=NOW)

    assert slot.start == _at(TUESDAY, 10)


def test_weekends_are_skipped() -> None:
    friday_noon = datetime(2025, 3, 14, 12, tzinfo=UTC)

    slot = find_slot(60, None, [], HOURS, now=friday_noon)

    assert slot.start == _at(date(2025, 3, 17), 10)


def test_preferred_date_is_honoured_but_never_before_tomorrow() -> None:
    assert find_slot(30, date(2025, 3, 13), [], HOURS, now=NOW).start == _at(date(2025, 3, 13), 10)
    assert find_slot(30, date(2025, 3, 1), [], HOURS, now=NOW).start == _at(TUESDAY, 10)


def test_full_day_moves_to_next_working_day() -> None:
    blocker = make_event(start=_at(TUESDAY, 8), end=_at(TUESDAY, 18))

    slot = find_slot(45, None, [blocker], HOURS, now=NOW)

    assert slot.start == _at(date(2025, 3, 12), 10)


def test_unplaceable_duration_falls_back_after_horizon(caplog: pytest.LogCaptureFixture) -> None:
    slot = find_slot(600, None, [], HOURS, now=NOW, horizon_days=14)

    assert slot.start == _at(date(2025, 3, 25), 9)
    assert slot.duration_minutes == 600
    assert "falling back" in caplog.text


def test_slots_are_placed_in_the_configured_timezone() -> None:
    new_york = ZoneInfo("America/New_York")

    slot = find_slot(30, None, [], HOURS, now=NOW, timezone=new_york)

    assert slot.start == datetime(2025, 3, 11, 10, tzinfo=new_york)
    assert slot.start.astimezone(UTC) == _at(TUESDAY, 14)


def test_custom_buffer_and_working_days() -> None:
    hours = WorkingHours(start_hour=8, end_hour=12, working_days=(3,), preferred_start_hour=8)
    busy = make_event(start=_at(date(2025, 3, 12), 8), end=_at(date(2025, 3, 12), 9))

    slot = find_slot(30, None, [busy], hours, now=NOW, buffer_minutes=0)

    assert slot.start == _at(date(2025, 3, 12), 9)


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError, match="positive"):
        find_slot(0, None, [], HOURS, now=NOW)
    with pytest.raises(ValueError, match="timezone"):
        find_slot(30, None, [], HOURS, now=datetime(2025, 3, 10, 12))  # noqa: DTZ001
