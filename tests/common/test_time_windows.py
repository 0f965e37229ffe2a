from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from tasksync.domain.model import SyncSettings
from tasksync.domain.time_windows import Clock, TimeWindow, snapshot_window


def _make_clock(reference: datetime) -> Clock:
    def _clock() -> datetime:
        return reference

    return _clock


def test_time_window_normalises_to_utc() -> None:
    start = datetime(2025, 1, 1, 12, tzinfo=ZoneInfo("Europe/Berlin"))
    end = datetime(2025, 1, 2, 12, tzinfo=UTC)

    resolved_start, resolved_end = TimeWindow(start=start, end=end).resolve()

    assert resolved_start == datetime(2025, 1, 1, 11, tzinfo=UTC)
    assert resolved_start.tzinfo is UTC
    assert resolved_end == end


def test_time_window_rejects_naive_datetimes() -> None:
    start = datetime(2025, 1, 1, 12, tzinfo=UTC).replace(tzinfo=None)
    end = datetime(2025, 1, 2, 12, tzinfo=UTC).replace(tzinfo=None)
    window = TimeWindow(start=start, end=end)

    with pytest.raises(ValueError, match="timezone information"):
        window.resolve()


def test_time_window_rejects_inverted_bounds() -> None:
    start = datetime(2025, 1, 2, tzinfo=UTC)
    end = datetime(2025, 1, 1, tzinfo=UTC)
    window = TimeWindow(start=start, end=end)

    with pytest.raises(ValueError, match="before end"):
        window.resolve()


def test_snapshot_window_rejects_negative_spans() -> None:
    settings = SyncSettings(calendar_id="primary", lookahead_days=-1)

    with pytest.raises(ValueError, match="non-negative"):
        snapshot_window(settings, clock=_make_clock(datetime(2025, 1, 1, tzinfo=UTC)))


def test_snapshot_window_covers_whole_local_days() -> None:
    tz = ZoneInfo("America/New_York")
    settings = SyncSettings(calendar_id="primary", timezone=tz, lookback_days=2, lookahead_days=14)
    now = datetime(2025, 3, 20, 2, tzinfo=UTC)  # still March 19 in New York

    start, end = snapshot_window(settings, clock=_make_clock(now))

    assert start == datetime(2025, 3, 17, tzinfo=tz).astimezone(UTC)
    assert end == datetime(2025, 4, 3, tzinfo=tz).astimezone(UTC)
    assert start.tzinfo is UTC
