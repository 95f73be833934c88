from datetime import datetime, timedelta, timezone

import pytest

from alarms.progress import calculate_progress, elapsed_days


def _now() -> datetime:
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_ten_days_into_thirty_day_cycle():
    result = calculate_progress(_now() - timedelta(days=10), 30, _now())
    assert result.elapsed_days == 10
    assert result.progress == pytest.approx(1 / 3)
    assert result.remaining_days == 20
    assert result.is_due is False


def test_exactly_due():
    result = calculate_progress(_now() - timedelta(days=30), 30, _now())
    assert result.elapsed_days == 30
    assert result.progress == 1
    assert result.remaining_days == 0
    assert result.is_due is True


def test_overdue_clamps():
    result = calculate_progress(_now() - timedelta(days=40), 30, _now())
    assert result.progress == 1
    assert result.remaining_days == 0
    assert result.is_due is True


def test_future_start_counts_as_zero_elapsed():
    result = calculate_progress(_now() + timedelta(days=3), 5, _now())
    assert result.elapsed_days == 0
    assert result.progress == 0
    assert result.remaining_days == 5


def test_partial_day_is_truncated():
    start = _now() - timedelta(days=1, hours=23, minutes=59)
    assert elapsed_days(start, _now()) == 1
    assert elapsed_days(_now() - timedelta(milliseconds=1), _now()) == 0


def test_fixed_24_hour_days_ignore_offsets():
    start = datetime(2025, 3, 1, 0, 0, tzinfo=timezone(timedelta(hours=9)))
    now = datetime(2025, 3, 1, 15, 0, tzinfo=timezone.utc)
    # 2025-02-28T15:00Z to 2025-03-01T15:00Z
    assert elapsed_days(start, now) == 1


def test_progress_monotonic_and_due_iff_elapsed_reaches_interval():
    interval = 7
    start = _now()
    previous = -1.0
    for day in range(0, 15):
        result = calculate_progress(start, interval, start + timedelta(days=day, hours=5))
        assert result.progress >= previous
        assert 0 <= result.progress <= 1
        assert result.is_due == (result.elapsed_days >= interval)
        assert (result.remaining_days == 0) == (result.elapsed_days >= interval)
        previous = result.progress


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        calculate_progress(_now(), 0, _now())
