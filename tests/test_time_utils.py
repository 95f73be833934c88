from datetime import datetime, timedelta, timezone

import pytest

from time_utils import format_local_date, format_timestamp, parse_timestamp, resolve_timezone


def test_parse_z_suffix_and_offsets():
    assert parse_timestamp("2025-01-01T06:00:00.000Z") == datetime(2025, 1, 1, 6, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2025-01-01T15:00:00+09:00") == datetime(2025, 1, 1, 6, 0, tzinfo=timezone.utc)


def test_naive_timestamp_is_utc():
    assert parse_timestamp("2025-01-01T06:00:00").tzinfo == timezone.utc


@pytest.mark.parametrize("raw", ["", "   ", "tomorrow", None, 17])
def test_parse_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_timestamp(raw)


def test_format_is_utc_with_milliseconds():
    local = datetime(2025, 1, 1, 15, 0, 0, 123456, tzinfo=timezone(timedelta(hours=9)))
    assert format_timestamp(local) == "2025-01-01T06:00:00.123Z"


def test_local_date_uses_display_zone():
    dt = datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc)
    assert format_local_date(dt, timezone(timedelta(hours=9))) == "2025-01-02"
    assert format_local_date(dt, None) == "2025-01-01"


def test_resolve_utc_without_tz_database():
    assert resolve_timezone("UTC") is timezone.utc
    assert resolve_timezone(None) is not None
