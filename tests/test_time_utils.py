"""Tests for time utilities."""

from datetime import datetime, timedelta, timezone

from recordquery.utils.time import utc_now_z


def test_utc_now_z_always_ends_with_z():
    result = utc_now_z()
    assert result.endswith("Z"), f"Expected result to end with 'Z', got: {result}"
    assert "+00:00" not in result


def test_utc_now_z_is_current_utc_time():
    parsed = datetime.fromisoformat(utc_now_z()[:-1]).replace(tzinfo=timezone.utc)
    assert abs(datetime.now(timezone.utc) - parsed) < timedelta(seconds=5)
