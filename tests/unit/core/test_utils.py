"""Unit tests for notu.core.utils."""

from datetime import datetime, timedelta, timezone

from notu.core.utils import new_local_id, to_naive_utc, utc_now


class TestUtcNow:
    def test_is_naive(self):
        assert utc_now().tzinfo is None

    def test_close_to_aware_now(self):
        aware = datetime.now(timezone.utc).replace(tzinfo=None)
        assert abs(utc_now() - aware) < timedelta(seconds=5)


class TestToNaiveUtc:
    def test_converts_offset(self):
        value = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=7)))
        assert to_naive_utc(value) == datetime(2024, 1, 1, 2, 0)

    def test_naive_passes_through(self):
        value = datetime(2024, 1, 1, 9, 0)
        assert to_naive_utc(value) is value


class TestNewLocalId:
    def test_numeric_string(self):
        assert new_local_id().isdigit()

    def test_strictly_increasing(self):
        ids = [int(new_local_id()) for _ in range(100)]
        assert ids == sorted(set(ids))
