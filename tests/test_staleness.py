"""Tests for the up-to-date decision."""

import pytest

from freshfetch import staleness
from freshfetch.staleness import is_up_to_date


@pytest.mark.parametrize("last", [0, -1, -1_000_000])
@pytest.mark.parametrize("now", [0, 1_000, 1_700_000_000_000])
@pytest.mark.parametrize("interval", [0, 60, 10**9])
def test_never_run_is_not_up_to_date(now, last, interval):
    assert is_up_to_date(now, last, interval) is False


class TestBoundary:
    LAST = 1_700_000_000_000

    def test_before_boundary(self):
        assert is_up_to_date(self.LAST + 30_000, self.LAST, 60) is True

    def test_exactly_at_boundary(self):
        assert is_up_to_date(self.LAST + 60_000, self.LAST, 60) is True

    def test_after_boundary(self):
        assert is_up_to_date(self.LAST + 60_001, self.LAST, 60) is False

    def test_zero_interval(self):
        assert is_up_to_date(self.LAST, self.LAST, 0) is True
        assert is_up_to_date(self.LAST + 1, self.LAST, 0) is False

    def test_now_before_last(self):
        assert is_up_to_date(self.LAST - 5_000, self.LAST, 60) is True


def test_now_truncates_to_seconds(monkeypatch):
    monkeypatch.setattr(staleness.time, "time_ns", lambda: 1_700_000_123_456_789_012)
    assert staleness.now() == 1_700_000_123_000


def test_now_is_whole_seconds():
    assert staleness.now() % 1000 == 0
