from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from hoursdash.clockify.durations import (
    IntervalDuration,
    IsoDuration,
    SecondsDuration,
    duration_from_interval,
    duration_hours,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("PT1H30M", 1.5),
        ("PT45M", 0.75),
        ("PT0S", 0.0),
        ("PT2H", 2.0),
        ("PT1H0M36S", 1.01),
        ("PT", 0.0),
        ("P1DT1H", 25.0),
    ],
)
def test_iso_duration_hours(value, expected):
    assert duration_hours(IsoDuration(value)) == pytest.approx(expected)


def test_unparseable_iso_counts_as_zero():
    assert duration_hours(IsoDuration("90 minutes")) == 0.0


def test_seconds_duration():
    assert duration_hours(SecondsDuration(5400)) == pytest.approx(1.5)
    assert duration_hours(SecondsDuration(-60)) == 0.0


def test_interval_duration():
    start = NOW - timedelta(hours=3)
    assert duration_hours(IntervalDuration(start, NOW)) == pytest.approx(3.0)


def test_interval_end_before_start_is_clamped():
    start = NOW
    end = NOW - timedelta(minutes=30)
    assert duration_hours(IntervalDuration(start, end)) == 0.0


def test_running_interval_measured_against_now():
    start = NOW - timedelta(minutes=90)
    assert duration_hours(IntervalDuration(start, None), now=NOW) == pytest.approx(1.5)


def test_naive_timestamps_are_utc():
    start = datetime(2025, 6, 1, 10, 0)
    assert duration_hours(IntervalDuration(start, None), now=NOW) == pytest.approx(2.0)


def test_duration_from_interval_picks_variant():
    assert duration_from_interval({"duration": "PT1H"}) == IsoDuration("PT1H")
    assert duration_from_interval({"duration": 3600}) == SecondsDuration(3600.0)

    running = duration_from_interval({"start": "2025-06-01T10:00:00Z", "end": None, "duration": None})
    assert isinstance(running, IntervalDuration)
    assert running.start == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert running.end is None

    assert duration_from_interval(None) == SecondsDuration(0.0)
    assert duration_from_interval({}) == SecondsDuration(0.0)


def test_duration_from_interval_rejects_bad_data():
    with pytest.raises(ValueError):
        duration_from_interval({"start": "garbage", "end": None})
    with pytest.raises(ValueError):
        duration_from_interval("PT1H")
