"""Duration normalization for Clockify time entries.

Clockify reports elapsed time in three shapes depending on the endpoint:

* ``timeInterval.duration`` as an ISO-8601 period (``PT1H30M``) on the
  time-entries API,
* a raw number of seconds on the reports API,
* only ``start``/``end`` timestamps, with ``end`` missing while a timer runs.

Each shape is a separate dataclass; ``duration_hours`` dispatches on the type.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

ISO_DURATION_RE = re.compile(
    r"^P"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T"
    r"(?:(?P<hours>\d+)H)?"
    r"(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?"
    r")?$"
)


@dataclass(frozen=True)
class IsoDuration:
    value: str


@dataclass(frozen=True)
class SecondsDuration:
    seconds: float


@dataclass(frozen=True)
class IntervalDuration:
    start: datetime
    end: Optional[datetime] = None


Duration = Union[IsoDuration, SecondsDuration, IntervalDuration]


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def iso_duration_to_seconds(duration: Optional[str]) -> float:
    if not duration:
        return 0.0
    match = ISO_DURATION_RE.match(duration.strip())
    if not match:
        return 0.0
    days = int(match.group("days") or 0)
    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    seconds = float(match.group("seconds") or 0)
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


def duration_hours(duration: Duration, now: Optional[datetime] = None) -> float:
    """Return the elapsed hours of ``duration``, never negative.

    A running interval (no end) is measured up to ``now``, which defaults to
    the current UTC time.
    """
    if isinstance(duration, IsoDuration):
        return iso_duration_to_seconds(duration.value) / 3600.0
    if isinstance(duration, SecondsDuration):
        return max(float(duration.seconds), 0.0) / 3600.0
    if isinstance(duration, IntervalDuration):
        end = duration.end or now or datetime.now(timezone.utc)
        elapsed = (_as_utc(end) - _as_utc(duration.start)).total_seconds()
        # end before start is bad data, not negative consumption
        return max(elapsed, 0.0) / 3600.0
    raise TypeError(f"Unsupported duration type: {type(duration).__name__}")


def duration_from_interval(interval: Optional[dict[str, Any]]) -> Duration:
    interval = interval or {}
    if not isinstance(interval, dict):
        raise ValueError(f"timeInterval is not an object: {interval!r}")
    raw = interval.get("duration")
    if isinstance(raw, str) and raw.strip():
        return IsoDuration(raw.strip())
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return SecondsDuration(float(raw))
    start = parse_iso_datetime(interval.get("start"))
    if start is not None:
        return IntervalDuration(start=start, end=parse_iso_datetime(interval.get("end")))
    return SecondsDuration(0.0)
