from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Protocol

from ..core.constants import DEFAULT_LATE_CUTOFF

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CLOCK_FORMATS = ("%H:%M:%S", "%H:%M")


class Clock(Protocol):
    """Source of "now" for services, so tests can pin time."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock:
    """Local wall clock, truncated to whole seconds."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, current: datetime):
        self._current = current

    def now(self) -> datetime:
        return self._current

    def today(self) -> date:
        return self._current.date()

    def advance(self, **kwargs) -> datetime:
        self._current = self._current + timedelta(**kwargs)
        return self._current


def is_iso_date(value: object) -> bool:
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` is read as UTC."""
    v = (value or "").strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        return None


def parse_clock_time(value: Optional[str]) -> Optional[time]:
    """Parse ``HH:MM[:SS[.ffffff]]`` into a time; None when unparseable."""
    v = (value or "").strip()
    if not v:
        return None
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    try:
        return time.fromisoformat(v)
    except ValueError:
        return None


def _looks_like_timestamp(value: str) -> bool:
    return "T" in value or " " in value.strip()


def clock_time_of(value: Optional[str]) -> Optional[time]:
    """Wall-clock time of a stored ``time_in``/``time_out`` value.

    Stored values are either a bare clock time ("09:05") written by the
    Firebase import, or an ISO timestamp written by a live toggle.
    """
    v = (value or "").strip()
    if not v:
        return None
    if _looks_like_timestamp(v):
        ts = parse_timestamp(v)
        return ts.time().replace(tzinfo=None) if ts else None
    parsed = parse_clock_time(v)
    return parsed.replace(tzinfo=None) if parsed else None


def session_instant(work_date: str, value: Optional[str]) -> Optional[datetime]:
    """Absolute instant of a stored session time on ``work_date``."""
    v = (value or "").strip()
    if not v or not work_date:
        return None
    if _looks_like_timestamp(v):
        return parse_timestamp(v)
    return parse_timestamp(f"{work_date}T{v}")


def calculate_duration(work_date: Optional[str], time_in: Optional[str], time_out: Optional[str]) -> Optional[int]:
    """Minutes between two same-day clock times, rounded half up, never negative.

    Returns None when any input is missing or unparseable.
    """
    if not work_date or not time_in or not time_out:
        return None

    start = parse_timestamp(f"{work_date}T{time_in.strip()}")
    end = parse_timestamp(f"{work_date}T{time_out.strip()}")
    if start is None or end is None:
        return None

    try:
        seconds = (end - start).total_seconds()
    except TypeError:
        # naive vs aware clock strings
        return None

    minutes = math.floor(seconds / 60 + 0.5)
    return minutes if minutes > 0 else 0


def to_local_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to local wall-clock time; naive ones pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, floored and clamped to >= 0.

    Either side may carry a UTC offset (an imported ``...Z`` check-in).
    """
    seconds = (to_local_naive(end) - to_local_naive(start)).total_seconds()
    minutes = math.floor(seconds / 60)
    return minutes if minutes > 0 else 0


def is_late(time_in: Optional[str], cutoff: time = DEFAULT_LATE_CUTOFF) -> bool:
    """True when the check-in wall-clock time is strictly after ``cutoff``.

    Unparseable values count as on time.
    """
    t = clock_time_of(time_in)
    if t is None:
        return False
    return t > cutoff
