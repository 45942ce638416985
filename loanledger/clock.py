"""
clock.py - Time sources for the lifecycle manager

Classes:
- FixedClock: Manually advanced time (tests, simulations, replay)
- SystemClock: Wall-clock seconds since the epoch

Both satisfy the Clock protocol in core.py. Times are integer seconds.
"""

from __future__ import annotations
from datetime import datetime, timezone
import time
from typing import Union


class FixedClock:
    """
    Clock that only moves when told to.

    Time never goes backwards: advance_to() rejects earlier timestamps.
    """

    def __init__(self, now: int = 0):
        if now < 0:
            raise ValueError(f"time cannot be negative, got {now}")
        self._now = now

    def current_time(self) -> int:
        return self._now

    def advance_to(self, timestamp: Union[int, datetime]) -> None:
        """Set the clock to timestamp (int seconds or aware/naive-UTC datetime)."""
        if isinstance(timestamp, datetime):
            timestamp = to_timestamp(timestamp)
        if timestamp < self._now:
            raise ValueError(f"Cannot move clock backwards from {self._now} to {timestamp}")
        self._now = timestamp

    def advance_by(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError(f"seconds cannot be negative, got {seconds}")
        self._now += seconds

    def __repr__(self):
        return f"FixedClock({self._now})"


class SystemClock:
    """Wall-clock time, truncated to whole seconds."""

    def current_time(self) -> int:
        return int(time.time())

    def __repr__(self):
        return "SystemClock()"


def to_timestamp(moment: datetime) -> int:
    """Seconds since epoch for a datetime; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())
