"""Clock capability used for expiry computation and ID Token checks."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current time as an aware UTC ``datetime``."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Reads the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


SYSTEM_CLOCK = SystemClock()
