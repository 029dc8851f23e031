"""Clock - timestamp collaborator for append-only records and bans.

Invariants:
    - Core code never calls datetime.now() directly; time comes from a Clock
    - All timestamps are timezone-aware UTC

Design Decisions:
    - Protocol over ABC: any object with now() qualifies, including test doubles
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Deterministic clock. Returns the same instant until advanced."""

    def __init__(self, instant: datetime, step: timedelta | None = None):
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._instant = instant
        self._step = step

    def now(self) -> datetime:
        current = self._instant
        if self._step is not None:
            self._instant = current + self._step
        return current

    def advance(self, delta: timedelta) -> None:
        self._instant += delta
