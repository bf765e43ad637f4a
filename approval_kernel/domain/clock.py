"""
Clock -- injectable time source.

Every timestamp the workflow writes (``created_at`` of a request,
``action_at``, ``assigned_date``, ``return_date``, ``resolved_at``) comes
from a Clock handed to the service, never from ``datetime.now()``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

# Default pinned instant for DeterministicClock
EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware UTC datetimes."""

    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Used by the test suite to assert exact ``action_at`` / assignment
    dates and to order requests by ``created_at``.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or EPOCH

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Move one second forward and return the new instant."""
        self.advance()
        return self._current
