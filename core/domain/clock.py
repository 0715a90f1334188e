"""
Clock abstraction.

Every "current time" read in the domain goes through a Clock so
expiration checks can be driven deterministically in tests.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """
        Return the current time.

        Returns:
            Timezone-aware UTC datetime
        """
        pass


class SystemClock(Clock):
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, current: Optional[datetime] = None):
        self._current = current or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: timedelta) -> datetime:
        """
        Move the clock forward.

        Args:
            delta: Amount of time to add

        Returns:
            The new current time
        """
        self._current = self._current + delta
        return self._current

    def set(self, current: datetime) -> None:
        """Jump the clock to an absolute time."""
        self._current = current
