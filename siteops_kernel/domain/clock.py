"""
Clock -- injectable time source.

Services that stamp records (``created_at``, default payment dates) receive
a Clock through their constructor and never call ``datetime.now()``
themselves, so tests can pin time with DeterministicClock.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """
    Abstract clock interface.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...


class SystemClock(Clock):
    """Production clock that returns actual system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Test clock: ``now()`` always returns the time it was built with."""

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 15, 9, 30, 0, tzinfo=timezone.utc
        )

    def now(self) -> datetime:
        return self._fixed_time
