"""
Clock abstraction for the register.

All "now", "today" and "has the day changed" decisions read a Clock so that
suspension ids, expiry cleanup and the cleanup scheduler can be driven
deterministically in tests.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional

import pytz


class Clock(ABC):
    """Source of the current local time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current register-local time (timezone-naive)."""
        ...

    def today(self) -> date:
        """Return the current register-local calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """
    Wall clock, optionally localised to the register's timezone.

    Args:
        timezone: IANA timezone string (e.g., "America/Chicago").
                  If None, host local time is used.
    """

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = pytz.timezone(timezone) if timezone else None

    def now(self) -> datetime:
        if self.timezone is None:
            return datetime.now()
        # Stored timestamps are naive register-local time
        return datetime.now(pytz.UTC).astimezone(self.timezone).replace(tzinfo=None)
