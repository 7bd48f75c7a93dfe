# mlm_system/utils/time_machine.py
"""
Time machine for testing - controls virtual time in the system,
plus the monthly cutoff calendar helpers built on it.
"""
import calendar
from datetime import date, datetime, time, timezone, timedelta
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class TimeMachine:
    """Singleton for managing system time."""

    _instance = None
    _virtualTime: Optional[datetime] = None
    _isTestMode: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def now(self) -> datetime:
        """Get current system time (real or virtual)."""
        if self._isTestMode and self._virtualTime:
            return self._virtualTime
        return datetime.now(timezone.utc)

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def currentMonth(self) -> str:
        """Get current month in YYYY-MM format."""
        return self.now.strftime('%Y-%m')

    def isCutoffDay(self, cutoffDay: int, day: Optional[date] = None) -> bool:
        """Check if `day` (default today) is the month's cutoff day."""
        day = day or self.today
        return day == cutoffDateFor(day.year, day.month, cutoffDay)

    def setTime(self, newTime: datetime, adminId: Optional[int] = None):
        """Set virtual time for testing."""
        self._isTestMode = True
        self._virtualTime = newTime
        logger.info(f"Virtual time set to {newTime} by admin {adminId}")

    def advanceTime(self, days: int = 0, hours: int = 0):
        """Advance virtual time forward."""
        if not self._isTestMode:
            raise ValueError("Cannot advance time when not in test mode")

        self._virtualTime += timedelta(days=days, hours=hours)
        logger.info(f"Time advanced to {self._virtualTime}")

    def resetToRealTime(self):
        """Return to real time."""
        self._isTestMode = False
        self._virtualTime = None
        logger.info("Returned to real time")


def cutoffDateFor(year: int, month: int, cutoffDay: int) -> date:
    """Cutoff date of a month; day 31 in a 30-day month becomes the 30th."""
    lastDay = calendar.monthrange(year, month)[1]
    return date(year, month, min(cutoffDay, lastDay))


def previousMonth(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def cutoffPeriod(cutoffDate: date, cutoffDay: int) -> Tuple[datetime, datetime]:
    """
    Half-open [start, end) window closed by `cutoffDate`.

    Starts the day after the previous month's cutoff and includes the whole
    cutoff day itself.
    """
    prevYear, prevMonth = previousMonth(cutoffDate.year, cutoffDate.month)
    previousCutoff = cutoffDateFor(prevYear, prevMonth, cutoffDay)

    start = datetime.combine(previousCutoff + timedelta(days=1), time.min, tzinfo=timezone.utc)
    end = datetime.combine(cutoffDate + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


# Global instance
timeMachine = TimeMachine()
