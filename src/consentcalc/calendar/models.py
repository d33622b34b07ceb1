"""Calendar data models and exceptions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

# Weekday constants (Monday = 0, Sunday = 6)
SATURDAY = 5

DECEMBER = 12
JANUARY = 1


class CalendarError(Exception):
    """Base exception for calendar errors."""

    pass


class DegradedCalendarError(CalendarError):
    """Non-working-day source could not be loaded.

    Not fatal: the calendar falls back to weekend and seasonal blackout
    rules only, so every weekday outside the blackout counts as working.
    """

    pass


class DayKind(str, Enum):
    """Classification of a single calendar day."""

    WORKING = "working"
    WEEKEND = "weekend"
    FIXED_HOLIDAY = "fixed_holiday"
    SEASONAL_BLACKOUT = "seasonal_blackout"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return _DAY_KIND_LABELS[self]

    @property
    def is_working(self) -> bool:
        """Whether this kind of day counts as a working day."""
        return self is DayKind.WORKING


_DAY_KIND_LABELS = {
    DayKind.WORKING: "Working day",
    DayKind.WEEKEND: "Weekend",
    DayKind.FIXED_HOLIDAY: "Public holiday",
    DayKind.SEASONAL_BLACKOUT: "Christmas/New Year period",
}


@dataclass(frozen=True)
class SeasonalBlackout:
    """Recurring non-working window that may span the year boundary.

    Bounds are inclusive month/day pairs. The default covers 20 December
    through 10 January.
    """

    start_month: int = DECEMBER
    start_day: int = 20
    end_month: int = JANUARY
    end_day: int = 10

    def __post_init__(self) -> None:
        # Validate against a leap year so 29 Feb is accepted
        for month, day in (
            (self.start_month, self.start_day),
            (self.end_month, self.end_day),
        ):
            try:
                date(2024, month, day)
            except ValueError as e:
                raise CalendarError(
                    f"Invalid seasonal blackout bound {day}/{month}"
                ) from e

    @property
    def wraps_year(self) -> bool:
        """Whether the window crosses 31 December."""
        return (self.start_month, self.start_day) > (self.end_month, self.end_day)

    def contains(self, day: date) -> bool:
        """Check if a date falls inside the window.

        Args:
            day: Date to check

        Returns:
            True if the date is within the window (bounds inclusive)
        """
        key = (day.month, day.day)
        start = (self.start_month, self.start_day)
        end = (self.end_month, self.end_day)
        if self.wraps_year:
            return key >= start or key <= end
        return start <= key <= end

    def __str__(self) -> str:
        return (
            f"{self.start_day:02d}/{self.start_month:02d} - "
            f"{self.end_day:02d}/{self.end_month:02d}"
        )
