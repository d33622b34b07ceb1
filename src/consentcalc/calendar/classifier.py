"""Working-day classification.

A day is non-working when it falls on a weekend, appears in the loaded
non-working-day list, or lies inside the seasonal blackout window. The
list is loaded once; until then (or if loading fails) only the weekend
and blackout rules apply.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path

from consentcalc.calendar.loader import load_non_working_days
from consentcalc.calendar.models import (
    SATURDAY,
    CalendarError,
    DayKind,
    DegradedCalendarError,
    SeasonalBlackout,
)

logger = logging.getLogger(__name__)

DEFAULT_BLACKOUT = SeasonalBlackout()


class NonWorkingDayCalendar:
    """Classifies dates as working or non-working.

    Examples:
        # Bundled holiday list, default Christmas blackout
        calendar = NonWorkingDayCalendar()
        calendar.load()
        calendar.is_working_day(date(2024, 2, 6))  # False, Waitangi Day

        # Explicit holidays, no blackout (useful in tests)
        calendar = NonWorkingDayCalendar(
            holidays=[date(2024, 3, 29)], blackout=None
        )
    """

    def __init__(
        self,
        holidays: frozenset[date] | set[date] | list[date] | None = None,
        blackout: SeasonalBlackout | None = DEFAULT_BLACKOUT,
    ) -> None:
        """Initialize the calendar.

        Args:
            holidays: Pre-loaded non-working dates. If given, the calendar
                counts as loaded and load() must not be called.
            blackout: Seasonal blackout window, or None to disable it
        """
        self._blackout = blackout
        self._holidays: frozenset[date] = frozenset(holidays or ())
        self._loaded = holidays is not None
        self._load_error: DegradedCalendarError | None = None

    @property
    def holidays(self) -> frozenset[date]:
        """Loaded non-working dates (empty before loading or if degraded)."""
        return self._holidays

    @property
    def blackout(self) -> SeasonalBlackout | None:
        """Seasonal blackout window, if enabled."""
        return self._blackout

    @property
    def loaded(self) -> bool:
        """Whether a load attempt has completed (successfully or not)."""
        return self._loaded

    @property
    def load_error(self) -> DegradedCalendarError | None:
        """Error from the load attempt, if it failed."""
        return self._load_error

    @property
    def degraded(self) -> bool:
        """True when the holiday list failed to load."""
        return self._load_error is not None

    def _ensure_not_loaded(self) -> None:
        if self._loaded:
            raise CalendarError("Non-working days have already been loaded")

    def _finish_load(
        self,
        days: frozenset[date] | None,
        error: DegradedCalendarError | None,
    ) -> None:
        if error is not None:
            logger.error(
                "Failed to load non-working days, only weekends and the "
                "seasonal blackout will be excluded: %s",
                error,
            )
            self._load_error = error
        else:
            self._holidays = days or frozenset()
        self._loaded = True

    def load(self, source: Path | str | None = None) -> None:
        """Load the non-working-day list.

        Failure is logged and recorded in load_error; the calendar then keeps
        working without fixed holidays.

        Args:
            source: File path, https:// URL, or None for the bundled list

        Raises:
            CalendarError: If the calendar has already been loaded
        """
        self._ensure_not_loaded()
        try:
            days = load_non_working_days(source)
        except DegradedCalendarError as e:
            self._finish_load(None, e)
        else:
            self._finish_load(days, None)

    async def load_async(self, source: Path | str | None = None) -> None:
        """Load the non-working-day list in a worker thread.

        The calendar can be used while this is pending; it classifies with
        an empty holiday list until the load completes.

        Args:
            source: File path, https:// URL, or None for the bundled list

        Raises:
            CalendarError: If the calendar has already been loaded
        """
        self._ensure_not_loaded()
        try:
            days = await asyncio.to_thread(load_non_working_days, source)
        except DegradedCalendarError as e:
            self._finish_load(None, e)
        else:
            self._finish_load(days, None)

    def is_weekend(self, day: date) -> bool:
        """Check if a date is a Saturday or Sunday."""
        return day.weekday() >= SATURDAY

    def is_fixed_holiday(self, day: date) -> bool:
        """Check if a date is in the loaded non-working-day list."""
        return day in self._holidays

    def is_seasonal_blackout(self, day: date) -> bool:
        """Check if a date falls in the seasonal blackout window."""
        return self._blackout is not None and self._blackout.contains(day)

    def classify(self, day: date) -> DayKind:
        """Classify a date.

        Rules are applied in order: weekend, fixed holiday, seasonal
        blackout. The first matching rule decides the kind.

        Args:
            day: Date to classify

        Returns:
            DayKind for the date
        """
        if self.is_weekend(day):
            return DayKind.WEEKEND
        if self.is_fixed_holiday(day):
            return DayKind.FIXED_HOLIDAY
        if self.is_seasonal_blackout(day):
            return DayKind.SEASONAL_BLACKOUT
        return DayKind.WORKING

    def is_working_day(self, day: date) -> bool:
        """Check if a date is a working day."""
        return self.classify(day) is DayKind.WORKING

    def __repr__(self) -> str:
        return (
            f"NonWorkingDayCalendar(holidays={len(self._holidays)}, "
            f"blackout={self._blackout}, loaded={self._loaded}, "
            f"degraded={self.degraded})"
        )
