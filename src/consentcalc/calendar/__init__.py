"""Non-working-day calendar package."""

from consentcalc.calendar.classifier import DEFAULT_BLACKOUT, NonWorkingDayCalendar
from consentcalc.calendar.loader import (
    load_non_working_days,
    parse_date_literal,
    parse_non_working_days,
)
from consentcalc.calendar.models import (
    CalendarError,
    DayKind,
    DegradedCalendarError,
    SeasonalBlackout,
)

__all__ = [
    "DEFAULT_BLACKOUT",
    "CalendarError",
    "DayKind",
    "DegradedCalendarError",
    "NonWorkingDayCalendar",
    "SeasonalBlackout",
    "load_non_working_days",
    "parse_date_literal",
    "parse_non_working_days",
]
