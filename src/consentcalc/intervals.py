"""Date interval arithmetic.

Intervals are closed ranges of calendar days. All functions here are pure:
they build new intervals rather than changing the ones passed in.

Two counting conventions are in use and are selected explicitly with
``skip_start``:

- Elapsed processing time starts on the day *after* Day 0, so the start
  date is skipped.
- Hold periods run "starting with the date of" the triggering event, so the
  start date is counted.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from consentcalc.calendar import DayKind, NonWorkingDayCalendar

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DateInterval:
    """Closed range of calendar days, start <= end."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Interval start {self.start} is after its end {self.end}"
            )

    @property
    def days(self) -> int:
        """Number of calendar days in the interval (inclusive)."""
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        """Check if a date lies within the interval."""
        return self.start <= day <= self.end

    def __iter__(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += ONE_DAY

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


@dataclass(frozen=True)
class WorkingDayCount:
    """Tally of the days in an interval by classification.

    holiday_days counts non-working weekdays, whether they come from the
    fixed holiday list or the seasonal blackout.
    """

    working_days: int = 0
    weekend_days: int = 0
    holiday_days: int = 0

    @property
    def total_days(self) -> int:
        """All days counted."""
        return self.working_days + self.weekend_days + self.holiday_days


def count_working_days(
    interval: DateInterval,
    calendar: NonWorkingDayCalendar,
    *,
    skip_start: bool,
) -> WorkingDayCount:
    """Count working, weekend and holiday days in an interval.

    Args:
        interval: Range to walk (both ends inclusive)
        calendar: Calendar used to classify each day
        skip_start: If True, the start date is left out of every counter
            (day-after-trigger convention for elapsed time)

    Returns:
        WorkingDayCount for the interval
    """
    working = weekends = holidays = 0
    for day in interval:
        if skip_start and day == interval.start:
            continue
        kind = calendar.classify(day)
        if kind is DayKind.WORKING:
            working += 1
        elif kind is DayKind.WEEKEND:
            weekends += 1
        else:
            holidays += 1

    return WorkingDayCount(
        working_days=working,
        weekend_days=weekends,
        holiday_days=holidays,
    )


def clamp_to_range(
    interval: DateInterval, bounds: DateInterval
) -> DateInterval | None:
    """Intersect an interval with bounds.

    Args:
        interval: Interval to clamp
        bounds: Allowed range

    Returns:
        The overlapping part, or None if the two do not overlap
    """
    if interval.end < bounds.start or interval.start > bounds.end:
        return None
    return DateInterval(
        start=max(interval.start, bounds.start),
        end=min(interval.end, bounds.end),
    )


def merge_overlapping(intervals: Iterable[DateInterval]) -> list[DateInterval]:
    """Merge overlapping and touching intervals.

    Intervals are sorted by start. The next interval is folded into the
    current one when it starts no later than the day after the current
    end, so [1-3] and [4-6] merge into [1-6] as well as [1-3] and [3-6].

    Args:
        intervals: Intervals in any order

    Returns:
        Disjoint, non-adjacent intervals sorted by start
    """
    ordered = sorted(intervals, key=lambda interval: (interval.start, interval.end))
    if not ordered:
        return []

    merged: list[DateInterval] = []
    current = ordered[0]
    for interval in ordered[1:]:
        if interval.start <= current.end + ONE_DAY:
            if interval.end > current.end:
                current = DateInterval(start=current.start, end=interval.end)
        else:
            merged.append(current)
            current = interval
    merged.append(current)
    return merged


def sum_working_days(
    intervals: Iterable[DateInterval],
    calendar: NonWorkingDayCalendar,
) -> int:
    """Sum inclusive working days over a collection of intervals."""
    return sum(
        count_working_days(interval, calendar, skip_start=False).working_days
        for interval in intervals
    )
