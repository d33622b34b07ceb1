"""Statutory processing timeframe calculation.

Counting rules:

Day 0:
    The lodgement date, moved forward to the first working day if it is
    not one itself.

Elapsed working days:
    Working days after Day 0 up to and including the decision date. Day 0
    itself is never a processing day.

Hold periods:
    Counted inclusively ("starting with the date of ..."), clamped to
    Day 0 .. decision date, merged so that overlapping or touching periods
    are counted once, and capped at the elapsed total. Because holds count
    their first day and elapsed time does not, a hold that starts on Day 0
    can otherwise exceed the elapsed time by one.

Maximum:
    Base allowance of the application type plus all extensions. The
    application is over time when the net working days exceed it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from consentcalc.calendar import NonWorkingDayCalendar
from consentcalc.intervals import (
    ONE_DAY,
    DateInterval,
    clamp_to_range,
    count_working_days,
    merge_overlapping,
    sum_working_days,
)
from consentcalc.models import (
    ApplicationType,
    CalculationRequest,
    CalculationResult,
    CalendarStats,
    DayZeroAdjustment,
    Extension,
    HoldPeriod,
    HoldPeriodDetail,
    ValidationCode,
    ValidationError,
    coerce_date,
)

logger = logging.getLogger(__name__)

ALL_NON_WORKING_NOTE = (
    "Every day from the lodgement date to the decision date is a non-working "
    "day; no working days have elapsed"
)
HOLD_CLAMPED_NOTE = (
    "Excluded time ({raw} working days) exceeds the elapsed working days and "
    "has been limited to {elapsed}"
)
OVERLAP_NOTE = "Overlapping periods are only counted once in the total"
DEGRADED_NOTE = (
    "Public holiday list unavailable; only weekends and the Christmas/New Year "
    "period were excluded"
)


def _hold_label(index: int, hold: HoldPeriod) -> str:
    return f"Excluded time period {index} ({hold.type.label})"


def validate_inputs(
    lodgement_date: date | None,
    decision_date: date | None,
    hold_periods: Sequence[HoldPeriod],
) -> ValidationError | None:
    """Check calculation inputs.

    The first problem found wins, in this order: both dates missing,
    lodgement date missing, decision date missing, decision before
    lodgement, a hold period outside the lodgement..decision range, a hold
    period that ends before it starts. Hold periods missing a bound are
    ignored here.

    Args:
        lodgement_date: Lodgement date
        decision_date: Decision date
        hold_periods: Hold periods as entered

    Returns:
        ValidationError describing the problem, or None if inputs are valid
    """
    if lodgement_date is None and decision_date is None:
        return ValidationError(
            code=ValidationCode.MISSING_DATES,
            field="lodgement_date",
            message="Please enter both lodgement date and decision date",
        )
    if lodgement_date is None:
        return ValidationError(
            code=ValidationCode.MISSING_LODGEMENT_DATE,
            field="lodgement_date",
            message="Please enter a lodgement date",
        )
    if decision_date is None:
        return ValidationError(
            code=ValidationCode.MISSING_DECISION_DATE,
            field="decision_date",
            message="Please enter a decision date",
        )
    if decision_date < lodgement_date:
        return ValidationError(
            code=ValidationCode.DECISION_BEFORE_LODGEMENT,
            field="decision_date",
            message="Decision date must be on or after the lodgement date",
        )

    complete = [
        (index, hold)
        for index, hold in enumerate(hold_periods, 1)
        if hold.start is not None and hold.end is not None
    ]
    for index, hold in complete:
        if (
            hold.start < lodgement_date
            or hold.start > decision_date
            or hold.end < lodgement_date
            or hold.end > decision_date
        ):
            return ValidationError(
                code=ValidationCode.HOLD_OUT_OF_RANGE,
                field="hold_periods",
                message=(
                    f"{_hold_label(index, hold)} must fall between the "
                    "lodgement date and the decision date"
                ),
                hold_id=hold.id,
            )
    for index, hold in complete:
        if hold.start > hold.end:
            return ValidationError(
                code=ValidationCode.HOLD_INVERTED,
                field="hold_periods",
                message=(
                    f"{_hold_label(index, hold)} must start on or before "
                    "its end date"
                ),
                hold_id=hold.id,
            )
    return None


class DeadlineEngine:
    """Computes statutory processing timeframes.

    The engine reads the calendar on every call, so a calendar that finishes
    loading between two calculations is picked up by the second one.

    Examples:
        calendar = NonWorkingDayCalendar()
        calendar.load()
        engine = DeadlineEngine(calendar)
        outcome = engine.calculate(
            date(2024, 3, 4),
            date(2024, 4, 10),
            hold_periods=[HoldPeriod(start="2024-03-12", end="2024-03-20")],
        )
        if isinstance(outcome, ValidationError):
            print(outcome.message)
    """

    def __init__(self, calendar: NonWorkingDayCalendar) -> None:
        self.calendar = calendar

    def calculate_request(
        self, request: CalculationRequest
    ) -> CalculationResult | ValidationError:
        """Calculate from a CalculationRequest.

        Args:
            request: Raw calculation inputs

        Returns:
            CalculationResult, or ValidationError if inputs are invalid
        """
        return self.calculate(
            request.lodgement_date,
            request.decision_date,
            hold_periods=request.hold_periods,
            extensions=request.extensions,
            application_type=request.application_type,
        )

    def calculate(  # noqa: PLR0913  # mirrors the calculator's input fields
        self,
        lodgement_date: date | str | None,
        decision_date: date | str | None,
        hold_periods: Sequence[HoldPeriod] = (),
        extensions: Iterable[Extension] = (),
        application_type: ApplicationType | str = ApplicationType.STANDARD,
    ) -> CalculationResult | ValidationError:
        """Calculate elapsed working days against the statutory maximum.

        Args:
            lodgement_date: Lodgement (trigger) date, a date or ISO-8601 string
            decision_date: Decision date, a date or ISO-8601 string
            hold_periods: Clock-stop intervals as entered
            extensions: Granted extensions
            application_type: Application category or its key

        Returns:
            CalculationResult, or ValidationError if inputs are invalid
        """
        # Times of day are dropped; blank or unparseable dates count as missing
        lodgement_date = coerce_date(lodgement_date)
        decision_date = coerce_date(decision_date)
        application_type = ApplicationType(application_type)

        error = validate_inputs(lodgement_date, decision_date, hold_periods)
        if error is not None:
            logger.info("Validation failed: %s", error.code.value)
            return error
        # Narrowed by validate_inputs
        assert lodgement_date is not None
        assert decision_date is not None

        extension_days = sum(ext.effective_days for ext in extensions)
        base_days = application_type.base_days
        max_days = base_days + extension_days
        calendar_days = (decision_date - lodgement_date).days + 1
        notes: list[str] = []
        if self.calendar.degraded:
            notes.append(DEGRADED_NOTE)

        period = DateInterval(lodgement_date, decision_date)
        if not any(self.calendar.is_working_day(day) for day in period):
            logger.info(
                "No working days between %s and %s", lodgement_date, decision_date
            )
            return CalculationResult(
                application_type=application_type,
                lodgement_date=lodgement_date,
                day_zero=lodgement_date,
                decision_date=decision_date,
                extension_days=extension_days,
                base_days=base_days,
                max_days=max_days,
                calendar=CalendarStats(calendar_days=calendar_days),
                all_non_working=True,
                calendar_degraded=self.calendar.degraded,
                notes=(ALL_NON_WORKING_NOTE, *notes),
            )

        adjustment = self._adjust_day_zero(lodgement_date)
        day_zero = adjustment.adjusted_date if adjustment else lodgement_date
        if adjustment:
            notes.insert(0, adjustment.note)

        processing = DateInterval(day_zero, decision_date)
        elapsed = count_working_days(processing, self.calendar, skip_start=True)

        details, clamped = self._clamp_holds(hold_periods, processing)
        merged = merge_overlapping(clamped)
        raw_hold_days = sum_working_days(merged, self.calendar)
        hold_days = min(raw_hold_days, elapsed.working_days)
        hold_days_clamped = raw_hold_days > elapsed.working_days
        if hold_days_clamped:
            logger.debug(
                "Capping hold days %d at elapsed %d",
                raw_hold_days,
                elapsed.working_days,
            )
            notes.append(
                HOLD_CLAMPED_NOTE.format(raw=raw_hold_days, elapsed=hold_days)
            )
        if len(details) > 1:
            notes.append(OVERLAP_NOTE)

        final_days = max(0, elapsed.working_days - hold_days)
        result = CalculationResult(
            application_type=application_type,
            lodgement_date=lodgement_date,
            day_zero=day_zero,
            decision_date=decision_date,
            day_zero_adjustment=adjustment,
            elapsed_working_days=elapsed.working_days,
            raw_hold_working_days=raw_hold_days,
            hold_working_days=hold_days,
            hold_days_clamped=hold_days_clamped,
            extension_days=extension_days,
            base_days=base_days,
            max_days=max_days,
            final_days=final_days,
            is_overtime=final_days > max_days,
            calendar=CalendarStats(
                calendar_days=calendar_days,
                weekend_days=elapsed.weekend_days,
                holiday_days=elapsed.holiday_days,
            ),
            hold_period_details=tuple(details),
            calendar_degraded=self.calendar.degraded,
            notes=tuple(notes),
        )
        logger.info(
            "Calculated %s: elapsed=%d hold=%d final=%d max=%d overtime=%s",
            application_type.value,
            result.elapsed_working_days,
            result.hold_working_days,
            result.final_days,
            result.max_days,
            result.is_overtime,
        )
        return result

    def _adjust_day_zero(self, lodgement_date: date) -> DayZeroAdjustment | None:
        """Move a non-working lodgement date to the next working day.

        Returns:
            DayZeroAdjustment, or None if the lodgement date is a working day
        """
        reason = self.calendar.classify(lodgement_date)
        if reason.is_working:
            return None

        day_zero = lodgement_date
        while not self.calendar.is_working_day(day_zero):
            day_zero += ONE_DAY
        return DayZeroAdjustment(
            original_date=lodgement_date,
            adjusted_date=day_zero,
            reason=reason,
        )

    def _clamp_holds(
        self,
        hold_periods: Sequence[HoldPeriod],
        processing: DateInterval,
    ) -> tuple[list[HoldPeriodDetail], list[DateInterval]]:
        """Clamp complete hold periods to Day 0 .. decision date.

        Holds are clamped against Day 0 itself, not the day after, because a
        hold may begin on Day 0.

        Returns:
            Tuple of (per-period breakdown, clamped intervals)
        """
        details: list[HoldPeriodDetail] = []
        clamped: list[DateInterval] = []
        for hold in hold_periods:
            if hold.start is None or hold.end is None:
                continue
            interval = clamp_to_range(DateInterval(hold.start, hold.end), processing)
            if interval is None:
                logger.debug("Dropping hold %s outside %s", hold.id, processing)
                continue
            counted = count_working_days(interval, self.calendar, skip_start=False)
            details.append(
                HoldPeriodDetail(
                    id=hold.id,
                    type=hold.type,
                    start=interval.start,
                    end=interval.end,
                    working_days=counted.working_days,
                )
            )
            clamped.append(interval)
        return details, clamped


def calculate(
    request: CalculationRequest,
    calendar: NonWorkingDayCalendar,
) -> CalculationResult | ValidationError:
    """Calculate a request with the given calendar.

    Convenience function; for repeated calculations, keep a DeadlineEngine.
    """
    return DeadlineEngine(calendar).calculate_request(request)
