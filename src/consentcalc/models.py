"""Pydantic data models for consentcalc inputs, results and settings.

This module defines the application and hold period types, the request
and result records exchanged with the deadline engine, and the settings
model loaded from ~/.config/consentcalc/settings.yaml.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal
from uuid import uuid4

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from consentcalc.calendar import DayKind


class ApplicationType(str, Enum):
    """Resource consent application category."""

    FAST_TRACK = "fastTrack"
    STANDARD = "standard"
    NOTIFIED_NO_HEARING = "notifiedNoHearing"
    LIMITED_NOTIFIED = "limitedNotified"
    PUBLICLY_NOTIFIED = "publiclyNotified"

    @property
    def base_days(self) -> int:
        """Statutory working-day allowance before extensions."""
        return _APPLICATION_BASE_DAYS[self]

    @property
    def label(self) -> str:
        """Human-readable label including the allowance."""
        return f"{_APPLICATION_LABELS[self]} - {self.base_days} days"


_APPLICATION_BASE_DAYS = {
    ApplicationType.FAST_TRACK: 10,
    ApplicationType.STANDARD: 20,
    ApplicationType.NOTIFIED_NO_HEARING: 60,
    ApplicationType.LIMITED_NOTIFIED: 100,
    ApplicationType.PUBLICLY_NOTIFIED: 130,
}

_APPLICATION_LABELS = {
    ApplicationType.FAST_TRACK: "Fast-Track",
    ApplicationType.STANDARD: "Standard (Non-Notified)",
    ApplicationType.NOTIFIED_NO_HEARING: "Notified, No Hearing",
    ApplicationType.LIMITED_NOTIFIED: "Limited Notified",
    ApplicationType.PUBLICLY_NOTIFIED: "Publicly Notified",
}


class HoldPeriodType(str, Enum):
    """Statutory reason for stopping the processing clock."""

    WRITTEN_APPROVALS = "s88E"
    AWAITING_DEPOSIT = "s88H"
    ADDITIONAL_CONSENTS = "s91"
    SUSPENSION_NOTIFIED = "s91A"
    SUSPENSION_NON_NOTIFIED = "s91D"
    REQUEST_FOR_INFORMATION = "s92"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return _HOLD_PERIOD_LABELS[self]


_HOLD_PERIOD_LABELS = {
    HoldPeriodType.WRITTEN_APPROVALS: "Written Approvals s88E",
    HoldPeriodType.AWAITING_DEPOSIT: "Awaiting Deposit s88H",
    HoldPeriodType.ADDITIONAL_CONSENTS: "Additional Consents s91",
    HoldPeriodType.SUSPENSION_NOTIFIED: "Suspension Notified Application s91A",
    HoldPeriodType.SUSPENSION_NON_NOTIFIED: (
        "Suspension Non-Notified Application s91D"
    ),
    HoldPeriodType.REQUEST_FOR_INFORMATION: "Request for Information s92",
    HoldPeriodType.OTHER: "Other",
}


def coerce_date(v: object) -> date | None:
    """Coerce a raw value to a calendar date.

    Accepts dates, datetimes (time of day dropped) and ISO-8601 strings.
    Blank or unparseable values become None.
    """
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str) or not v.strip():
        return None
    text = v.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _parse_optional_int(v: object) -> int | None:
    """Coerce a raw field value to an int, None if blank or invalid."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        return int(v) if v.is_integer() else None
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


RawDate = Annotated[date | None, BeforeValidator(coerce_date)]
RawDays = Annotated[int | None, BeforeValidator(_parse_optional_int)]


def _new_id() -> str:
    return uuid4().hex


class HoldPeriod(BaseModel):
    """A clock-stop interval as entered by the user.

    Dates are raw: either bound may be missing, and the range may be
    inverted or outside the processing window. The engine validates and
    clamps a copy; this record is never changed by a calculation.
    """

    id: str = Field(default_factory=_new_id, description="Identifier")
    type: HoldPeriodType = Field(
        default=HoldPeriodType.REQUEST_FOR_INFORMATION,
        description="Reason the clock was stopped",
    )
    start: RawDate = Field(default=None, description="First day of the hold")
    end: RawDate = Field(default=None, description="Last day of the hold")

    @property
    def is_complete(self) -> bool:
        """Whether both bounds are set."""
        return self.start is not None and self.end is not None


class Extension(BaseModel):
    """Additional working days granted on top of the base allowance."""

    id: str = Field(default_factory=_new_id, description="Identifier")
    days: RawDays = Field(default=None, description="Extra working days")

    @property
    def effective_days(self) -> int:
        """Days contributed to the allowance (0 if unset or negative)."""
        if self.days is None or self.days < 0:
            return 0
        return self.days


class CalculationRequest(BaseModel):
    """Raw inputs for one timeframe calculation.

    Mirrors the fields a user fills in; loadable from a YAML or JSON
    case file.
    """

    application_type: ApplicationType = Field(
        default=ApplicationType.STANDARD,
        description="Application category, sets the base allowance",
    )
    lodgement_date: RawDate = Field(
        default=None,
        description="Date the application was lodged (Day 0 before adjustment)",
    )
    decision_date: RawDate = Field(
        default=None,
        description="Date the decision was issued",
    )
    hold_periods: list[HoldPeriod] = Field(
        default_factory=list,
        description="Clock-stop intervals",
    )
    extensions: list[Extension] = Field(
        default_factory=list,
        description="Timeframe extensions",
    )

    @classmethod
    def from_file(cls, path: Path) -> "CalculationRequest":
        """Load a request from a YAML (or JSON) case file.

        Args:
            path: Path to the case file

        Returns:
            CalculationRequest built from the file

        Raises:
            FileNotFoundError: If the file doesn't exist
            TypeError: If the file does not contain a mapping
            ValueError: If validation fails
        """
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise TypeError(f"Invalid case file format in {path}: expected a mapping")

        return cls(**data)


class ValidationCode(str, Enum):
    """Input problems reported by the engine, in priority order."""

    MISSING_DATES = "missing_dates"
    MISSING_LODGEMENT_DATE = "missing_lodgement_date"
    MISSING_DECISION_DATE = "missing_decision_date"
    DECISION_BEFORE_LODGEMENT = "decision_before_lodgement"
    HOLD_OUT_OF_RANGE = "hold_out_of_range"
    HOLD_INVERTED = "hold_inverted"


@dataclass(frozen=True)
class ValidationError:
    """User-correctable input problem.

    Returned by the engine instead of a result; never raised.
    """

    code: ValidationCode
    field: str
    message: str
    hold_id: str | None = None

    def __str__(self) -> str:
        return self.message


class DayZeroAdjustment(BaseModel):
    """Record of moving a non-working lodgement date to the next working day."""

    model_config = ConfigDict(frozen=True)

    original_date: date
    adjusted_date: date
    reason: DayKind = Field(
        ..., description="Rule that made the lodgement day non-working"
    )

    @property
    def note(self) -> str:
        """Explanation for display."""
        return (
            f"Lodgement date {self.original_date.isoformat()} is not a working day "
            f"({self.reason.label.lower()}); Day 0 moved to "
            f"{self.adjusted_date.isoformat()}"
        )


class HoldPeriodDetail(BaseModel):
    """Clamped projection of one hold period, for the audit breakdown."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: HoldPeriodType
    start: date
    end: date
    working_days: int = Field(..., ge=0)


class CalendarStats(BaseModel):
    """Calendar-day statistics for display."""

    model_config = ConfigDict(frozen=True)

    calendar_days: int = Field(
        default=0,
        ge=0,
        description="Calendar days from lodgement to decision, both inclusive",
    )
    weekend_days: int = Field(
        default=0, ge=0, description="Weekend days after Day 0 up to the decision"
    )
    holiday_days: int = Field(
        default=0,
        ge=0,
        description="Non-working weekdays after Day 0 up to the decision",
    )


class CalculationResult(BaseModel):
    """Outcome of one timeframe calculation.

    Built fresh on every calculation and never modified afterwards.
    hold_working_days is the de-duplicated hold total capped at
    elapsed_working_days; raw_hold_working_days is the uncapped total.
    The per-period breakdown counts each period on its own, so its sum can
    exceed either total.
    """

    model_config = ConfigDict(frozen=True)

    application_type: ApplicationType
    lodgement_date: date
    day_zero: date
    decision_date: date
    day_zero_adjustment: DayZeroAdjustment | None = None
    elapsed_working_days: int = Field(default=0, ge=0)
    raw_hold_working_days: int = Field(default=0, ge=0)
    hold_working_days: int = Field(default=0, ge=0)
    hold_days_clamped: bool = False
    extension_days: int = Field(default=0, ge=0)
    base_days: int = Field(default=0, ge=0)
    max_days: int = Field(default=0, ge=0)
    final_days: int = Field(default=0, ge=0)
    is_overtime: bool = False
    calendar: CalendarStats = Field(default_factory=CalendarStats)
    hold_period_details: tuple[HoldPeriodDetail, ...] = ()
    all_non_working: bool = False
    calendar_degraded: bool = False
    notes: tuple[str, ...] = ()

    @property
    def days_over(self) -> int:
        """Working days beyond the maximum (0 when within time)."""
        return max(0, self.final_days - self.max_days)

    @property
    def days_remaining(self) -> int:
        """Working days left before the maximum is reached."""
        return max(0, self.max_days - self.final_days)

    @property
    def excluded_days(self) -> int:
        """Weekends, holidays and held working days excluded from the count."""
        return (
            self.calendar.weekend_days
            + self.calendar.holiday_days
            + self.hold_working_days
        )


OutputFormat = Literal["table", "json", "yaml"]


class Settings(BaseModel):
    """Main configuration settings for consentcalc.

    Loaded from ~/.config/consentcalc/settings.yaml. Every field has a
    default, so a missing file simply means default behaviour.
    """

    non_working_days: str | None = Field(
        default=None,
        description=(
            "Path or https:// URL of the non-working days CSV "
            "(bundled list if unset)"
        ),
    )
    default_application_type: ApplicationType = Field(
        default=ApplicationType.STANDARD,
        description="Application type used when none is given",
    )
    seasonal_blackout: bool = Field(
        default=True,
        description="Exclude 20 December - 10 January from working days",
    )
    output_format: OutputFormat = Field(
        default="table",
        description="Default output format for results",
    )

    @field_validator("non_working_days")
    @classmethod
    def validate_non_working_days(cls, v: str | None) -> str | None:
        """Validate the source is a local path or an HTTPS URL."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if "://" in v and not v.startswith("https://"):
            raise ValueError(f"Only HTTPS URLs are allowed: {v}")
        return v

    @classmethod
    def from_yaml_file(cls, path: Path) -> "Settings":
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML settings file

        Returns:
            Settings instance loaded from the file

        Raises:
            FileNotFoundError: If the settings file doesn't exist
            TypeError: If the YAML is not a mapping
        """
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)

        # An empty file means all defaults
        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise TypeError(
                f"Invalid settings file format in {path}: expected a mapping"
            )

        return cls(**data)

    def to_yaml_file(self, path: Path) -> None:
        """Save settings to a YAML file.

        Args:
            path: Path where the settings file should be saved
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Enums as plain strings for safe_dump
        data = self.model_dump(mode="json", exclude_none=True)

        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(
                data,
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
