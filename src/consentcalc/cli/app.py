"""Command-line interface for consentcalc."""

import logging
import sys
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any, TypeVar

import click
import questionary
import yaml
from rich.console import Console

from consentcalc.calendar import NonWorkingDayCalendar
from consentcalc.cli import elements
from consentcalc.config import (
    ConfigError,
    Configurator,
    build_calendar,
    create_default_config,
    get_config_path,
    load_settings,
)
from consentcalc.engine import DeadlineEngine
from consentcalc.models import (
    ApplicationType,
    CalculationRequest,
    Extension,
    HoldPeriod,
    HoldPeriodType,
    Settings,
    ValidationError,
)
from consentcalc.utils.env import get_cache_dir, get_today
from consentcalc.utils.logging import console_handler, setup_logging

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

HOLD_SEPARATOR = ":"
HOLD_PARTS_WITH_TYPE = 3


def holidays_option(f: F) -> F:
    """Shared --holidays option decorator."""
    return click.option(
        "--holidays",
        "holidays_source",
        metavar="SOURCE",
        help="Non-working days CSV (path or https:// URL); overrides settings",
    )(f)


def no_blackout_option(f: F) -> F:
    """Shared --no-blackout option decorator."""
    return click.option(
        "--no-blackout",
        is_flag=True,
        help="Do not exclude 20 December - 10 January",
    )(f)


def _get_log_file() -> Path:
    """Get the path to the log file."""
    return get_cache_dir() / "consentcalc.log"


def _setup_logging() -> None:
    """Setup logging to user's cache directory.

    Truncates log file on each run to keep it manageable.
    """
    log_file = _get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    setup_logging(log_file)


def _parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format.

    Raises:
        click.BadParameter: If date format is invalid
    """
    try:
        return date.fromisoformat(date_str)
    except ValueError as e:
        # Re-raise as Click parameter error for better CLI error messages
        raise click.BadParameter(
            f"Invalid date format '{date_str}', expected YYYY-MM-DD"
        ) from e


def _parse_optional_date(date_str: str) -> date | None:
    return _parse_date(date_str) if date_str.strip() else None


def parse_hold(value: str) -> HoldPeriod:
    """Parse a hold period given as TYPE:START:END or START:END.

    TYPE defaults to s92. Either date may be left empty; such a period is
    ignored by the calculation.

    Raises:
        click.BadParameter: If the value cannot be parsed
    """
    parts = value.split(HOLD_SEPARATOR)
    if len(parts) == HOLD_PARTS_WITH_TYPE:
        type_str, start_str, end_str = parts
    elif len(parts) == HOLD_PARTS_WITH_TYPE - 1:
        type_str = HoldPeriodType.REQUEST_FOR_INFORMATION.value
        start_str, end_str = parts
    else:
        raise click.BadParameter(
            f"Invalid hold period '{value}', expected TYPE:START:END"
        )

    try:
        hold_type = HoldPeriodType(type_str.strip())
    except ValueError as e:
        choices = ", ".join(t.value for t in HoldPeriodType)
        raise click.BadParameter(
            f"Unknown hold period type '{type_str}', expected one of: {choices}"
        ) from e

    return HoldPeriod(
        type=hold_type,
        start=_parse_optional_date(start_str),
        end=_parse_optional_date(end_str),
    )


def _hold_callback(
    _ctx: click.Context, _param: click.Parameter, value: tuple[str, ...]
) -> list[HoldPeriod]:
    return [parse_hold(item) for item in value]


def _date_callback(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> date | None:
    return _parse_date(value) if value else None


def _load_settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        click.echo("\nRun 'consentcalc config' to configure the application.")
        sys.exit(1)


def _load_calendar(
    settings: Settings,
    holidays_source: str | None,
    no_blackout: bool,
) -> NonWorkingDayCalendar:
    """Build the calendar, warning on stderr when it is degraded."""
    if no_blackout:
        settings = settings.model_copy(update={"seasonal_blackout": False})
    calendar = build_calendar(settings, holidays_source)
    if calendar.degraded:
        click.secho(
            f"⚠ Warning: {calendar.load_error}; "
            "public holidays will not be excluded",
            fg="yellow",
            err=True,
        )
    return calendar


def _load_case_file(path: Path) -> CalculationRequest:
    try:
        return CalculationRequest.from_file(path)
    except (yaml.YAMLError, TypeError, ValueError) as e:
        click.secho(f"Invalid case file {path}:\n{e}", fg="red", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="consentcalc")
@click.option(
    "--verbose", "-v", is_flag=True, help="Also print log messages to stderr"
)
def cli(verbose: bool) -> None:
    """consentcalc - Statutory working-day timeframe calculator for resource
    consent applications."""
    if verbose:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        root_logger.addHandler(console_handler(logging.DEBUG))


@cli.command()
@click.option(
    "--type",
    "application_type",
    type=click.Choice([t.value for t in ApplicationType]),
    help="Application type (default: from settings)",
)
@click.option(
    "--lodged",
    callback=_date_callback,
    metavar="DATE",
    help="Lodgement date (YYYY-MM-DD)",
)
@click.option(
    "--decision",
    callback=_date_callback,
    metavar="DATE",
    help="Decision date (YYYY-MM-DD, default: today)",
)
@click.option(
    "--hold",
    "holds",
    multiple=True,
    callback=_hold_callback,
    metavar="TYPE:START:END",
    help="Excluded time period, e.g. s92:2024-03-12:2024-03-20 (repeatable)",
)
@click.option(
    "--extension",
    "extensions",
    type=int,
    multiple=True,
    metavar="DAYS",
    help="Extension in working days (repeatable)",
)
@click.option(
    "--case",
    "case_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON case file; other options override or add to it",
)
@holidays_option
@no_blackout_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format (default: from settings)",
)
@click.option(
    "--audit", is_flag=True, help="Show per-period breakdown and calendar stats"
)
def calculate(  # noqa: PLR0913  # CLI commands need many options for flexibility
    application_type: str | None,
    lodged: date | None,
    decision: date | None,
    holds: list[HoldPeriod],
    extensions: tuple[int, ...],
    case_file: Path | None,
    holidays_source: str | None,
    no_blackout: bool,
    output_format: str | None,
    audit: bool,
) -> None:
    """Calculate elapsed working days against the statutory maximum."""
    settings = _load_settings_or_exit()
    request = _load_case_file(case_file) if case_file else CalculationRequest()

    if application_type:
        resolved_type = ApplicationType(application_type)
    elif "application_type" in request.model_fields_set:
        resolved_type = request.application_type
    else:
        resolved_type = settings.default_application_type

    request = request.model_copy(
        update={
            "application_type": resolved_type,
            "lodgement_date": lodged or request.lodgement_date,
            "decision_date": decision or request.decision_date or get_today(),
            "hold_periods": [*request.hold_periods, *holds],
            "extensions": [
                *request.extensions,
                *(Extension(days=days) for days in extensions),
            ],
        }
    )

    calendar = _load_calendar(settings, holidays_source, no_blackout)
    outcome = DeadlineEngine(calendar).calculate_request(request)
    if isinstance(outcome, ValidationError):
        click.secho(f"✗ {outcome.message}", fg="red", err=True)
        sys.exit(1)

    output_format = (output_format or settings.output_format).lower()
    if output_format == "json":
        click.echo(elements.format_result_json(outcome))
    elif output_format == "yaml":
        click.echo(elements.format_result_yaml(outcome))
    else:  # table
        elements.display_result(Console(), outcome, audit=audit)


@cli.command()
@click.argument("day", callback=_date_callback, metavar="DATE")
@holidays_option
@no_blackout_option
def day(day: date, holidays_source: str | None, no_blackout: bool) -> None:
    """Show whether DATE is a working day."""
    settings = _load_settings_or_exit()
    calendar = _load_calendar(settings, holidays_source, no_blackout)
    elements.display_day(Console(), day, calendar.classify(day))


@cli.command()
@click.option("--year", type=int, help="Show a single year only")
@holidays_option
def holidays(year: int | None, holidays_source: str | None) -> None:
    """List the loaded public holidays."""
    settings = _load_settings_or_exit()
    calendar = _load_calendar(settings, holidays_source, no_blackout=False)

    days = [d for d in calendar.holidays if year is None or d.year == year]
    if not days:
        click.secho("No non-working days found.", fg="yellow")
        return

    title = f"Non-working Days {year}" if year else "Non-working Days"
    elements.display_holidays_table(Console(), days, title=title)


@cli.command()
@click.option("--show", is_flag=True, help="Display current configuration")
@click.option("--validate", is_flag=True, help="Validate current configuration")
@click.option("--path", is_flag=True, help="Show path to configuration file")
def config(show: bool, validate: bool, path: bool) -> None:
    """Configure consentcalc settings interactively."""
    config_path = get_config_path()

    # Handle --path flag
    if path:
        click.echo(str(config_path))
        return

    # Handle --show flag
    if show:
        try:
            settings = Configurator(config_path).load()
            yaml_str = yaml.safe_dump(
                settings.model_dump(mode="json"),
                default_flow_style=False,
                sort_keys=False,
                indent=2,
                allow_unicode=True,
            )
            click.echo(yaml_str)
        except ConfigError as e:
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)
        return

    # Handle --validate flag
    if validate:
        try:
            Configurator(config_path).load()
            click.secho("✓ Configuration is valid", fg="green")
            click.echo(f"Configuration file: {config_path}")
        except ConfigError as e:
            click.secho("✗ Configuration is invalid", fg="red", err=True)
            click.secho(f"Error: {e}", fg="red", err=True)
            sys.exit(1)
        return

    # No flags - run interactive configuration wizard
    try:
        if config_path.exists():
            click.echo(f"Configuration file already exists at: {config_path}")
            overwrite = questionary.confirm(
                "Do you want to overwrite it?",
                default=True,
            ).unsafe_ask()
            if not overwrite:
                click.echo("Configuration not changed.")
                return

        create_default_config(interactive=True)
        click.secho("\n✓ Configuration created successfully!", fg="green")

    except ConfigError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\n\nConfiguration cancelled.")
        sys.exit(1)


def main() -> None:
    """Main entry point for the CLI.

    Sets up logging and provides a generic catch-all error handler
    for unexpected errors.
    """
    _setup_logging()
    try:
        cli()
    except Exception:
        # Log the full traceback to the log file (details only in log)
        logger.exception("Fatal error occurred")

        # Show user-friendly error message (no exception details)
        click.secho(
            "\nFatal error occurred.",
            fg="red",
            err=True,
        )
        click.secho(
            f"Check logs for details: {_get_log_file()}",
            fg="yellow",
            err=True,
        )

        sys.exit(1)


if __name__ == "__main__":
    main()
