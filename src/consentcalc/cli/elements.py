"""Reusable CLI elements for displaying output."""

import json
from collections.abc import Iterable
from datetime import date

import yaml
from rich.console import Console
from rich.table import Table

from consentcalc.calendar import DayKind
from consentcalc.models import CalculationResult

DATE_DISPLAY_FORMAT = "%a %d %b %Y"


def _format_date(value: date) -> str:
    return value.strftime(DATE_DISPLAY_FORMAT)


def _status_markup(result: CalculationResult) -> str:
    if result.is_overtime:
        return f"[bold red]✗ Over time by {result.days_over} working days[/]"
    return (
        f"[bold green]✓ Within time[/] ({result.days_remaining} working days "
        "remaining)"
    )


def display_result(
    console: Console,
    result: CalculationResult,
    *,
    audit: bool = False,
) -> None:
    """Display a calculation result.

    Args:
        console: Rich console for output
        result: Calculation result to display
        audit: Also show the per-period breakdown and calendar statistics
    """
    table = Table(
        title=result.application_type.label,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Lodgement date", _format_date(result.lodgement_date))
    table.add_row("Day 0", _format_date(result.day_zero))
    table.add_row("Decision date", _format_date(result.decision_date))
    table.add_row("Elapsed working days", str(result.elapsed_working_days))
    hold = str(result.hold_working_days)
    if result.hold_days_clamped:
        hold = f"{hold} [yellow](of {result.raw_hold_working_days})[/]"
    table.add_row("Excluded time", hold)
    table.add_row("Working days used", f"[bold]{result.final_days}[/]")
    table.add_row("Base allowance", str(result.base_days))
    table.add_row("Extensions", str(result.extension_days))
    table.add_row("Maximum", f"[bold]{result.max_days}[/]")

    console.print(table)
    console.print(_status_markup(result))

    if result.calendar_degraded:
        console.print(
            "[yellow]⚠ Public holidays could not be loaded; results may be "
            "inaccurate[/]"
        )

    for note in result.notes:
        console.print(f"[dim]• {note}[/]")

    if audit:
        _display_audit(console, result)


def _display_audit(console: Console, result: CalculationResult) -> None:
    """Display the per-period breakdown and calendar statistics."""
    console.print("\n[bold]Calendar:[/]")
    console.print(f"  Calendar days: {result.calendar.calendar_days}")
    console.print(f"  Weekend days: {result.calendar.weekend_days}")
    console.print(f"  Non-working weekdays: {result.calendar.holiday_days}")
    console.print(f"  Total excluded: {result.excluded_days}")

    if not result.hold_period_details:
        return

    table = Table(
        title="Excluded Time Periods", show_header=True, header_style="bold cyan"
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Type", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("Working days", justify="right")

    for index, detail in enumerate(result.hold_period_details, 1):
        table.add_row(
            str(index),
            detail.type.label,
            detail.start.isoformat(),
            detail.end.isoformat(),
            str(detail.working_days),
        )

    console.print(table)


def display_day(console: Console, day: date, kind: DayKind) -> None:
    """Display the classification of a single date.

    Args:
        console: Rich console for output
        day: Date that was classified
        kind: Classification result
    """
    color = "green" if kind.is_working else "yellow"
    console.print(f"{_format_date(day)}: [{color}]{kind.label}[/]")


def display_holidays_table(
    console: Console,
    days: Iterable[date],
    *,
    title: str = "Non-working Days",
) -> None:
    """Display non-working days as a table.

    Args:
        console: Rich console for output
        days: Dates to list (sorted before display)
        title: Table title
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Weekday", style="green")

    for day in sorted(days):
        table.add_row(day.isoformat(), day.strftime("%A"))

    console.print(table)


def _result_to_dict(result: CalculationResult) -> dict:
    """Convert a result to a serializable dictionary."""
    data = result.model_dump(mode="json")
    data["days_over"] = result.days_over
    data["days_remaining"] = result.days_remaining
    data["excluded_days"] = result.excluded_days
    return data


def format_result_json(result: CalculationResult) -> str:
    """Format a calculation result as JSON.

    Args:
        result: Calculation result

    Returns:
        JSON string
    """
    return json.dumps(_result_to_dict(result), indent=2)


def format_result_yaml(result: CalculationResult) -> str:
    """Format a calculation result as YAML.

    Args:
        result: Calculation result

    Returns:
        YAML string
    """
    return yaml.safe_dump(
        _result_to_dict(result), default_flow_style=False, sort_keys=False
    )
