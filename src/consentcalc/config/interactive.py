"""Interactive configuration wizard for consentcalc.

Kept apart from the core configuration management so it can be mocked
in tests.
"""

import questionary

from consentcalc.models import ApplicationType, Settings

# All prompts use unsafe_ask() to propagate KeyboardInterrupt
# instead of returning None, allowing clean exit on Ctrl+C

def run_interactive_wizard(defaults: Settings | None) -> Settings:
    """Run interactive configuration wizard.

    Args:
        defaults: Optional existing settings to use as defaults

    Returns:
        Configured Settings instance
    """
    current = defaults or Settings()
    questionary.print("Welcome to consentcalc configuration!", style="bold")
    questionary.print("")

    application_type = _get_application_type(current)
    non_working_days = _get_non_working_days(current)
    seasonal_blackout = questionary.confirm(
        "Exclude 20 December - 10 January from working days?",
        default=current.seasonal_blackout,
    ).unsafe_ask()
    output_format = questionary.select(
        "Default output format:",
        choices=["table", "json", "yaml"],
        default=current.output_format,
    ).unsafe_ask()

    return Settings(
        non_working_days=non_working_days,
        default_application_type=application_type,
        seasonal_blackout=seasonal_blackout,
        output_format=output_format,
    )


def _get_application_type(current: Settings) -> ApplicationType:
    """Ask for the default application type."""
    questionary.print("\nTimeframes:", style="bold")
    return questionary.select(
        "Default application type:",
        choices=[
            questionary.Choice(app_type.label, value=app_type)
            for app_type in ApplicationType
        ],
        default=current.default_application_type,
    ).unsafe_ask()


def _get_non_working_days(current: Settings) -> str | None:
    """Ask where to load the non-working days list from."""
    questionary.print("\nNon-working days:", style="bold")
    use_bundled = questionary.confirm(
        "Use the bundled public holiday list (2022-2030)?",
        default=current.non_working_days is None,
    ).unsafe_ask()
    if use_bundled:
        return None

    source = questionary.text(
        "Path or https:// URL of the non-working days CSV:",
        default=current.non_working_days or "",
        validate=_validate_source,
    ).unsafe_ask()
    return source.strip()


def _validate_source(value: str) -> bool | str:
    value = value.strip()
    if not value:
        return "Source cannot be empty"
    if "://" in value and not value.startswith("https://"):
        return "Only https:// URLs are allowed"
    return True
