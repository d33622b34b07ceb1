"""Tests for the consentcalc command-line interface."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import click
import pytest
import yaml

from consentcalc.cli.app import cli, main, parse_hold
from consentcalc.models import HoldPeriodType

from .conftest import strip_ansi


def _write_settings(home: Path, content: str) -> Path:
    path = home / ".config" / "consentcalc" / "settings.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def restore_root_logger():
    """Drop handlers added to the root logger during the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestParseHold:
    """Tests for parse_hold()."""

    @pytest.mark.unit
    def test_with_type(self):
        hold = parse_hold("s88E:2024-03-12:2024-03-20")

        assert hold.type is HoldPeriodType.WRITTEN_APPROVALS
        assert hold.start.isoformat() == "2024-03-12"
        assert hold.end.isoformat() == "2024-03-20"

    @pytest.mark.unit
    def test_without_type(self):
        hold = parse_hold("2024-03-12:2024-03-20")

        assert hold.type is HoldPeriodType.REQUEST_FOR_INFORMATION
        assert hold.is_complete

    @pytest.mark.unit
    def test_open_ended(self):
        hold = parse_hold("s92:2024-03-12:")

        assert hold.end is None
        assert not hold.is_complete

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "message"),
        [
            ("s999:2024-03-12:2024-03-20", "Unknown hold period type"),
            ("s92:12/03/2024:2024-03-20", "Invalid date format"),
            ("2024-03-12", "expected TYPE:START:END"),
            ("a:b:c:d", "expected TYPE:START:END"),
        ],
    )
    def test_invalid(self, value, message):
        with pytest.raises(click.BadParameter, match=message):
            parse_hold(value)


class TestCalculateCommand:
    """Tests for the calculate command."""

    @pytest.mark.unit
    def test_json_output(self, runner, cli_env):
        result = runner.invoke(
            cli,
            [
                "calculate",
                "--lodged",
                "2024-03-04",
                "--decision",
                "2024-03-11",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["application_type"] == "standard"
        assert data["elapsed_working_days"] == 5
        assert data["final_days"] == 5
        assert data["max_days"] == 20
        assert data["days_remaining"] == 15
        assert data["is_overtime"] is False

    @pytest.mark.unit
    def test_decision_defaults_to_today(self, runner, cli_env):
        result = runner.invoke(
            cli, ["calculate", "--lodged", "2024-03-04", "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["decision_date"] == "2024-04-10"
        assert data["elapsed_working_days"] == 25
        assert data["is_overtime"] is True
        assert data["days_over"] == 5

    @pytest.mark.unit
    def test_holds_and_extensions(self, runner, cli_env):
        result = runner.invoke(
            cli,
            [
                "calculate",
                "--lodged",
                "2024-03-04",
                "--hold",
                "s92:2024-03-12:2024-03-20",
                "--hold",
                "2024-03-18:2024-03-19",
                "--extension",
                "10",
                "--extension",
                "-4",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["hold_working_days"] == 7
        assert data["final_days"] == 18
        assert data["extension_days"] == 10
        assert data["max_days"] == 30
        assert len(data["hold_period_details"]) == 2

    @pytest.mark.unit
    def test_blackout_toggle(self, runner, cli_env):
        args = [
            "calculate",
            "--lodged",
            "2024-01-08",
            "--decision",
            "2024-01-15",
            "--format",
            "json",
        ]

        with_blackout = runner.invoke(cli, args)
        without_blackout = runner.invoke(cli, [*args, "--no-blackout"])

        assert json.loads(with_blackout.output)["elapsed_working_days"] == 2
        assert json.loads(without_blackout.output)["elapsed_working_days"] == 5

    @pytest.mark.unit
    def test_table_output(self, runner, cli_env):
        result = runner.invoke(
            cli,
            [
                "calculate",
                "--type",
                "fastTrack",
                "--lodged",
                "2024-03-02",
                "--decision",
                "2024-03-11",
                "--hold",
                "s92:2024-03-05:2024-03-06",
                "--audit",
            ],
        )

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.output)
        assert "Fast-Track - 10 days" in output
        assert "Within time" in output
        assert "Day 0 moved to 2024-03-04" in output
        assert "Excluded Time Periods" in output
        assert "Calendar days: 10" in output

    @pytest.mark.unit
    def test_validation_error(self, runner, cli_env):
        result = runner.invoke(
            cli,
            ["calculate", "--lodged", "2024-03-11", "--decision", "2024-03-04"],
        )

        assert result.exit_code == 1
        assert "Decision date must be on or after the lodgement date" in result.output

    @pytest.mark.unit
    def test_missing_lodgement(self, runner, cli_env):
        result = runner.invoke(cli, ["calculate"])

        assert result.exit_code == 1
        assert "Please enter a lodgement date" in result.output

    @pytest.mark.unit
    def test_hold_out_of_range(self, runner, cli_env):
        result = runner.invoke(
            cli,
            [
                "calculate",
                "--lodged",
                "2024-03-04",
                "--decision",
                "2024-03-11",
                "--hold",
                "s91:2024-03-01:2024-03-05",
            ],
        )

        assert result.exit_code == 1
        assert "must fall between the lodgement date and the decision date" in (
            result.output
        )

    @pytest.mark.unit
    def test_invalid_date(self, runner, cli_env):
        result = runner.invoke(cli, ["calculate", "--lodged", "04/03/2024"])

        assert result.exit_code == 2
        assert "Invalid date format" in result.output

    @pytest.mark.unit
    def test_case_file(self, runner, cli_env, tmp_path):
        case = tmp_path / "case.yaml"
        case.write_text(
            "application_type: limitedNotified\n"
            "lodgement_date: 2024-03-04\n"
            "decision_date: 2024-03-11\n"
            "hold_periods:\n"
            "  - type: s92\n"
            "    start: 2024-03-05\n"
            "    end: 2024-03-06\n",
            encoding="utf-8",
        )

        result = runner.invoke(
            cli,
            ["calculate", "--case", str(case), "--extension", "5", "--format", "json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["base_days"] == 100
        assert data["max_days"] == 105
        assert data["final_days"] == 3

    @pytest.mark.unit
    def test_case_file_type_overridden(self, runner, cli_env, tmp_path):
        case = tmp_path / "case.json"
        case.write_text(
            json.dumps(
                {
                    "application_type": "limitedNotified",
                    "lodgement_date": "2024-03-04",
                    "decision_date": "2024-03-11",
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(
            cli,
            [
                "calculate",
                "--case",
                str(case),
                "--type",
                "fastTrack",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["base_days"] == 10

    @pytest.mark.unit
    def test_invalid_case_file(self, runner, cli_env, tmp_path):
        case = tmp_path / "case.yaml"
        case.write_text("- just a list\n", encoding="utf-8")

        result = runner.invoke(cli, ["calculate", "--case", str(case)])

        assert result.exit_code == 1
        assert "Invalid case file" in result.output

    @pytest.mark.unit
    def test_settings_defaults_applied(self, runner, cli_env):
        _write_settings(
            cli_env, "default_application_type: fastTrack\noutput_format: yaml\n"
        )

        result = runner.invoke(
            cli, ["calculate", "--lodged", "2024-03-04", "--decision", "2024-03-11"]
        )

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(result.output)
        assert data["base_days"] == 10
        assert data["application_type"] == "fastTrack"

    @pytest.mark.unit
    def test_invalid_settings(self, runner, cli_env):
        _write_settings(cli_env, "output_format: xml\n")

        result = runner.invoke(
            cli, ["calculate", "--lodged", "2024-03-04", "--decision", "2024-03-11"]
        )

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    @pytest.mark.unit
    def test_degraded_calendar_warning(self, runner, cli_env, tmp_path):
        result = runner.invoke(
            cli,
            [
                "calculate",
                "--lodged",
                "2024-02-05",
                "--decision",
                "2024-02-07",
                "--holidays",
                str(tmp_path / "missing.csv"),
            ],
        )

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.output)
        assert "Warning" in output
        assert "Public holidays could not be loaded" in output


class TestDayCommand:
    """Tests for the day command."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("day", "label"),
        [
            ("2024-02-06", "Public holiday"),
            ("2024-01-08", "Christmas/New Year period"),
            ("2024-03-09", "Weekend"),
            ("2024-03-04", "Working day"),
        ],
    )
    def test_classify(self, runner, cli_env, day, label):
        result = runner.invoke(cli, ["day", day])

        assert result.exit_code == 0, result.output
        assert label in result.output

    @pytest.mark.unit
    def test_no_blackout(self, runner, cli_env):
        result = runner.invoke(cli, ["day", "2024-01-08", "--no-blackout"])

        assert result.exit_code == 0
        assert "Working day" in result.output

    @pytest.mark.unit
    def test_invalid_date(self, runner, cli_env):
        result = runner.invoke(cli, ["day", "tomorrow"])

        assert result.exit_code == 2

    @pytest.mark.unit
    def test_verbose(self, runner, cli_env, restore_root_logger):
        result = runner.invoke(cli, ["--verbose", "day", "2024-03-04"])

        assert result.exit_code == 0
        assert "Working day" in result.output


class TestHolidaysCommand:
    """Tests for the holidays command."""

    @pytest.mark.unit
    def test_year(self, runner, cli_env):
        result = runner.invoke(cli, ["holidays", "--year", "2024"])

        assert result.exit_code == 0, result.output
        assert "2024-02-06" in result.output
        assert "Tuesday" in result.output
        assert "2025-" not in result.output

    @pytest.mark.unit
    def test_custom_source(self, runner, cli_env, tmp_path):
        source = tmp_path / "days.csv"
        source.write_text("5/03/2024,6/03/2024", encoding="utf-8")

        result = runner.invoke(cli, ["holidays", "--holidays", str(source)])

        assert result.exit_code == 0, result.output
        assert "2024-03-05" in result.output
        assert "2024-03-06" in result.output

    @pytest.mark.unit
    def test_empty(self, runner, cli_env):
        result = runner.invoke(cli, ["holidays", "--year", "1999"])

        assert result.exit_code == 0
        assert "No non-working days found" in result.output


class TestConfigCommand:
    """Tests for the config command."""

    @pytest.mark.unit
    def test_path(self, runner, cli_env):
        result = runner.invoke(cli, ["config", "--path"])

        assert result.exit_code == 0
        assert result.output.strip() == str(
            cli_env / ".config" / "consentcalc" / "settings.yaml"
        )

    @pytest.mark.unit
    def test_show(self, runner, cli_env):
        _write_settings(cli_env, "output_format: json\n")

        result = runner.invoke(cli, ["config", "--show"])

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(result.output)
        assert data["output_format"] == "json"
        assert data["default_application_type"] == "standard"

    @pytest.mark.unit
    def test_show_missing(self, runner, cli_env):
        result = runner.invoke(cli, ["config", "--show"])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    @pytest.mark.unit
    def test_validate_valid(self, runner, cli_env):
        _write_settings(cli_env, "seasonal_blackout: false\n")

        result = runner.invoke(cli, ["config", "--validate"])

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    @pytest.mark.unit
    def test_validate_invalid(self, runner, cli_env):
        _write_settings(cli_env, "non_working_days: http://example.com/x.csv\n")

        result = runner.invoke(cli, ["config", "--validate"])

        assert result.exit_code == 1
        assert "Configuration is invalid" in result.output

    @pytest.mark.unit
    def test_wizard(self, runner, cli_env):
        with patch("consentcalc.cli.app.create_default_config") as mock_create:
            result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0, result.output
        mock_create.assert_called_once_with(interactive=True)
        assert "Configuration created successfully" in result.output

    @pytest.mark.unit
    def test_wizard_keeps_existing(self, runner, cli_env):
        _write_settings(cli_env, "output_format: json\n")

        with (
            patch("consentcalc.cli.app.questionary.confirm") as mock_confirm,
            patch("consentcalc.cli.app.create_default_config") as mock_create,
        ):
            mock_confirm.return_value.unsafe_ask.return_value = False
            result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        mock_create.assert_not_called()
        assert "Configuration not changed" in result.output

    @pytest.mark.unit
    def test_wizard_cancelled(self, runner, cli_env):
        with patch(
            "consentcalc.cli.app.create_default_config",
            side_effect=KeyboardInterrupt,
        ):
            result = runner.invoke(cli, ["config"])

        assert result.exit_code == 1
        assert "Configuration cancelled" in result.output


class TestMain:
    """Tests for the main() entry point."""

    @pytest.mark.unit
    def test_fatal_error_logged(self, cli_env, capsys, restore_root_logger):
        with (
            patch("consentcalc.cli.app.cli", side_effect=RuntimeError("boom")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        assert "Fatal error occurred" in capsys.readouterr().err
        log_file = cli_env / ".cache" / "consentcalc" / "consentcalc.log"
        logging.getLogger().handlers[-1].flush()
        assert "boom" in log_file.read_text(encoding="utf-8")
