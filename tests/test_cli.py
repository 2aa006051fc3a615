"""
Tests for the command line interface.
"""

import pytest
from typer.testing import CliRunner

from sessionfinder import __version__
from sessionfinder.cli.app import app

runner = CliRunner()

CONFIG_YAML = """
campaign:
  start_date: "2024-11-25"
  end_date: "2024-11-25"
  earliest_time: "18:00"
  latest_time: "23:00"
  session_length_minutes: 120
participants_file: participants.yaml
"""

PARTICIPANTS_YAML = """
participants:
  - id: gm
    displayName: Morgan
    patterns:
      - {dayOfWeek: 1, startTime: "18:00", endTime: "23:00"}
  - id: sam
    patterns:
      - {dayOfWeek: 1, startTime: "19:00", endTime: "23:00"}
  - id: idle
"""


@pytest.fixture
def config_path(tmp_path):
    (tmp_path / "participants.yaml").write_text(PARTICIPANTS_YAML, encoding="utf-8")
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class TestFindCommand:
    """Tests for the find command."""

    def test_lists_best_slots(self, config_path):
        result = runner.invoke(app, ["find", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "No time works for everyone" in result.output
        assert "Most available" in result.output
        assert "2024-11-25" in result.output

    def test_date_outside_any_pattern(self, config_path):
        result = runner.invoke(
            app, ["find", "--config", str(config_path), "--start", "2024-11-26", "--end", "2024-11-26"]
        )

        assert result.exit_code == 0
        assert "Nobody has declared availability" in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["find", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestOtherCommands:
    """Tests for sessions, effective, bounds, parse-text and version."""

    def test_sessions(self, config_path):
        result = runner.invoke(app, ["sessions", "--config", str(config_path), "--min-participants", "2"])

        assert result.exit_code == 0
        assert "120-minute sessions" in result.output

    def test_sessions_for_everyone(self, config_path):
        result = runner.invoke(app, ["sessions", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "No 120-minute session fits" in result.output

    def test_effective(self, config_path):
        result = runner.invoke(app, ["effective", "sam", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "Total: 4h 00m" in result.output

    def test_effective_unknown_participant(self, config_path):
        result = runner.invoke(app, ["effective", "nobody", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "Unknown participant" in result.output

    def test_bounds(self, config_path):
        result = runner.invoke(app, ["bounds", "gm", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "18:00 – 23:00" in result.output

    def test_bounds_without_availability(self, config_path):
        result = runner.invoke(app, ["bounds", "idle", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "has not declared any availability" in result.output

    def test_parse_text_needs_translator(self, config_path):
        result = runner.invoke(app, ["parse-text", "weeknights after 7", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "No translator configured" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
