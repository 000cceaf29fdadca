"""Tests for the command-line interface."""

from pathlib import Path

from typer.testing import CliRunner

from jira_rea_sync import __version__
from jira_rea_sync.cli import app
from jira_rea_sync.config import Config

runner = CliRunner()


class TestCli:
    """Test CLI commands that need no remote service."""

    def test_version(self) -> None:
        """Test the version command."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_import_requires_configuration(self, temp_config_dir: Path) -> None:
        """Test importing before configure was run."""
        result = runner.invoke(app, ["import", "--config-dir", str(temp_config_dir)])

        assert result.exit_code == 1
        assert "configure" in result.output

    def test_invalid_date(self, config: Config, temp_config_dir: Path) -> None:
        """Test a malformed date option."""
        config.remember("jira", "base_url", "https://example.atlassian.net/")

        result = runner.invoke(
            app,
            ["worklogs", "--from-date", "01.05.2024", "--config-dir", str(temp_config_dir)],
        )

        assert result.exit_code == 1
        assert "YYYY-MM-DD" in result.output

    def test_reversed_dates(self, temp_config_dir: Path) -> None:
        """Test that an end date before the start date is rejected."""
        result = runner.invoke(
            app,
            [
                "import",
                "--from-date",
                "2024-05-31",
                "--to-date",
                "2024-05-01",
                "--config-dir",
                str(temp_config_dir),
            ],
        )

        assert result.exit_code == 1
        assert "before" in result.output
