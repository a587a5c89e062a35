"""CLI tests using Typer's runner."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gcp_switcher import __version__
from gcp_switcher.exceptions import ConfigurationError
from gcp_switcher.main import app
from gcp_switcher.ui.app import SwitcherApp

runner = CliRunner()


@pytest.fixture
def mock_runtime(config):
    with patch("gcp_switcher.main.load_config", return_value=config) as mock_load, patch(
        "gcp_switcher.main.setup_logging"
    ) as mock_logging, patch("gcp_switcher.main.run_switcher", return_value=0) as mock_run:
        yield mock_load, mock_logging, mock_run


class TestCLIBasics:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--debug" in result.stdout
        assert "graph" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"GCP Switcher {__version__}"

    def test_graph(self):
        result = runner.invoke(app, ["graph"])
        assert result.exit_code == 0
        assert result.stdout.startswith("digraph gcp_switcher {")
        assert '"PROCESSING" -> "ERROR" [label="OPERATION_FAILED"];' in result.stdout


class TestRun:
    def test_runs_switcher(self, mock_runtime, config):
        mock_load, mock_logging, mock_run = mock_runtime
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        mock_load.assert_called_once_with(path=None, debug=None)
        mock_logging.assert_called_once_with(config)
        mock_run.assert_called_once_with(config)

    def test_debug_flag(self, mock_runtime):
        mock_load, _, _ = mock_runtime
        runner.invoke(app, ["--debug"])
        assert mock_load.call_args.kwargs["debug"] is True

    def test_run_loop_failure_exits_nonzero(self, mock_runtime):
        _, _, mock_run = mock_runtime
        mock_run.side_effect = RuntimeError("terminal went away")
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "terminal went away" in result.stdout

    def test_failed_run_loop_status_exits_nonzero(self, mock_runtime):
        _, _, mock_run = mock_runtime
        mock_run.return_value = 1
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "❌ Error: switcher exited with status 1" in result.stdout

    def test_crashing_app_exits_nonzero(self, config):
        original_run = SwitcherApp.run

        def run_headless(self, **kwargs):
            return original_run(self, headless=True)

        with patch("gcp_switcher.main.load_config", return_value=config), patch(
            "gcp_switcher.main.setup_logging"
        ), patch(
            "gcp_switcher.ui.app.bootstrap", side_effect=RuntimeError("bootstrap exploded")
        ), patch.object(SwitcherApp, "run", run_headless):
            result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "❌ Error: switcher exited with status 1" in result.stdout

    def test_graph_does_not_start_switcher(self, mock_runtime):
        _, _, mock_run = mock_runtime
        runner.invoke(app, ["graph"])
        mock_run.assert_not_called()

    def test_configuration_error(self):
        with patch(
            "gcp_switcher.main.load_config",
            side_effect=ConfigurationError("command_timeout must be a positive number"),
        ), patch("gcp_switcher.main.run_switcher") as mock_run:
            result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "command_timeout must be a positive number" in result.stdout
        mock_run.assert_not_called()
