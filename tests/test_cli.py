"""Tests for the command-line front-end (cli.py)."""

from __future__ import annotations

import argparse
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from npm_vetter.cli import _build_prompter, _parse_args, configure_logging, run_cli
from npm_vetter.models import Choice, Mode
from npm_vetter.report.prompt import RichPrompter, StaticPrompter


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory with no npm-vetter env vars."""
    monkeypatch.chdir(tmp_path)
    for var in (
        "NPM_VETTER_CONFIG",
        "NPM_VETTER_OSV_URL",
        "NPM_VETTER_PACKAGE_MANAGER",
        "NPM_VETTER_HTTP_TIMEOUT",
        "NPM_VETTER_FAIL_CLOSED",
        "NPM_VETTER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestParseArgs:
    def test_install_with_packages_and_flags(self):
        args = _parse_args(["install", "left-pad", "react@18", "--verbose", "--fail-closed"])
        assert args.command == "install"
        assert args.pkgs == ["left-pad", "react@18"]
        assert args.verbose is True
        assert args.fail_closed is True
        assert args.scan is False
        assert args.yes is None

    def test_bare_install(self):
        args = _parse_args(["install"])
        assert args.pkgs == []

    def test_install_scan_flag(self):
        assert _parse_args(["install", "--scan"]).scan is True

    def test_scan_subcommand(self):
        args = _parse_args(["scan", "--yes", "uninstall"])
        assert args.command == "scan"
        assert args.yes == "uninstall"

    def test_invalid_yes_choice_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            _parse_args(["install", "--yes", "maybe"])
        assert exc_info.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            _parse_args([])


class TestBuildPrompter:
    def _args(self, yes: str | None = None) -> argparse.Namespace:
        return argparse.Namespace(yes=yes)

    def test_yes_gives_static(self, console):
        prompter = _build_prompter(self._args("ignore"), Mode.INSTALL, console)
        assert prompter == StaticPrompter(Choice.IGNORE)

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [(Mode.INSTALL, Choice.ABORT), (Mode.SCAN, Choice.IGNORE)],
    )
    def test_non_tty_uses_mode_default(self, console, mode, expected):
        stdin = MagicMock()
        stdin.isatty.return_value = False
        with patch("npm_vetter.cli.sys.stdin", stdin):
            prompter = _build_prompter(self._args(), mode, console)
        assert prompter == StaticPrompter(expected)

    def test_tty_gives_rich_prompter(self, console):
        stdin = MagicMock()
        stdin.isatty.return_value = True
        with patch("npm_vetter.cli.sys.stdin", stdin):
            prompter = _build_prompter(self._args(), Mode.INSTALL, console)
        assert isinstance(prompter, RichPrompter)


class TestRunCli:
    def test_install_dispatches_to_run_install(self, console):
        with patch("npm_vetter.cli.run_install", new_callable=AsyncMock, return_value=0) as mock:
            code = run_cli(["install", "left-pad", "--yes", "abort"], console=console)

        assert code == 0
        packages, options, services = mock.call_args[0]
        assert packages == ["left-pad"]
        assert options.verbose is False
        assert services.prompter == StaticPrompter(Choice.ABORT)

    def test_exit_code_propagates(self, console):
        with patch("npm_vetter.cli.run_install", new_callable=AsyncMock, return_value=1):
            assert run_cli(["install", "--yes", "abort"], console=console) == 1

    @pytest.mark.parametrize("argv", [["scan"], ["install", "--scan"]])
    def test_scan_dispatches_to_run_scan(self, console, argv):
        with (
            patch("npm_vetter.cli.run_scan", new_callable=AsyncMock, return_value=0) as scan,
            patch("npm_vetter.cli.run_install", new_callable=AsyncMock) as install,
        ):
            code = run_cli([*argv, "--yes", "ignore"], console=console)

        assert code == 0
        scan.assert_awaited_once()
        install.assert_not_called()

    def test_settings_flow_into_adapters(self, console, tmp_path):
        (tmp_path / ".npm-vetter.yaml").write_text(
            "osv_url: http://osv.local/batch\npackage_manager: pnpm\n"
        )
        with patch("npm_vetter.cli.run_install", new_callable=AsyncMock, return_value=0) as mock:
            run_cli(["install", "--yes", "abort"], console=console)

        services = mock.call_args[0][2]
        assert services.oracle.url == "http://osv.local/batch"
        assert services.installer.executable == "pnpm"
        assert services.resolver.executable == "pnpm"

    def test_config_error_reported_with_exit_1(self, console, tmp_path):
        (tmp_path / ".npm-vetter.yaml").write_text("- not a mapping\n")
        with patch("npm_vetter.cli.run_install", new_callable=AsyncMock) as mock:
            code = run_cli(["install"], console=console)

        assert code == 1
        mock.assert_not_called()
        assert "Error:" in console.file.getvalue()

    def test_keyboard_interrupt_exit_1(self, console):
        with patch(
            "npm_vetter.cli.run_install", new_callable=AsyncMock, side_effect=KeyboardInterrupt
        ):
            assert run_cli(["install", "--yes", "abort"], console=console) == 1
        assert "Interrupted." in console.file.getvalue()

    def test_end_of_input_exit_1(self, console):
        with patch("npm_vetter.cli.run_scan", new_callable=AsyncMock, side_effect=EOFError):
            assert run_cli(["scan"], console=console) == 1
        assert "Interrupted." in console.file.getvalue()


class TestConfigureLogging:
    def test_explicit_level(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("NPM_VETTER_LOG_LEVEL", "INFO")
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_default_and_unknown_level_is_warning(self):
        configure_logging("chatty")
        assert logging.getLogger().level == logging.WARNING
