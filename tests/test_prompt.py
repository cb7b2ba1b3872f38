"""Tests for operator prompts (report/prompt.py)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from npm_vetter.models import Choice
from npm_vetter.report.decision import INSTALL_OPTIONS, SCAN_OPTIONS
from npm_vetter.report.prompt import RichPrompter, StaticPrompter

_ASK = "npm_vetter.report.prompt.Prompt.ask"


class TestRichPrompter:
    def test_numbered_choice_maps_to_option(self, console):
        with patch(_ASK, return_value="2") as mock_ask:
            choice = RichPrompter(console).choose("Proceed?", INSTALL_OPTIONS, Choice.ABORT)

        assert choice == Choice.IGNORE
        kwargs = mock_ask.call_args.kwargs
        assert kwargs["choices"] == ["1", "2"]
        assert kwargs["default"] == "1"

    def test_default_key_follows_default_choice(self, console):
        with patch(_ASK, return_value="2") as mock_ask:
            choice = RichPrompter(console).choose("Scan?", SCAN_OPTIONS, Choice.IGNORE)

        assert choice == Choice.IGNORE
        assert mock_ask.call_args.kwargs["default"] == "2"

    def test_lists_options(self, console):
        with patch(_ASK, return_value="1"):
            RichPrompter(console).choose("Scan?", SCAN_OPTIONS, Choice.IGNORE)

        out = console.file.getvalue()
        assert "Scan?" in out
        assert "1) Uninstall vulnerable package(s)" in out
        assert "2) Ignore & exit" in out

    @pytest.mark.parametrize(
        ("options", "default"),
        [(INSTALL_OPTIONS, Choice.ABORT), (SCAN_OPTIONS, Choice.IGNORE)],
    )
    def test_end_of_input_takes_default(self, console, options, default):
        """Ctrl-D at the prompt answers with the default instead of raising."""
        with patch(_ASK, side_effect=EOFError):
            assert RichPrompter(console).choose("Proceed?", options, default) == default


class TestStaticPrompter:
    def test_fixed_answer(self):
        prompter = StaticPrompter(Choice.IGNORE)
        assert prompter.choose("?", INSTALL_OPTIONS, Choice.ABORT) == Choice.IGNORE

    def test_no_answer_uses_default(self):
        assert StaticPrompter().choose("?", SCAN_OPTIONS, Choice.IGNORE) == Choice.IGNORE

    def test_unoffered_answer_uses_default(self):
        prompter = StaticPrompter(Choice.ABORT)
        assert prompter.choose("?", SCAN_OPTIONS, Choice.IGNORE) == Choice.IGNORE
