"""Operator prompts. Answers are always a tagged Choice, never free-form text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from rich.console import Console
from rich.prompt import Prompt

from npm_vetter.models import Choice


@dataclass(frozen=True, slots=True)
class Option:
    choice: Choice
    label: str
    description: str = ""


class PrompterPort(Protocol):
    """Port for asking the operator to pick exactly one option."""

    def choose(self, message: str, options: list[Option], default: Choice) -> Choice:
        """Block until the operator answers. No timeout."""
        ...


@dataclass
class RichPrompter:
    """Numbered single-choice prompt on the terminal."""

    console: Console

    def choose(self, message: str, options: list[Option], default: Choice) -> Choice:
        self.console.print(f"\n[bold]{message}[/bold]")
        for number, option in enumerate(options, start=1):
            line = f"  [cyan]{number}[/cyan]) {option.label}"
            if option.description:
                line += f" [dim]- {option.description}[/dim]"
            self.console.print(line)

        keys = [str(n) for n in range(1, len(options) + 1)]
        default_key = next(
            (key for key, option in zip(keys, options, strict=True) if option.choice == default),
            keys[0],
        )
        try:
            answer = Prompt.ask("Choose", console=self.console, choices=keys, default=default_key)
        except EOFError:
            # stdin closed (Ctrl-D): take the default like an empty answer
            self.console.print()
            answer = default_key
        return options[int(answer) - 1].choice


@dataclass(frozen=True, slots=True)
class StaticPrompter:
    """Answers every prompt with a fixed choice (``--yes``, non-interactive runs, tests).

    If the fixed choice is not among the offered options, the prompt's
    default is used instead.
    """

    answer: Choice | None = None

    def choose(self, message: str, options: list[Option], default: Choice) -> Choice:
        if self.answer is not None and any(o.choice == self.answer for o in options):
            return self.answer
        return default
