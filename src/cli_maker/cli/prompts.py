"""Interactive prompt engine for missing parameters and setup steps.

One prompt state per pending parameter, visited strictly in declared
order inside a single terminal session:

* **List** parameters render a navigable list; the only transitions are
  up, down (both wrapping), confirm and cancel.
* **Other** parameters loop "ask → validate" until the validator is
  satisfied.  Password parameters switch to masked input that echoes a
  placeholder per character and honours backspace.

Cancelling a list or masked input raises
:class:`~cli_maker.exceptions.PromptCancelledError`; the error boundary
turns it into process termination once every ``finally`` block has
restored the terminal.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from cli_maker.cli.console import console, escape
from cli_maker.core.models import ParamSpec, ParamType, ValidationResult
from cli_maker.core.protocols import Key, Terminal
from cli_maker.core.validator import validate
from cli_maker.exceptions import ParameterValidationError, PromptCancelledError

logger = logging.getLogger(__name__)

MASK = "********"


# ---------------------------------------------------------------------------
# Presentation helpers (pure, no I/O)
# ---------------------------------------------------------------------------

def option_lines(options: Sequence[str], index: int) -> list[str]:
    """Build the list-selector body with the cursor on *index*."""
    lines = [
        f"\x1b[32m❯ {option}\x1b[0m" if i == index else f"  {option}"
        for i, option in enumerate(options)
    ]
    lines.append("\x1b[90mUse ↑/↓ to navigate, Enter to confirm, Ctrl+C to cancel\x1b[0m")
    return lines


def as_raw(value: Any) -> str:
    """Turn a stored or default value back into validator input."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _prompt_text(required: bool) -> str:
    return "Enter value (required): " if required else "Enter value (or press Enter to skip): "


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class PromptEngine:
    """Sequential prompt state machine over a :class:`Terminal`.

    Parameters
    ----------
    terminal:
        Operator I/O backend.  Defaults to
        :class:`~cli_maker.infra.terminal.ConsoleTerminal`.
    placeholder:
        Character echoed per keystroke during masked input.
    """

    def __init__(self, terminal: Terminal | None = None, *, placeholder: str = "*") -> None:
        if terminal is None:
            from cli_maker.infra.terminal import ConsoleTerminal

            terminal = ConsoleTerminal()
        self._terminal: Terminal = terminal
        self._placeholder: str = placeholder

    @property
    def terminal(self) -> Terminal:
        return self._terminal

    # ------------------------------------------------------------------
    # Command parameters
    # ------------------------------------------------------------------

    def collect(
        self,
        params: Sequence[ParamSpec],
        existing: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Prompt for every parameter absent from *existing*, in order."""
        answers: dict[str, Any] = dict(existing or {})
        pending = [p for p in params if answers.get(p.name) is None]
        if not pending:
            return answers

        console.print(
            "\n[bold white on blue] INTERACTIVE MODE [/bold white on blue] "
            "[blue]Please provide the following information:[/blue]\n"
        )
        with self._terminal.session():
            for param in pending:
                answers[param.name] = self.ask_param(param)
        console.print("[green]✅ All parameters collected successfully![/green]\n")
        return answers

    def ask_param(self, param: ParamSpec) -> Any:
        """Run one prompt state to completion and return its value."""
        self._announce(param)

        if param.type is ParamType.LIST:
            if param.options:
                console.print("[cyan]Use ↑/↓ arrow keys to navigate, Enter to select:[/cyan]")
                value = self.select_option(param.name, param.options)
                console.print(f"[green]✓ Selected: {escape(value)}[/green]\n")
                return value
            if param.required:
                raise ParameterValidationError(
                    f"No options configured for list parameter '{param.name}'.",
                )

        attempts = 0
        while True:
            if attempts:
                console.print("[yellow]Please try again:[/yellow]")
            prompt_text = _prompt_text(param.required)
            answer = (
                self.read_masked(prompt_text)
                if param.type is ParamType.PASSWORD
                else self._terminal.read_line(prompt_text)
            )
            outcome = validate(answer, param.type, param.required, param.options, param.name)
            if outcome.ok:
                break
            self._report(outcome)
            attempts += 1

        if outcome.value is None:
            console.print("[dim]○ Skipped[/dim]\n")
        else:
            console.print("[green]✓ Accepted[/green]\n")
        return outcome.value

    # ------------------------------------------------------------------
    # Setup steps
    # ------------------------------------------------------------------

    def ask_step(self, step: ParamSpec, existing: Any = None) -> Any:
        """Prompt for one configuration step.

        Pressing Enter keeps *existing*, else falls back to the step's
        default.  A sealed secret that could not be opened is kept as-is.
        """
        console.print(f"[bold]{escape(step.name)}[/bold] [dim]({escape(step.description)})[/dim]")
        if step.options:
            console.print(f"[dim]Options: {escape(', '.join(step.options))}[/dim]")
        if existing is not None:
            shown = MASK if step.is_secret else escape(existing)
            console.print(f"[yellow]Current value:[/yellow] {shown}")
        elif step.default_value is not None:
            shown = MASK if step.is_secret else escape(step.default_value)
            console.print(f"[yellow]Default value:[/yellow] {shown}")

        with self._terminal.session():
            if step.type is ParamType.LIST and step.options:
                current = as_raw(existing if existing is not None else step.default_value)
                initial = step.options.index(current) if current in step.options else 0
                return self.select_option(step.name, step.options, initial)

            while True:
                answer = self.read_masked("> ") if step.is_secret else self._terminal.read_line("> ")
                if answer == "" and step.is_secret and isinstance(existing, dict):
                    return existing
                if answer == "":
                    fallback = existing if existing is not None else step.default_value
                    answer = as_raw(fallback)
                outcome = validate(answer, step.type, step.required, step.options, step.name)
                if outcome.ok:
                    return outcome.value
                self._report(outcome)

    # ------------------------------------------------------------------
    # Low-level widgets
    # ------------------------------------------------------------------

    def select_option(self, name: str, options: Sequence[str], initial: int = 0) -> str:
        """Arrow-key list selector; returns the confirmed option."""
        if not options:
            raise ParameterValidationError(f"No options configured for '{name}'.")
        index = initial % len(options)
        lines = option_lines(options, index)
        self._terminal.write("\n".join(lines) + "\n")

        while True:
            key = self._terminal.read_key()
            match key.kind:
                case Key.UP:
                    index = (index - 1) % len(options)
                case Key.DOWN:
                    index = (index + 1) % len(options)
                case Key.ENTER:
                    logger.debug("Selected option %d for %s", index, name)
                    return options[index]
                case Key.CANCEL:
                    console.print("[yellow]⚠️  Selection cancelled[/yellow]")
                    raise PromptCancelledError("Selection cancelled.")
                case _:
                    continue
            self._redraw(lines, option_lines(options, index))
            lines = option_lines(options, index)

    def read_masked(self, prompt: str) -> str:
        """Read a secret, echoing the placeholder once per character."""
        self._terminal.write(prompt)
        buffer: list[str] = []
        while True:
            key = self._terminal.read_key()
            match key.kind:
                case Key.ENTER:
                    self._terminal.write("\n")
                    return "".join(buffer)
                case Key.CANCEL:
                    self._terminal.write("\n")
                    raise PromptCancelledError("Input cancelled.")
                case Key.BACKSPACE:
                    if buffer:
                        buffer.pop()
                        self._terminal.write("\b \b")
                case Key.CHAR:
                    buffer.append(key.char)
                    self._terminal.write(self._placeholder)
                case _:
                    continue

    def _redraw(self, previous: Sequence[str], current: Sequence[str]) -> None:
        self._terminal.write(f"\x1b[{len(previous)}A")
        for line in current:
            self._terminal.write(f"\r\x1b[2K{line}\n")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @staticmethod
    def _announce(param: ParamSpec) -> None:
        marker = "[red]*[/red]" if param.required else "[dim]○[/dim]"
        console.print(f"{marker} [bold]{escape(param.name)}[/bold] [dim]({param.type.value})[/dim]")
        if param.description:
            console.print(f"  [dim]{escape(param.description)}[/dim]")
        if param.options:
            console.print(f"  [dim]Options: {escape(', '.join(param.options))}[/dim]")
        console.print()

    @staticmethod
    def _report(outcome: ValidationResult) -> None:
        console.print(f"[red]{escape(outcome.error)}[/red]")
        if outcome.expected:
            console.print(f"[dim]Expected: {escape(outcome.expected)}[/dim]")


# ---------------------------------------------------------------------------
# Ad-hoc helpers for command actions
# ---------------------------------------------------------------------------

def prompt(question: str, terminal: Terminal | None = None) -> str:
    """Ask *question* and return the visible answer."""
    engine = PromptEngine(terminal)
    with engine.terminal.session():
        return engine.terminal.read_line(question)


def hidden_prompt(question: str, terminal: Terminal | None = None) -> str:
    """Ask *question* and return the answer read with masked input."""
    engine = PromptEngine(terminal)
    with engine.terminal.session():
        return engine.read_masked(question)
