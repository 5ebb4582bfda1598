"""Ready-made ``setup`` and ``rotate-passphrase`` commands.

Both factories return a plain :class:`~cli_maker.core.models.CommandNode`
whose action drives the prompt engine and the configuration store.  The
tool registers them like any other command.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from cli_maker.cli.console import console, escape
from cli_maker.cli.prompts import PromptEngine
from cli_maker.core.models import CommandNode, ParamSpec, ParamType, SetupStep
from cli_maker.core.protocols import Terminal
from cli_maker.exceptions import InvalidPassphraseError, RotationError, SamePassphraseError
from cli_maker.infra.config_store import ConfigStore

logger = logging.getLogger(__name__)

ROTATE_COMMAND_NAME = "rotate-passphrase"


def create_setup_command(
    tool_name: str,
    steps: Sequence[SetupStep],
    *,
    name: str = "setup",
    description: str = "Configure CLI defaults",
    config_file_name: str | None = None,
    encryption: bool = False,
    passphrase_prompt: str = "Passphrase (not stored)",
    on_complete: Callable[[dict[str, Any]], Any] | None = None,
    terminal: Terminal | None = None,
) -> CommandNode:
    """Build a command that walks the operator through *steps*.

    Existing values are offered as defaults.  Password steps are sealed
    with the session passphrase when *encryption* is on, otherwise
    base64-encoded.
    """
    steps = tuple(steps)

    def action(params: dict[str, Any]) -> None:
        _ = params
        engine = PromptEngine(terminal)
        store = ConfigStore(tool_name, config_file_name)

        passphrase: str | None = None
        if encryption:
            with engine.terminal.session():
                passphrase = engine.read_masked(f"{passphrase_prompt}: ") or None

        answers: dict[str, Any] = store.load_config(steps, passphrase)

        console.print(
            "\n[bold white on blue] SETUP [/bold white on blue] "
            "[blue]Configure your CLI step by step[/blue]\n"
        )
        for step in steps:
            value = engine.ask_step(step, answers.get(step.name))
            if value is not None:
                answers[step.name] = value

        path = store.save_steps(steps, answers, passphrase)
        logger.info("Saved %d setup step(s) for %s", len(steps), tool_name)
        console.print(f"\n[green]✅ Config stored in {escape(path)}[/green]\n")

        if on_complete is not None:
            on_complete(answers)

    return CommandNode(name=name, description=description, action=action)


def create_rotate_passphrase_command(
    tool_name: str,
    *,
    terminal: Terminal | None = None,
) -> CommandNode:
    """Build the ``rotate-passphrase`` command for *tool_name*.

    The optional ``--config-file`` flag targets a non-default file name.
    The file and its secret fields are checked, and the current
    passphrase verified, before the new passphrase is asked for.
    """

    def action(params: dict[str, Any]) -> None:
        engine = PromptEngine(terminal)
        store = ConfigStore(tool_name, params.get("config-file"))

        console.print(
            "\n[bold white on blue] ROTATE PASSPHRASE [/bold white on blue] "
            f"[blue]{escape(store.path)}[/blue]\n"
        )

        store.check_rotatable()
        with engine.terminal.session():
            current = engine.read_masked("Current passphrase: ")
            if not current:
                raise RotationError("Current passphrase is required.")
            if not store.verify_passphrase(current):
                raise InvalidPassphraseError(
                    "Invalid current passphrase. Unable to decrypt configuration.",
                )
            new = engine.read_masked("New passphrase: ")
            confirmation = engine.read_masked("Confirm new passphrase: ")

        try:
            backup = store.rotate_passphrase(current, new, confirmation)
        except SamePassphraseError as exc:
            console.print(f"[yellow]⚠️  {escape(exc)}[/yellow]")
            return

        console.print(f"[dim]Backup created: {escape(backup)}[/dim]")
        console.print("[green]✅ Passphrase rotated successfully.[/green]\n")

    return CommandNode(
        name=ROTATE_COMMAND_NAME,
        description="Re-encrypt stored secrets with a new passphrase",
        params=(
            ParamSpec(
                name="config-file",
                description="Config file name, when not the default",
                type=ParamType.TEXT,
            ),
        ),
        action=action,
    )
