"""CLI facade and error boundary for tools built on cli-maker.

:class:`CLI` owns a tool's registry and options, routes an argument
vector through resolution, tokenizing and (optionally) interactive
prompting, and finally runs the matched command's action.

:meth:`CLI.run` is the **sole error boundary**.  It catches
:class:`~cli_maker.exceptions.CliMakerError`, cancellation,
``KeyboardInterrupt`` and any unexpected ``Exception``, renders a clean
message via Rich and terminates with a well-defined exit code.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

from cli_maker.cli import exit_codes
from cli_maker.cli.console import configure_logging, console, escape
from cli_maker.cli.help import RichHelpRenderer, print_missing_parameters
from cli_maker.cli.prompts import PromptEngine
from cli_maker.cli.setup_command import (
    create_rotate_passphrase_command,
    create_setup_command,
)
from cli_maker.core.models import (
    CLIOptions,
    CommandNode,
    ResolvedInvocation,
    Resolution,
    SetupStep,
)
from cli_maker.core.protocols import HelpRenderer, Terminal
from cli_maker.core.registry import CommandRegistry
from cli_maker.core.resolver import resolve_command_path
from cli_maker.core.tokenizer import parse_arguments
from cli_maker.exceptions import (
    CliMakerError,
    MissingParametersError,
    PromptCancelledError,
)
from cli_maker.infra.config_store import ConfigStore

logger = logging.getLogger(__name__)

HELP_FLAG = "--help"
VERSION_FLAG = "--version"


class CLI:
    """A command-line tool assembled from :class:`CommandNode` trees.

    Parameters
    ----------
    name:
        Tool name; also drives the configuration file name.
    description:
        One-line description shown in global help.
    options:
        Behaviour switches; defaults to :class:`CLIOptions`.
    registry:
        Pre-built command registry.  A fresh one is created when omitted.
    terminal:
        Operator I/O backend for prompts.  Defaults to the console.
    help_renderer:
        Help/version renderer.  Defaults to :class:`RichHelpRenderer`.
    """

    def __init__(
        self,
        name: str,
        description: str,
        options: CLIOptions | None = None,
        *,
        registry: CommandRegistry | None = None,
        terminal: Terminal | None = None,
        help_renderer: HelpRenderer | None = None,
    ) -> None:
        self._name: str = name
        self._description: str = description
        self._options: CLIOptions = options or CLIOptions()
        self._registry: CommandRegistry = registry if registry is not None else CommandRegistry()
        self._terminal: Terminal | None = terminal
        self._help: HelpRenderer = help_renderer or RichHelpRenderer()
        self._setup_steps: tuple[SetupStep, ...] = ()
        self._config_file_name: str | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def options(self) -> CLIOptions:
        return self._options

    @property
    def commands(self) -> tuple[CommandNode, ...]:
        return self._registry.commands

    @property
    def executable_name(self) -> str:
        return self._options.executable_name or self._name

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def command(self, node: CommandNode) -> CommandNode:
        """Register a top-level command."""
        return self._registry.add(node)

    def setup_command(self, steps: Sequence[SetupStep], **kwargs: Any) -> CommandNode:
        """Register a ``setup`` command for *steps*.

        Keyword arguments are forwarded to
        :func:`~cli_maker.cli.setup_command.create_setup_command`.
        """
        kwargs.setdefault("terminal", self._terminal)
        self._setup_steps = tuple(steps)
        self._config_file_name = kwargs.get("config_file_name")
        return self.command(create_setup_command(self._name, self._setup_steps, **kwargs))

    def rotate_passphrase_command(self) -> CommandNode:
        """Register the ``rotate-passphrase`` command."""
        return self.command(
            create_rotate_passphrase_command(self._name, terminal=self._terminal),
        )

    def load_config(self, passphrase: str | None = None) -> dict[str, Any]:
        """Read back the values stored by this tool's setup command."""
        store = ConfigStore(self._name, self._config_file_name)
        return store.load_config(self._setup_steps, passphrase)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def resolve(self, args: Sequence[str]) -> ResolvedInvocation:
        """Resolve *args* to a command and complete parameter map.

        Prompts for absent parameters when the tool is interactive; does
        not run the action.
        """
        return self._complete(resolve_command_path(self._registry, list(args)))

    def _complete(self, resolution: Resolution) -> ResolvedInvocation:
        node = resolution.node
        params = parse_arguments(resolution.residual, node)
        invocation = ResolvedInvocation(node=node, path=resolution.path, params=params)
        missing = invocation.missing_required()
        if not missing:
            return invocation

        if not params and self._options.interactive:
            logger.debug("Prompting for %d parameter(s) of %s", len(node.params), resolution.path)
            collected = PromptEngine(self._terminal).collect(node.params, params)
            invocation = ResolvedInvocation(node=node, path=resolution.path, params=collected)
            missing = invocation.missing_required()
            if not missing:
                return invocation

        optional = [p for p in node.params if not p.required]
        raise MissingParametersError(
            missing,
            optional,
            hint=f"Try '{self.executable_name} {' '.join(resolution.path)} {HELP_FLAG}' for more information.",
        )

    def parse(self, args: Sequence[str]) -> int:
        """Route *args* and run the matched action.

        Returns
        -------
        int
            OS process exit code.
        """
        tokens = list(args)

        if not tokens:
            self._render_global_help()
            return exit_codes.SUCCESS
        if tokens[0] == VERSION_FLAG:
            self._help.render_version(self.executable_name, self._options.version)
            return exit_codes.SUCCESS
        if tokens[0] == HELP_FLAG:
            self._render_global_help()
            return exit_codes.SUCCESS

        resolution = resolve_command_path(self._registry, tokens)
        if resolution.wants_help:
            self._help.render_command_help(
                self._name, self.executable_name, resolution.node, resolution.path,
            )
            return exit_codes.SUCCESS

        invocation = self._complete(resolution)
        logger.debug("Running %s", " ".join(invocation.path))
        result = invocation.node.action(dict(invocation.params))
        if inspect.iscoroutine(result):
            asyncio.run(result)
        return exit_codes.SUCCESS

    def _render_global_help(self) -> None:
        self._help.render_global_help(
            self._name, self._description, self.executable_name, self._registry.commands,
        )

    # ------------------------------------------------------------------
    # Error boundary
    # ------------------------------------------------------------------

    def run(self, argv: Sequence[str] | None = None) -> NoReturn:
        """Parse *argv* (default ``sys.argv[1:]``) and exit the process.

        This method guarantees the process never exits with a raw stack
        trace during normal usage.
        """
        try:
            configure_logging()
            code = self.parse(sys.argv[1:] if argv is None else argv)
            sys.exit(code)
        except MissingParametersError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(exc)}")
            print_missing_parameters(exc.missing, exc.optional)
            if exc.hint:
                console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
            sys.exit(exit_codes.GENERAL_ERROR)
        except PromptCancelledError as exc:
            console.print(f"\n[yellow]{escape(exc)}[/yellow]")
            sys.exit(exit_codes.KEYBOARD_INTERRUPT)
        except CliMakerError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(exc)}")
            if exc.hint:
                console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
            sys.exit(exit_codes.GENERAL_ERROR)
        except KeyboardInterrupt:
            console.print("\n[yellow]Aborted by user.[/yellow]")
            sys.exit(exit_codes.KEYBOARD_INTERRUPT)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unhandled exception", exc_info=True)
            console.print(
                "[bold red]Unexpected error.[/bold red] "
                "Please report this issue.\n"
                f"  {type(exc).__name__}: {escape(exc)}"
            )
            sys.exit(exit_codes.GENERAL_ERROR)
