"""Help, version and missing-parameter rendering.

Renders with a Rich table when Rich is importable and falls back to an
aligned plain-text layout on stderr otherwise.  Nothing here decides
*whether* help is shown; :class:`~cli_maker.cli.app.CLI` does that.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Sequence

from cli_maker.cli.console import console, escape
from cli_maker.core.models import CommandNode, ParamSpec


def _param_rows(params: Iterable[ParamSpec]) -> list[tuple[str, str, str, str]]:
    """Return (flag, type, required, description) rows for *params*."""
    rows: list[tuple[str, str, str, str]] = []
    for param in params:
        description = param.description
        if param.options:
            description = f"{description} (options: {', '.join(param.options)})".strip()
        rows.append(
            (
                f"--{param.name}",
                param.type.value,
                "yes" if param.required else "no",
                description,
            )
        )
    return rows


def _print_plain_rows(title: str, rows: Sequence[tuple[str, ...]], headers: Sequence[str]) -> None:
    widths = [
        max([len(headers[i]), *(len(row[i]) for row in rows)])
        for i in range(len(headers))
    ]
    print(f"\n{title}", file=sys.stderr)
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)), file=sys.stderr)
    print("-" * (sum(widths) + 2 * (len(widths) - 1)), file=sys.stderr)
    for row in rows:
        print("  ".join(c.ljust(w) for c, w in zip(row, widths)), file=sys.stderr)
    print(file=sys.stderr)


def print_param_table(title: str, params: Sequence[ParamSpec]) -> None:
    """Render *params* as a table titled *title*."""
    rows = _param_rows(params)
    headers = ("Parameter", "Type", "Required", "Description")
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_rows(title, rows, headers)
        return

    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column(headers[0], style="bold", min_width=12)
    table.add_column(headers[1], min_width=8)
    table.add_column(headers[2], justify="center", min_width=8)
    table.add_column(headers[3])
    for flag, kind, required, description in rows:
        required_cell = "[red]yes[/red]" if required == "yes" else "[dim]no[/dim]"
        table.add_row(escape(flag), kind, required_cell, escape(description))

    console.print()
    console.print(table)
    console.print()


def print_missing_parameters(
    missing: Sequence[ParamSpec],
    optional: Sequence[ParamSpec] = (),
) -> None:
    """List the required parameters still missing plus the optional ones."""
    print_param_table("Missing required parameters", missing)
    if optional:
        print_param_table("Optional parameters", optional)


class RichHelpRenderer:
    """Default :class:`~cli_maker.core.protocols.HelpRenderer`."""

    def render_global_help(
        self,
        name: str,
        description: str,
        executable: str,
        commands: Sequence[CommandNode],
    ) -> None:
        console.print(f"\n[bold]{escape(name)}[/bold]")
        if description:
            console.print(f"[dim]{escape(description)}[/dim]")
        console.print(f"\n[cyan]Usage:[/cyan] {escape(executable)} <command> {escape('[options]')}\n")

        if not commands:
            console.print("[yellow]No commands registered.[/yellow]")
            return

        console.print("[cyan]Commands:[/cyan]")
        width = max(len(c.name) for c in commands)
        for command in commands:
            console.print(f"  [bold]{escape(command.name.ljust(width))}[/bold]  {escape(command.description)}")
            for sub in command.subcommands:
                label = f"{command.name} {sub.name}"
                console.print(f"    [dim]{escape(label)}[/dim]  {escape(sub.description)}")
        console.print(
            f"\nRun '[bold]{escape(executable)} <command> --help[/bold]' for command details.\n"
        )

    def render_command_help(
        self,
        name: str,
        executable: str,
        node: CommandNode,
        path: Sequence[str],
    ) -> None:
        full = " ".join(path)
        console.print(f"\n[bold]{escape(name)} {escape(full)}[/bold]")
        if node.description:
            console.print(f"[dim]{escape(node.description)}[/dim]")
        console.print(f"\n[cyan]Usage:[/cyan] {escape(executable)} {escape(full)} {escape('[options]')}")

        if node.subcommands:
            console.print("\n[cyan]Subcommands:[/cyan]")
            for sub in node.subcommands:
                console.print(f"  [bold]{escape(sub.name)}[/bold]  {escape(sub.description)}")

        if node.params:
            print_param_table("Parameters", node.params)
        else:
            console.print()

    def render_version(self, executable: str, version: str) -> None:
        console.print(f"{escape(executable)} v{escape(version)}")
