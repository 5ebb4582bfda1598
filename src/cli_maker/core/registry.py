"""In-memory command registry.

The registry is an explicitly constructed value owned by the host
program and passed to the resolver; there is no module-level singleton,
so independent tools can coexist in one process.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from cli_maker.core.models import CommandNode
from cli_maker.exceptions import RegistryError


class CommandRegistry:
    """Ordered forest of top-level :class:`CommandNode` entries."""

    def __init__(self, commands: Sequence[CommandNode] = ()) -> None:
        self._commands: list[CommandNode] = []
        for command in commands:
            self.add(command)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, command: CommandNode) -> CommandNode:
        """Register a top-level command; sibling names must be unique."""
        if self.find(command.name) is not None:
            raise RegistryError(
                f"Command '{command.name}' is already registered.",
                hint="Top-level command names must be unique.",
            )
        self._commands.append(command)
        return command

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def commands(self) -> tuple[CommandNode, ...]:
        return tuple(self._commands)

    def find(self, name: str) -> CommandNode | None:
        """Return the top-level command called *name*, if any."""
        return next((c for c in self._commands if c.name == name), None)

    def find_path(self, path: Sequence[str]) -> CommandNode | None:
        """Follow *path* through nested subcommands.

        Every node before the last must itself have subcommands; the
        first name that does not match ends the walk with ``None``.
        """
        if not path:
            return None
        node = self.find(path[0])
        for name in path[1:]:
            if node is None or not node.subcommands:
                return None
            node = node.find_subcommand(name)
        return node

    def describe(self) -> list[str]:
        """Return ``name: description`` lines including first-level children."""
        lines: list[str] = []
        for command in self._commands:
            lines.append(f"{command.name}: {command.description}")
            for sub in command.subcommands:
                lines.append(f"  {command.name} {sub.name}: {sub.description}")
        return lines

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[CommandNode]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None
