"""Protocols (interfaces) consumed by the prompt engine and the CLI.

These define the contracts that infrastructure adapters must satisfy.
The prompt engine depends ONLY on :class:`Terminal` — never on a
concrete implementation — so tests can swap in a scripted double that
plays back a fixed key sequence.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Protocol

from cli_maker.core.models import CommandNode


class Key(enum.Enum):
    """Normalised key classes produced by :meth:`Terminal.read_key`."""

    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    CANCEL = "cancel"
    BACKSPACE = "backspace"
    CHAR = "char"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class KeyPress:
    """A single decoded keypress."""

    kind: Key
    char: str = ""
    """The printable character for :attr:`Key.CHAR`, else empty."""


class Terminal(Protocol):
    """Contract for operator I/O backends."""

    def session(self) -> AbstractContextManager[None]:
        """Acquire the input device for one prompt session.

        The returned context manager must release the device (and revert
        any raw mode) on every exit path, including exceptions.
        """
        ...  # pragma: no cover

    def read_line(self, prompt: str) -> str:
        """Read one line of visible input, without the trailing newline."""
        ...  # pragma: no cover

    def read_key(self) -> KeyPress:
        """Block until a single key is pressed and return it decoded."""
        ...  # pragma: no cover

    def write(self, text: str) -> None:
        """Write *text* to the operator immediately (no newline added)."""
        ...  # pragma: no cover


class HelpRenderer(Protocol):
    """Contract for help/version display collaborators."""

    def render_global_help(
        self,
        name: str,
        description: str,
        executable: str,
        commands: Sequence[CommandNode],
    ) -> None:
        ...  # pragma: no cover

    def render_command_help(
        self,
        name: str,
        executable: str,
        node: CommandNode,
        path: Sequence[str],
    ) -> None:
        ...  # pragma: no cover

    def render_version(self, executable: str, version: str) -> None:
        ...  # pragma: no cover
