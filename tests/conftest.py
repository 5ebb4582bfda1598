"""Shared pytest fixtures and configuration for the cli-maker test suite.

Guidelines
----------
* No real terminal: prompts run against :class:`ScriptedTerminal`.
* No real home directory: ``CLI_MAKER_HOME`` points into ``tmp_path``.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

import contextlib
from collections import deque
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest

from cli_maker.core.protocols import Key, KeyPress
from cli_maker.exceptions import PromptCancelledError


class ScriptedTerminal:
    """Terminal double that plays back queued lines and keys."""

    def __init__(
        self,
        keys: Iterable[KeyPress] = (),
        lines: Iterable[str] = (),
    ) -> None:
        self.keys: deque[KeyPress] = deque(keys)
        self.lines: deque[str] = deque(lines)
        self.output: list[str] = []
        self.prompts: list[str] = []
        self.in_session: bool = False
        self.sessions: int = 0

    @contextlib.contextmanager
    def session(self) -> Iterator[None]:
        self.in_session = True
        self.sessions += 1
        try:
            yield
        finally:
            self.in_session = False

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise PromptCancelledError("script exhausted")
        return self.lines.popleft()

    def read_key(self) -> KeyPress:
        if not self.keys:
            return KeyPress(Key.CANCEL)
        return self.keys.popleft()

    def write(self, text: str) -> None:
        self.output.append(text)

    @property
    def text(self) -> str:
        return "".join(self.output)


def typed(text: str, *, enter: bool = True) -> list[KeyPress]:
    """Key presses for typing *text* (then ENTER)."""
    keys = [KeyPress(Key.CHAR, char) for char in text]
    if enter:
        keys.append(KeyPress(Key.ENTER))
    return keys


UP = KeyPress(Key.UP)
DOWN = KeyPress(Key.DOWN)
ENTER = KeyPress(Key.ENTER)
CANCEL = KeyPress(Key.CANCEL)
BACKSPACE = KeyPress(Key.BACKSPACE)


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect ``~/.cli-maker`` into a temporary directory."""
    monkeypatch.setenv("CLI_MAKER_HOME", str(tmp_path))
    return tmp_path
