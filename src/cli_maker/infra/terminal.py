"""Console-backed implementation of :class:`~cli_maker.core.protocols.Terminal`.

Line input goes through questionary when stdin is a TTY (a plain line
read otherwise, e.g. when piped).  Single keys come from
prompt_toolkit's input layer: the outermost :meth:`ConsoleTerminal.session`
switches the TTY to raw mode once, and every key the parser yields is
queued, so a pasted burst reaches the prompt intact.
"""

from __future__ import annotations

import contextlib
import logging
import os
import select
import sys
import time
from collections import deque
from collections.abc import Iterator
from typing import Any, TextIO

from cli_maker.core.protocols import Key, KeyPress
from cli_maker.exceptions import EnvironmentError, PromptCancelledError

logger = logging.getLogger(__name__)

# Seconds to wait for the rest of an escape sequence before flushing a
# lone Esc out of the parser.
ESCAPE_TIMEOUT = 0.05
_WINDOWS_POLL_INTERVAL = 0.02


def _import_questionary() -> Any:
    """Import questionary lazily for interactive line input."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_prompt_toolkit() -> tuple[Any, Any]:
    """Import prompt_toolkit's input factory and key names lazily."""
    try:
        from prompt_toolkit.input import create_input
        from prompt_toolkit.keys import Keys
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "prompt_toolkit is not installed. Install with: pip install prompt_toolkit",
        ) from exc
    return create_input, Keys


def decode_char(char: str) -> KeyPress:
    """Map one raw character to a :class:`KeyPress`."""
    if char in ("\r", "\n", "\x04"):
        return KeyPress(Key.ENTER)
    if char == "\x03":
        return KeyPress(Key.CANCEL)
    if char in ("\x7f", "\b"):
        return KeyPress(Key.BACKSPACE)
    if len(char) == 1 and char.isprintable():
        return KeyPress(Key.CHAR, char)
    return KeyPress(Key.OTHER)


def decode_key_press(press: Any) -> list[KeyPress]:
    """Translate one prompt_toolkit ``KeyPress`` into ours.

    Arrows are matched by key name; everything else is classified from
    the raw data, so Ctrl+H and DEL both arrive as backspace.
    """
    _, keys = _import_prompt_toolkit()
    match press.key:
        case keys.Up:
            return [KeyPress(Key.UP)]
        case keys.Down:
            return [KeyPress(Key.DOWN)]
        case keys.BracketedPaste:
            return [decode_char(char) for char in press.data]
        case _:
            return [decode_char(press.data)]


class ConsoleTerminal:
    """Operator I/O on the process's standard streams."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin: TextIO = stdin or sys.stdin
        self._stdout: TextIO = stdout or sys.stdout
        self._input: Any = None
        self._pending: deque[KeyPress] = deque()
        self._depth = 0

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def session(self) -> Iterator[None]:
        """Hold the input device in raw mode; restore it however we leave.

        Nested sessions share the outermost one's raw mode.
        """
        with contextlib.ExitStack() as stack:
            if self._depth == 0 and self._is_tty():
                stack.enter_context(self._key_input().raw_mode())
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                self._stdout.flush()

    def _fileno(self) -> int | None:
        try:
            return self._stdin.fileno()
        except (AttributeError, OSError, ValueError):
            return None

    def _is_tty(self) -> bool:
        fd = self._fileno()
        return fd is not None and os.isatty(fd)

    def _key_input(self) -> Any:
        if self._input is None:
            create_input, _ = _import_prompt_toolkit()
            self._input = create_input(self._stdin)
        return self._input

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def write(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

    def read_line(self, prompt: str) -> str:
        """Read a visible line; Ctrl+C surfaces as ``KeyboardInterrupt``."""
        if not self._is_tty():
            logger.debug("stdin is not a TTY; reading a plain line")
            self.write(prompt)
            line = self._stdin.readline()
            if line == "":
                raise PromptCancelledError("End of input while waiting for a value.")
            return line.rstrip("\r\n")
        questionary = _import_questionary()
        answer: str = questionary.text(prompt, qmark="").unsafe_ask()
        return answer

    def read_key(self) -> KeyPress:
        """Return the next key, blocking until one arrives."""
        if self._pending:
            return self._pending.popleft()
        if not self._is_tty():
            char = self._stdin.read(1)
            return decode_char(char) if char else KeyPress(Key.CANCEL)

        key_input = self._key_input()
        with self.session():
            while not self._pending:
                if self._wait_for_input(key_input):
                    presses = key_input.read_keys()
                else:
                    presses = key_input.flush_keys()
                for press in presses:
                    self._pending.extend(decode_key_press(press))
                if not presses and key_input.closed:
                    self._pending.append(KeyPress(Key.CANCEL))
        return self._pending.popleft()

    @staticmethod
    def _wait_for_input(key_input: Any) -> bool:
        """Block briefly for data; ``False`` means the parser should flush."""
        if os.name == "nt":
            time.sleep(_WINDOWS_POLL_INTERVAL)
            return True
        ready, _, _ = select.select([key_input.fileno()], [], [], ESCAPE_TIMEOUT)
        return bool(ready)
