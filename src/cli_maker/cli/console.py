"""CLI console and logging helpers backed by Rich.

This module intentionally avoids module-level imports of Rich so that
importing the library stays cheap and bootstrap paths fail with a clean
:class:`~cli_maker.exceptions.EnvironmentError` when Rich is missing.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

from cli_maker.exceptions import EnvironmentError

LOG_LEVEL_ENV_VAR = "CLI_MAKER_LOG_LEVEL"


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with a plain stderr fallback."""

	def print(self, *objects: object, **kwargs: Any) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects, **kwargs)


console = _ConsoleProxy()


def configure_logging(level: str | int | None = None) -> None:
	"""Attach a Rich log handler to the ``cli_maker`` logger.

	*level* defaults to ``$CLI_MAKER_LOG_LEVEL`` or ``WARNING``.  An
	unknown level name falls back to ``WARNING`` with a warning record.
	Calling this twice replaces the previous handler instead of stacking
	them.  Without Rich no handler is attached and records stay silent.
	"""
	if level is None:
		level = os.getenv(LOG_LEVEL_ENV_VAR, "WARNING")
	unknown_level = None
	if isinstance(level, str):
		level = level.upper()
		if not isinstance(logging.getLevelName(level), int):
			unknown_level, level = level, logging.WARNING

	package_logger = logging.getLogger("cli_maker")
	package_logger.setLevel(level)
	for existing in list(package_logger.handlers):
		if getattr(existing, "_cli_maker_handler", False):
			package_logger.removeHandler(existing)

	try:
		from rich.logging import RichHandler
	except ModuleNotFoundError:
		pass
	else:
		handler = RichHandler(console=get_rich_console(), show_path=False)
		handler._cli_maker_handler = True  # type: ignore[attr-defined]
		package_logger.addHandler(handler)

	if unknown_level is not None:
		package_logger.warning("Unknown log level %r; using WARNING", unknown_level)


def escape(text: object) -> str:
	"""Escape Rich markup in operator-supplied *text*.

	Without Rich the proxy prints plain text, so nothing needs escaping.
	"""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError:
		return str(text)
	return rich_escape(str(text))
