"""Command path resolution with single-step backtracking.

Walks the argument vector greedily to find the longest command path the
registry recognises.  The first token must name a top-level command; each
further token either extends the path to a nested subcommand or, when it
does not match, is handed back together with everything after it as
residual arguments for the last matched node.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from cli_maker.core.models import CommandNode, Resolution
from cli_maker.core.registry import CommandRegistry
from cli_maker.exceptions import UnknownCommandError

logger = logging.getLogger(__name__)

FLAG_PREFIX = "--"


def is_flag(token: str) -> bool:
    return token.startswith(FLAG_PREFIX)


def _unknown(registry: CommandRegistry, name: str) -> UnknownCommandError:
    available = registry.describe()
    hint = "Available commands:\n  " + "\n  ".join(available) if available else None
    return UnknownCommandError(name, hint=hint)


def resolve_command_path(
    registry: CommandRegistry,
    tokens: Sequence[str],
) -> Resolution:
    """Resolve *tokens* to the deepest matching command node.

    Parameters
    ----------
    registry:
        The tool's command forest.
    tokens:
        Argument vector with program/script identifiers already removed.

    Returns
    -------
    Resolution
        Matched node, the consumed path, and the residual tokens.

    Raises
    ------
    UnknownCommandError
        If the first token is a flag or names no top-level command.
    """
    path: list[str] = []
    matched: CommandNode | None = None
    residual: tuple[str, ...] = tuple(tokens)
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if is_flag(token):
            break

        path.append(token)
        i += 1
        residual = tuple(tokens[i:])

        if len(path) == 1:
            node = registry.find(token)
            if node is None:
                raise _unknown(registry, token)
        else:
            node = registry.find_path(path)
            if node is None:
                path.pop()
                residual = tuple(tokens[i - 1:])
                logger.debug("No subcommand '%s' under %s; backtracking", token, path)
                break

        matched = node
        if not node.subcommands or i >= len(tokens) or is_flag(tokens[i]):
            break

    if matched is None:
        raise _unknown(registry, tokens[0] if tokens else "")

    logger.debug("Resolved path %s with residual %s", path, residual)
    return Resolution(node=matched, path=tuple(path), residual=residual)
