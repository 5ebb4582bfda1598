"""Residual-token parsing into a validated parameter map.

Supports ``--key=value``, ``--key value`` and bare ``--key``.  Flags not
declared by the matched command are a hard error; every recognised flag
is validated the moment it is read.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from cli_maker.core.models import CommandNode
from cli_maker.core.resolver import FLAG_PREFIX, is_flag
from cli_maker.core.validator import validate
from cli_maker.exceptions import ParameterValidationError, UnknownParameterError

logger = logging.getLogger(__name__)


def split_flag(tokens: Sequence[str], index: int) -> tuple[str, str | None, int]:
    """Split the flag at *index* into ``(name, raw_value, next_index)``."""
    body = tokens[index][len(FLAG_PREFIX):]
    if "=" in body:
        name, value = body.split("=", 1)
        return name, value, index + 1
    following = index + 1
    if following < len(tokens) and not is_flag(tokens[following]):
        return body, tokens[following], following + 1
    return body, None, following


def parse_arguments(tokens: Sequence[str], node: CommandNode) -> dict[str, Any]:
    """Convert residual *tokens* into a ``name → coerced value`` map.

    Raises
    ------
    UnknownParameterError
        On the first flag *node* does not declare.
    ParameterValidationError
        On the first value the validator rejects.
    """
    result: dict[str, Any] = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not is_flag(token):
            logger.debug("Ignoring positional token '%s'", token)
            i += 1
            continue

        name, raw, i = split_flag(tokens, i)
        param = node.find_param(name)
        if param is None:
            declared = ", ".join(p.name for p in node.params) or "(none)"
            raise UnknownParameterError(
                name, hint=f"Available parameters: {declared}",
            )

        outcome = validate(raw, param.type, param.required, param.options, param.name)
        if not outcome.ok:
            raise ParameterValidationError(
                outcome.error or "Invalid value",
                hint=f"Expected {outcome.expected}" if outcome.expected else None,
            )
        result[name] = outcome.value

    return result
