"""Pure, type-driven parameter validation and coercion.

:func:`validate` is the single place where raw strings become typed
values.  It performs no I/O, keeps no state, and never raises for bad
input — every failure is reported through
:class:`~cli_maker.core.models.ValidationResult`.

Rules
-----
* ``None`` and ``""`` are "absent"; nothing else is.
* No implicit trimming or case normalisation beyond the boolean rule.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any

from cli_maker.core.models import ParamType, ValidationResult

_NUMBER_RE = re.compile(r"[0-9]+")
_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_URL_RE = re.compile(r"^https?://.+", re.DOTALL)
_PACKAGE_RE = re.compile(r"@[a-zA-Z0-9-]+/[a-zA-Z0-9-]+")


def is_absent(value: Any) -> bool:
    """Return ``True`` for the two spellings of "no value"."""
    return value is None or value == ""


def validate(
    raw: str | None,
    type: ParamType = ParamType.TEXT,
    required: bool = False,
    options: Sequence[str] | None = None,
    name: str | None = None,
) -> ValidationResult:
    """Validate *raw* against *type* and coerce it.

    Parameters
    ----------
    raw:
        The raw string from the command line or prompt, or ``None``.
    type:
        Declared parameter type.
    required:
        Whether absence is an error.
    options:
        Allowed values for :attr:`ParamType.LIST`.
    name:
        Parameter name, included in the missing-value message when given.

    Returns
    -------
    ValidationResult
        ``value`` holds the coerced value on success; ``error`` holds a
        message naming the offending raw value on failure.
    """
    if is_absent(raw):
        if required:
            suffix = f": {name}" if name else ""
            return ValidationResult(error=f"Missing required parameter{suffix}")
        return ValidationResult(value=None)

    match ParamType(type):
        case ParamType.NUMBER:
            if not _NUMBER_RE.fullmatch(raw):
                return _invalid("number", raw, "digits only, e.g. 42")
            return ValidationResult(value=int(raw))
        case ParamType.BOOLEAN:
            lowered = raw.lower()
            if lowered not in ("true", "false"):
                return _invalid("boolean", raw, "true or false")
            return ValidationResult(value=lowered == "true")
        case ParamType.EMAIL:
            if not _EMAIL_RE.fullmatch(raw):
                return _invalid("email", raw, "local@domain.tld")
            return ValidationResult(value=raw)
        case ParamType.URL:
            if not _URL_RE.match(raw):
                return _invalid("URL", raw, "http:// or https:// followed by a host")
            return ValidationResult(value=raw)
        case ParamType.PACKAGE:
            if not _PACKAGE_RE.fullmatch(raw):
                return _invalid("package", raw, "@scope/name")
            return ValidationResult(value=raw)
        case ParamType.LIST:
            return _validate_list(raw, options)
        case ParamType.CUSTOM:
            return _validate_custom(raw)
        case _:
            # TEXT and PASSWORD accept any non-empty value
            return ValidationResult(value=raw)


def _invalid(label: str, raw: str, expected: str) -> ValidationResult:
    return ValidationResult(error=f"Invalid {label}: {raw}", expected=expected)


def _validate_list(raw: str, options: Sequence[str] | None) -> ValidationResult:
    if not options:
        return ValidationResult(
            error=f"Invalid option: {raw}",
            expected="no options are configured for this parameter",
        )
    if raw not in options:
        return ValidationResult(
            error=f"Invalid option: {raw}",
            expected="one of " + ", ".join(str(opt) for opt in options),
        )
    return ValidationResult(value=raw)


def _validate_custom(raw: str) -> ValidationResult:
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None
    if not isinstance(parsed, (list, dict)):
        return _invalid("custom value", raw, "a JSON array or object")
    return ValidationResult(value=parsed)
