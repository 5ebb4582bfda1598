"""Domain models for cli-maker.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and invariant checks.  They carry zero I/O
and zero dependencies on external packages.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from cli_maker.exceptions import RegistryError

Action = Callable[[dict[str, Any]], Any]
"""Command action: receives the resolved parameter map, may return a coroutine."""


# ---------------------------------------------------------------------------
# Parameter schema
# ---------------------------------------------------------------------------

class ParamType(str, enum.Enum):
    """Closed set of parameter types understood by the validator."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    EMAIL = "email"
    URL = "url"
    LIST = "list"
    CUSTOM = "custom"
    PACKAGE = "package"
    PASSWORD = "password"


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """Declaration of one named, typed parameter (or configuration step)."""

    name: str
    """Flag name without the ``--`` prefix."""

    description: str = ""
    """Human-readable description shown in help and prompts."""

    type: ParamType = ParamType.TEXT
    """Declared type driving validation and coercion."""

    required: bool = False
    """Whether an absent value is an error."""

    options: tuple[str, ...] = ()
    """Allowed values; only meaningful for :attr:`ParamType.LIST`."""

    default_value: Any = None
    """Fallback for configuration steps when the operator presses Enter."""

    def __post_init__(self) -> None:
        if not isinstance(self.type, ParamType):
            object.__setattr__(self, "type", ParamType(self.type))
        object.__setattr__(self, "options", tuple(self.options or ()))

    @property
    def is_secret(self) -> bool:
        return self.type is ParamType.PASSWORD


SetupStep = ParamSpec
"""A configuration step shares the parameter schema."""


# ---------------------------------------------------------------------------
# Command tree
# ---------------------------------------------------------------------------

def _ensure_unique(names: Sequence[str], what: str, owner: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise RegistryError(f"Duplicate {what} '{name}' in '{owner}'.")
        seen.add(name)


def _noop(params: dict[str, Any]) -> None:
    _ = params


@dataclass(frozen=True, slots=True)
class CommandNode:
    """One node of the command forest.

    A node with :attr:`subcommands` may still be invoked directly; its own
    :attr:`action` runs when no child name matches the next token.
    """

    name: str
    description: str = ""
    params: tuple[ParamSpec, ...] = ()
    subcommands: tuple[CommandNode, ...] = ()
    action: Action = field(default=_noop, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params or ()))
        object.__setattr__(self, "subcommands", tuple(self.subcommands or ()))
        _ensure_unique([p.name for p in self.params], "parameter", self.name)
        _ensure_unique([c.name for c in self.subcommands], "subcommand", self.name)

    def find_param(self, name: str) -> ParamSpec | None:
        return next((p for p in self.params if p.name == name), None)

    def find_subcommand(self, name: str) -> CommandNode | None:
        return next((c for c in self.subcommands if c.name == name), None)


# ---------------------------------------------------------------------------
# Resolution results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of walking the registry: matched node plus leftover tokens."""

    node: CommandNode
    path: tuple[str, ...]
    residual: tuple[str, ...]

    @property
    def wants_help(self) -> bool:
        return "--help" in self.residual


@dataclass(frozen=True, slots=True)
class ResolvedInvocation:
    """The matched command together with its coerced parameter map."""

    node: CommandNode
    path: tuple[str, ...]
    params: Mapping[str, Any]

    def missing_required(self) -> list[ParamSpec]:
        return [
            p for p in self.node.params
            if p.required and self.params.get(p.name) is None
        ]


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of :func:`~cli_maker.core.validator.validate`."""

    value: Any = None
    error: str | None = None
    expected: str | None = None
    """Human-readable description of the accepted format, when relevant."""

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Tool options
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CLIOptions:
    """Per-tool behaviour switches."""

    interactive: bool = True
    """Prompt for absent parameters when no flags were given."""

    version: str = "1.0.0"
    """Version string printed by ``--version``."""

    executable_name: str | None = None
    """Name shown in usage lines; defaults to the tool name."""
