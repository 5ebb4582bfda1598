"""Core layer — command resolution, tokenizing and validation.

Rules
-----
* No ``print()`` calls.
* No filesystem or terminal I/O.
* No imports from ``cli`` or ``infra``.
* All functions are deterministic; equal inputs give equal results.
"""

from cli_maker.core.models import (
    CLIOptions,
    CommandNode,
    ParamSpec,
    ParamType,
    Resolution,
    ResolvedInvocation,
    SetupStep,
    ValidationResult,
)
from cli_maker.core.protocols import HelpRenderer, Key, KeyPress, Terminal
from cli_maker.core.registry import CommandRegistry
from cli_maker.core.resolver import resolve_command_path
from cli_maker.core.tokenizer import parse_arguments
from cli_maker.core.validator import validate

__all__: list[str] = [
    "CLIOptions",
    "CommandNode",
    "CommandRegistry",
    "HelpRenderer",
    "Key",
    "KeyPress",
    "ParamSpec",
    "ParamType",
    "Resolution",
    "ResolvedInvocation",
    "SetupStep",
    "Terminal",
    "ValidationResult",
    "parse_arguments",
    "resolve_command_path",
    "validate",
]
