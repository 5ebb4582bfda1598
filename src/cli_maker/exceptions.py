"""Custom exception hierarchy for cli-maker.

All exceptions that cross layer boundaries must inherit from
:class:`CliMakerError`.  Raw third-party exceptions (e.g. from
``cryptography`` or ``json``) must NEVER propagate beyond the
infrastructure layer — they must be caught and re-raised as a typed
subclass defined here, or downgraded where the store's best-effort
policy says so.

Hierarchy
---------
CliMakerError
├── ResolutionError
│   ├── UnknownCommandError
│   └── UnknownParameterError
├── ParameterValidationError
│   └── MissingParametersError
├── PromptCancelledError
├── RegistryError
├── ConfigStoreError
│   ├── ConfigNotFoundError
│   ├── ConfigCorruptedError
│   └── DecryptionError
├── RotationError
│   ├── InvalidPassphraseError
│   ├── PassphraseMismatchError
│   ├── SamePassphraseError
│   └── NoSecretsError
└── EnvironmentError
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cli_maker.core.models import ParamSpec


class CliMakerError(Exception):
    """Base exception for all cli-maker errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command resolution ----------------------------------------------------

class ResolutionError(CliMakerError):
    """Raised when the argument vector cannot be mapped onto the registry."""


class UnknownCommandError(ResolutionError):
    """Raised when the first token names no registered command."""

    def __init__(self, command: str, *, hint: str | None = None) -> None:
        super().__init__(f"Unknown command: '{command}'", hint=hint)
        self.command: str = command


class UnknownParameterError(ResolutionError):
    """Raised when a flag is not declared by the matched command."""

    def __init__(self, parameter: str, *, hint: str | None = None) -> None:
        super().__init__(f"Unknown parameter: '{parameter}'", hint=hint)
        self.parameter: str = parameter


# --- Parameter validation --------------------------------------------------

class ParameterValidationError(CliMakerError):
    """Raised when a supplied value does not satisfy its declared type."""


class MissingParametersError(ParameterValidationError):
    """Raised in non-interactive mode when required parameters are absent.

    Carries both the missing required parameters and the optional ones
    the operator could still provide, so the error boundary can list them.
    """

    def __init__(
        self,
        missing: Sequence[ParamSpec],
        optional: Sequence[ParamSpec] = (),
        *,
        hint: str | None = None,
    ) -> None:
        names = ", ".join(param.name for param in missing)
        super().__init__(f"Missing required parameters: {names}", hint=hint)
        self.missing: tuple[ParamSpec, ...] = tuple(missing)
        self.optional: tuple[ParamSpec, ...] = tuple(optional)


# --- Interactive prompting -------------------------------------------------

class PromptCancelledError(CliMakerError):
    """Raised when the operator cancels a list selection or masked input."""


# --- Registry construction -------------------------------------------------

class RegistryError(CliMakerError):
    """Raised when a command tree violates its naming invariants."""


# --- Configuration store ---------------------------------------------------

class ConfigStoreError(CliMakerError):
    """Base class for configuration file failures."""


class ConfigNotFoundError(ConfigStoreError):
    """Raised when an operation requires a config file that does not exist."""


class ConfigCorruptedError(ConfigStoreError):
    """Raised in strict mode when the config file is unreadable or malformed."""


class DecryptionError(ConfigStoreError):
    """Raised in strict mode when a secret envelope cannot be opened."""


# --- Passphrase rotation ---------------------------------------------------

class RotationError(CliMakerError):
    """Base class for passphrase rotation aborts.

    Every subclass is raised before any file is modified.
    """


class InvalidPassphraseError(RotationError):
    """Raised when the current passphrase fails to decrypt a secret field."""


class PassphraseMismatchError(RotationError):
    """Raised when the confirmation does not match the new passphrase."""


class SamePassphraseError(RotationError):
    """Raised when the new passphrase equals the current one."""


class NoSecretsError(RotationError):
    """Raised when the config file holds no secret fields to rotate."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(CliMakerError):
    """Raised when a required runtime dependency is not available."""
