"""Per-tool configuration file with secret envelopes.

One JSON document per tool lives at ``~/.cli-maker/<tool>-config.json``
(the base directory can be moved with ``CLI_MAKER_HOME``).  Steps typed
:attr:`~cli_maker.core.models.ParamType.PASSWORD` are stored as secret
envelopes; everything else is stored as its coerced value.

Policy
------
* Reads are best-effort: a missing or malformed file is an empty
  config, and a secret that cannot be opened reads back as ``None``.
  ``strict=True`` turns both into typed errors instead.
* Writes replace the whole document atomically; nothing is patched.
* Rotation validates everything before touching the disk and leaves a
  timestamped backup beside the original.
* No file locking; concurrent writers are not coordinated.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from cli_maker.core.models import ParamType, SetupStep
from cli_maker.exceptions import (
    ConfigCorruptedError,
    ConfigNotFoundError,
    DecryptionError,
    InvalidPassphraseError,
    NoSecretsError,
    PassphraseMismatchError,
    RotationError,
    SamePassphraseError,
)
from cli_maker.infra import crypto
from cli_maker.infra.atomic_write import atomic_write_text

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".cli-maker"
HOME_ENV_VAR = "CLI_MAKER_HOME"
_UNSAFE_CHARS = re.compile(r"[^a-z0-9._-]", re.IGNORECASE)


def config_path(
    tool_name: str,
    config_file_name: str | None = None,
    base_dir: Path | None = None,
) -> Path:
    """Return the deterministic config file path for *tool_name*.

    Priority for the base directory: explicit *base_dir* >
    ``CLI_MAKER_HOME`` > the user's home directory.
    """
    file_name = _UNSAFE_CHARS.sub("-", config_file_name or f"{tool_name}-config.json")
    if base_dir is None:
        env = os.getenv(HOME_ENV_VAR)
        base_dir = Path(env) if env else Path.home()
    return Path(base_dir) / CONFIG_DIR_NAME / file_name


class ConfigStore:
    """Load, save and rotate one tool's configuration document.

    Parameters
    ----------
    tool_name:
        The tool's declared name; drives the file name.
    config_file_name:
        Optional file name override (sanitised the same way).
    base_dir:
        Optional directory that holds ``.cli-maker``.
    """

    def __init__(
        self,
        tool_name: str,
        config_file_name: str | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self.tool_name: str = tool_name
        self.path: Path = config_path(tool_name, config_file_name, base_dir)

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.path.is_file()

    def _read_document(self, *, strict: bool = False) -> dict[str, Any]:
        """Read the JSON document; ``{}`` when missing or malformed."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            if strict:
                raise ConfigCorruptedError(
                    f"Cannot read config file: {self.path}",
                    hint=str(exc),
                ) from exc
            logger.warning("Ignoring unreadable config file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            if strict:
                raise ConfigCorruptedError(f"Config file is not a JSON object: {self.path}")
            logger.warning("Ignoring non-object config file %s", self.path)
            return {}
        return data

    def _write_document(self, document: Mapping[str, Any]) -> None:
        atomic_write_text(self.path, json.dumps(document, indent=2) + "\n")
        logger.debug("Wrote config file %s", self.path)

    def get_raw_config(self) -> dict[str, Any]:
        """Return the stored document as-is; secrets stay sealed."""
        return self._read_document()

    def get_config_value(self, key: str) -> Any:
        """Return one raw value, or ``None`` when absent."""
        return self._read_document().get(key)

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    def save_steps(
        self,
        steps: Sequence[SetupStep],
        answers: Mapping[str, Any],
        passphrase: str | None = None,
    ) -> Path:
        """Overwrite the document with *answers*, sealing secret steps.

        Returns the path written.
        """
        document: dict[str, Any] = dict(answers)
        for step in steps:
            value = document.get(step.name)
            if step.type is not ParamType.PASSWORD or value is None:
                continue
            if crypto.is_secret_envelope(value):
                continue
            plain = str(value)
            document[step.name] = (
                crypto.encrypt_secret(plain, passphrase)
                if passphrase
                else crypto.encode_secret(plain)
            )
        self._write_document(document)
        return self.path

    def load_config(
        self,
        steps: Sequence[SetupStep],
        passphrase: str | None = None,
        *,
        strict: bool = False,
    ) -> dict[str, Any]:
        """Read the document back with secret steps opened.

        Without *strict*, a secret that cannot be opened becomes ``None``
        (indistinguishable from "never configured").  With *strict*, a
        malformed file raises :class:`ConfigCorruptedError` and a failed
        secret raises :class:`DecryptionError`.
        """
        document = self._read_document(strict=strict)
        for step in steps:
            value = document.get(step.name)
            if step.type is not ParamType.PASSWORD or not isinstance(value, dict):
                continue
            if crypto.is_encrypted_envelope(value):
                if not passphrase:
                    continue
                if strict:
                    document[step.name] = crypto.decrypt_secret(value, passphrase)
                else:
                    document[step.name] = crypto.open_encrypted(value, passphrase)
            elif crypto.is_encoded_envelope(value):
                if strict:
                    document[step.name] = crypto.decode_secret(value)
                else:
                    document[step.name] = crypto.open_encoded(value)
        return document

    # ------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------

    def secret_fields(self) -> list[str]:
        """Return the names of every enveloped field in the document."""
        return [k for k, v in self._read_document().items() if crypto.is_secret_envelope(v)]

    def _open_all(self, document: Mapping[str, Any], passphrase: str) -> dict[str, str]:
        opened: dict[str, str] = {}
        for key, value in document.items():
            try:
                if crypto.is_encrypted_envelope(value):
                    opened[key] = crypto.decrypt_secret(value, passphrase)
                elif crypto.is_encoded_envelope(value):
                    opened[key] = crypto.decode_secret(value)
            except DecryptionError as exc:
                raise InvalidPassphraseError(
                    "Invalid current passphrase. Unable to decrypt configuration.",
                    hint=f"Field '{key}' could not be opened.",
                ) from exc
        return opened

    def verify_passphrase(self, passphrase: str) -> bool:
        """Return ``True`` when *passphrase* opens every secret field."""
        try:
            self._open_all(self._read_document(strict=True), passphrase)
        except (InvalidPassphraseError, ConfigCorruptedError):
            return False
        return True

    def check_rotatable(self) -> dict[str, Any]:
        """Return the document when it exists and holds secret fields.

        Raises :class:`ConfigNotFoundError` or :class:`NoSecretsError`
        otherwise, and :class:`ConfigCorruptedError` for a malformed file.
        """
        if not self.exists():
            raise ConfigNotFoundError(
                f"Config file not found: {self.path}",
                hint="Run the setup command first to create a configuration.",
            )
        document = self._read_document(strict=True)
        if not any(crypto.is_secret_envelope(v) for v in document.values()):
            raise NoSecretsError(
                "No encrypted fields found in config file.",
                hint="The configuration has no password fields to rotate.",
            )
        return document

    def rotate_passphrase(
        self,
        current: str,
        new: str,
        confirmation: str | None = None,
    ) -> Path:
        """Re-seal every secret field under *new*.

        All checks run before the disk is touched; on success a backup
        ``<file>.backup.<epoch-ms>`` is written and the original file is
        atomically replaced.  Encoded (non-confidential) fields are
        upgraded to encrypted ones.

        Returns
        -------
        Path
            The backup file.

        Raises
        ------
        ConfigNotFoundError
            If there is no config file.
        NoSecretsError
            If the file has no secret fields.
        RotationError
            If *current* or *new* is empty.
        SamePassphraseError
            If *new* equals *current*.
        PassphraseMismatchError
            If *confirmation* is given and differs from *new*.
        InvalidPassphraseError
            If any encrypted field fails to open with *current*.
        """
        document = self.check_rotatable()
        if not current:
            raise RotationError("Current passphrase is required.")
        if not new:
            raise RotationError("New passphrase is required.")
        if new == current:
            raise SamePassphraseError("New passphrase is the same as current passphrase.")
        if confirmation is not None and confirmation != new:
            raise PassphraseMismatchError("Passphrases do not match.")

        opened = self._open_all(document, current)

        rotated = dict(document)
        for key, plain in opened.items():
            rotated[key] = crypto.encrypt_secret(plain, new)

        backup = self.path.with_name(f"{self.path.name}.backup.{int(time.time() * 1000)}")
        shutil.copy2(self.path, backup)
        logger.info("Backed up %s to %s", self.path, backup)
        self._write_document(rotated)
        logger.info("Rotated passphrase for %d field(s) in %s", len(opened), self.path)
        return backup


# ---------------------------------------------------------------------------
# Module-level convenience API
# ---------------------------------------------------------------------------

def save_steps(
    tool_name: str,
    steps: Sequence[SetupStep],
    answers: Mapping[str, Any],
    passphrase: str | None = None,
    *,
    config_file_name: str | None = None,
) -> Path:
    return ConfigStore(tool_name, config_file_name).save_steps(steps, answers, passphrase)


def load_config(
    tool_name: str,
    steps: Sequence[SetupStep],
    passphrase: str | None = None,
    *,
    config_file_name: str | None = None,
    strict: bool = False,
) -> dict[str, Any]:
    return ConfigStore(tool_name, config_file_name).load_config(steps, passphrase, strict=strict)


def rotate_passphrase(
    tool_name: str,
    current: str,
    new: str,
    confirmation: str | None = None,
    *,
    config_file_name: str | None = None,
) -> Path:
    return ConfigStore(tool_name, config_file_name).rotate_passphrase(current, new, confirmation)


def get_raw_config(tool_name: str, *, config_file_name: str | None = None) -> dict[str, Any]:
    return ConfigStore(tool_name, config_file_name).get_raw_config()


def get_config_value(tool_name: str, key: str, *, config_file_name: str | None = None) -> Any:
    return ConfigStore(tool_name, config_file_name).get_config_value(key)
