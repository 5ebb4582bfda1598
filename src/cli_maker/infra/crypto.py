"""Secret envelopes: passphrase encryption and reversible encoding.

This module is the **only** place in the codebase that imports
``cryptography``.  ``InvalidTag`` and base64 decoding errors never leave
it raw: the lenient ``open_*`` helpers return ``None`` and the strict
path raises :class:`~cli_maker.exceptions.DecryptionError`.

Envelope formats
----------------
* encrypted: ``{"encrypted": true, "algorithm": "aes-256-gcm", "iv",
  "salt", "authTag", "ciphertext"}`` — all byte fields base64.
* encoded: ``{"encoded": true, "value"}`` — base64 of the UTF-8
  plaintext.  This is NOT confidential.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from cli_maker.exceptions import DecryptionError

logger = logging.getLogger(__name__)

ALGORITHM = "aes-256-gcm"
KDF_ITERATIONS = 120_000
KEY_LENGTH = 32
SALT_LENGTH = 16
IV_LENGTH = 12
TAG_LENGTH = 16


def derive_key(passphrase: str, salt: bytes, iterations: int = KDF_ITERATIONS) -> bytes:
    """Derive a 256-bit AES key from *passphrase* with PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(text: Any) -> bytes:
    if not isinstance(text, str):
        raise DecryptionError("Envelope field is not a base64 string.")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("Envelope field is not valid base64.") from exc


# ---------------------------------------------------------------------------
# Envelope classification
# ---------------------------------------------------------------------------

def is_encrypted_envelope(value: Any) -> bool:
    return isinstance(value, dict) and value.get("encrypted") is True and "ciphertext" in value


def is_encoded_envelope(value: Any) -> bool:
    return isinstance(value, dict) and value.get("encoded") is True and "value" in value


def is_secret_envelope(value: Any) -> bool:
    return is_encrypted_envelope(value) or is_encoded_envelope(value)


# ---------------------------------------------------------------------------
# Passphrase mode (AES-256-GCM)
# ---------------------------------------------------------------------------

def encrypt_secret(plaintext: str, passphrase: str) -> dict[str, Any]:
    """Seal *plaintext* under a key derived from *passphrase*.

    A fresh random salt and IV are drawn for every call, so sealing the
    same secret twice yields different envelopes.
    """
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = derive_key(passphrase, salt)
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return {
        "encrypted": True,
        "algorithm": ALGORITHM,
        "iv": _b64(iv),
        "salt": _b64(salt),
        "authTag": _b64(tag),
        "ciphertext": _b64(ciphertext),
    }


def decrypt_secret(envelope: dict[str, Any], passphrase: str) -> str:
    """Open an encrypted envelope.

    Raises
    ------
    DecryptionError
        On a wrong passphrase, a tampered tag or ciphertext, or a
        malformed envelope.  Never returns wrong plaintext.
    """
    algorithm = envelope.get("algorithm", ALGORITHM)
    if algorithm != ALGORITHM:
        raise DecryptionError(f"Unsupported algorithm: {algorithm}")
    salt = _unb64(envelope.get("salt"))
    iv = _unb64(envelope.get("iv"))
    tag = _unb64(envelope.get("authTag"))
    ciphertext = _unb64(envelope.get("ciphertext"))
    key = derive_key(passphrase, salt)
    try:
        plain = AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except (InvalidTag, ValueError) as exc:
        raise DecryptionError(
            "Unable to decrypt value.",
            hint="The passphrase may be wrong or the data corrupted.",
        ) from exc
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("Decrypted value is not valid UTF-8.") from exc


def open_encrypted(envelope: dict[str, Any], passphrase: str) -> str | None:
    """Lenient :func:`decrypt_secret`: ``None`` instead of raising."""
    try:
        return decrypt_secret(envelope, passphrase)
    except DecryptionError as exc:
        logger.debug("Decryption failed: %s", exc)
        return None


# ---------------------------------------------------------------------------
# No-passphrase mode (base64)
# ---------------------------------------------------------------------------

def encode_secret(plaintext: str) -> dict[str, Any]:
    """Wrap *plaintext* in a reversible, non-confidential envelope."""
    return {"encoded": True, "value": _b64(plaintext.encode("utf-8"))}


def decode_secret(envelope: dict[str, Any]) -> str:
    """Reverse :func:`encode_secret`, raising :class:`DecryptionError`."""
    raw = _unb64(envelope.get("value"))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("Encoded value is not valid UTF-8.") from exc


def open_encoded(envelope: dict[str, Any]) -> str | None:
    """Lenient :func:`decode_secret`: ``None`` instead of raising."""
    try:
        return decode_secret(envelope)
    except DecryptionError as exc:
        logger.debug("Decoding failed: %s", exc)
        return None
