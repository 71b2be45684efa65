"""AES-256-GCM encryption for provider credentials stored in the database.

Ciphertexts are stored as ``iv:tag:data`` where each part is base64. The
96-bit IV is random per encryption and the 128-bit tag authenticates the
data, so a tampered value fails to decrypt instead of yielding garbage.

The key comes from ``settings.SETTINGS_ENCRYPTION_KEY``: either 64 hex
characters or the base64 encoding of 32 bytes.
"""

import base64
import binascii
import os
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from django.conf import settings

from apps.common.errors import ConfigurationError

KEY_SIZE = 32
IV_SIZE = 12
TAG_SIZE = 16

_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


class EncryptionKeyMissing(ConfigurationError):
    default_message = "Missing SETTINGS_ENCRYPTION_KEY."


class InvalidEncryptedPayload(ConfigurationError):
    default_message = "Invalid encrypted payload."


def load_key(raw: str | None = None) -> bytes | None:
    """Decode the configured key, or return ``None`` when absent/unusable."""
    if raw is None:
        raw = getattr(settings, "SETTINGS_ENCRYPTION_KEY", "") or ""
    raw = raw.strip()
    if not raw:
        return None
    if _HEX_KEY_RE.match(raw):
        return bytes.fromhex(raw)
    try:
        decoded = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        return None
    return decoded if len(decoded) == KEY_SIZE else None


def _require_key() -> bytes:
    key = load_key()
    if key is None:
        raise EncryptionKeyMissing()
    return key


def encrypt_secret(value: str) -> str:
    """Encrypt ``value`` and return the ``iv:tag:data`` string.

    Raises:
        EncryptionKeyMissing: If no usable key is configured.
    """
    aesgcm = AESGCM(_require_key())
    iv = os.urandom(IV_SIZE)
    sealed = aesgcm.encrypt(iv, value.encode("utf-8"), None)
    # AESGCM appends the tag to the ciphertext
    data, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return ":".join(base64.b64encode(part).decode("ascii") for part in (iv, tag, data))


def decrypt_secret(payload: str) -> str:
    """Decrypt an ``iv:tag:data`` string produced by ``encrypt_secret``.

    Raises:
        EncryptionKeyMissing: If no usable key is configured.
        InvalidEncryptedPayload: If the payload is malformed, was encrypted
            with another key, or was tampered with.
    """
    key = _require_key()
    parts = (payload or "").strip().split(":")
    if len(parts) != 3 or not all(parts):
        raise InvalidEncryptedPayload()
    try:
        iv, tag, data = (base64.b64decode(p, validate=True) for p in parts)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncryptedPayload() from exc
    if len(iv) != IV_SIZE or len(tag) != TAG_SIZE:
        raise InvalidEncryptedPayload()
    try:
        plain = AESGCM(key).decrypt(iv, data + tag, None)
    except InvalidTag as exc:
        raise InvalidEncryptedPayload() from exc
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncryptedPayload() from exc
