"""Unit tests for AES-256-GCM credential encryption."""

import base64

import pytest

from apps.site_settings.encryption import (
    EncryptionKeyMissing,
    InvalidEncryptedPayload,
    decrypt_secret,
    encrypt_secret,
    load_key,
)


def test_encrypt_produces_three_base64_parts():
    payload = encrypt_secret("sk_test_123")
    iv, tag, data = payload.split(":")
    assert len(base64.b64decode(iv)) == 12
    assert len(base64.b64decode(tag)) == 16
    assert decrypt_secret(payload) == "sk_test_123"


def test_iv_is_random_per_encryption():
    assert encrypt_secret("same") != encrypt_secret("same")


def test_tampered_payload_is_rejected():
    iv, tag, data = encrypt_secret("secret").split(":")
    raw = bytearray(base64.b64decode(data))
    raw[0] ^= 0x01
    forged = ":".join([iv, tag, base64.b64encode(bytes(raw)).decode()])
    with pytest.raises(InvalidEncryptedPayload):
        decrypt_secret(forged)


@pytest.mark.parametrize("payload", ["", "abc", "a:b", "::", "!!:??:**"])
def test_malformed_payload_is_rejected(payload):
    with pytest.raises(InvalidEncryptedPayload):
        decrypt_secret(payload)


def test_missing_key_raises(settings):
    settings.SETTINGS_ENCRYPTION_KEY = ""
    with pytest.raises(EncryptionKeyMissing) as e:
        encrypt_secret("x")
    assert e.value.status_code == 500


def test_base64_key_is_accepted(settings):
    key = bytes(range(32))
    settings.SETTINGS_ENCRYPTION_KEY = base64.b64encode(key).decode()
    assert load_key() == key
    assert decrypt_secret(encrypt_secret("hello")) == "hello"


def test_short_key_is_unusable():
    assert load_key(base64.b64encode(b"short").decode()) is None
    assert load_key("abcd") is None


def test_payload_from_other_key_is_rejected(settings):
    payload = encrypt_secret("secret")
    settings.SETTINGS_ENCRYPTION_KEY = "ab" * 32
    with pytest.raises(InvalidEncryptedPayload):
        decrypt_secret(payload)
