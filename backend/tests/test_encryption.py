"""Tests for credential encryption at rest."""

import base64

import pytest

from saastral_api.security.encryption import EncryptionService

OLD_KEY = base64.urlsafe_b64encode(b"o" * 32).decode()
NEW_KEY = base64.urlsafe_b64encode(b"n" * 32).decode()


class TestEncryptionService:
    """AES-GCM with a key chain for rotation."""

    def test_decrypts_what_it_encrypts(self) -> None:
        service = EncryptionService(NEW_KEY)
        credentials = {"refresh_token": "secret", "nested": {"a": 1}}

        encrypted = service.encrypt(credentials)

        assert b"secret" not in encrypted
        assert service.decrypt(encrypted) == credentials

    def test_legacy_key_still_decrypts(self) -> None:
        encrypted = EncryptionService(OLD_KEY).encrypt({"refresh_token": "secret"})
        rotated = EncryptionService(NEW_KEY, legacy_keys=[OLD_KEY])

        assert rotated.decrypt(encrypted) == {"refresh_token": "secret"}
        assert EncryptionService(NEW_KEY).decrypt(rotated.re_encrypt(encrypted)) == {
            "refresh_token": "secret"
        }

    def test_unknown_key_fails(self) -> None:
        encrypted = EncryptionService(OLD_KEY).encrypt({"refresh_token": "secret"})

        with pytest.raises(ValueError):
            EncryptionService(NEW_KEY).decrypt(encrypted)

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            EncryptionService(NEW_KEY).decrypt(b"not encrypted")

    def test_rejects_short_key(self) -> None:
        with pytest.raises(ValueError):
            EncryptionService(base64.urlsafe_b64encode(b"short").decode())
