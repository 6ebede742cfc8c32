"""AES-256-GCM encryption of integration credentials at rest."""

import base64
import json
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from saastral_api.config import get_settings


class EncryptionService:
    """Encrypts credential dicts with AES-256-GCM.

    Data format: magic (2 bytes) + key version (1 byte) + nonce (12 bytes) + ciphertext.
    The key version indexes the key chain, so credentials written with a
    retired key stay readable while ``legacy_keys`` still lists it.
    """

    MAGIC_BYTES = b"\xEC\x01"
    MAGIC_SIZE = 2
    NONCE_SIZE = 12  # 96 bits for GCM
    VERSION_SIZE = 1

    def __init__(
        self,
        current_key: str | None = None,
        legacy_keys: list[str] | None = None,
    ) -> None:
        """Initialize with the current key and optional retired keys.

        Args:
            current_key: Base64 URL-safe key (32 bytes decoded), defaults to settings
            legacy_keys: Retired keys still accepted for decryption (oldest first)
        """
        if current_key is None:
            current_key = get_settings().encryption_key

        self._key_chain: list[bytes] = [self._decode_key(key) for key in legacy_keys or []]
        self._key_chain.append(self._decode_key(current_key))
        self._current_aesgcm = AESGCM(self._key_chain[-1])

    @staticmethod
    def _decode_key(key: str) -> bytes:
        """Decode and validate a base64-encoded encryption key.

        Raises:
            ValueError: If key is not valid base64 or not 32 bytes
        """
        try:
            padded_key = key + "=" * (-len(key) % 4)
            decoded = base64.urlsafe_b64decode(padded_key)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid base64-encoded encryption key: {type(e).__name__}") from e

        if len(decoded) != 32:
            raise ValueError("Encryption key must be 32 bytes (256 bits)")
        return decoded

    def encrypt(self, data: dict[str, Any]) -> bytes:
        """Encrypt a dict with the current key."""
        plaintext = json.dumps(data).encode("utf-8")
        nonce = os.urandom(self.NONCE_SIZE)
        ciphertext = self._current_aesgcm.encrypt(nonce, plaintext, None)
        version = len(self._key_chain) - 1
        return self.MAGIC_BYTES + bytes([version]) + nonce + ciphertext

    def decrypt(self, encrypted_data: bytes) -> dict[str, Any]:
        """Decrypt bytes produced by :meth:`encrypt`.

        Raises:
            ValueError: If the payload is malformed or no known key opens it
        """
        header_size = self.MAGIC_SIZE + self.VERSION_SIZE
        if (
            len(encrypted_data) < header_size + self.NONCE_SIZE + 1
            or encrypted_data[: self.MAGIC_SIZE] != self.MAGIC_BYTES
        ):
            raise ValueError("Invalid encrypted data")

        version = encrypted_data[self.MAGIC_SIZE]
        nonce = encrypted_data[header_size : header_size + self.NONCE_SIZE]
        ciphertext = encrypted_data[header_size + self.NONCE_SIZE :]

        # Try the recorded key version first, then the rest newest to oldest
        candidates = list(reversed(self._key_chain))
        if version < len(self._key_chain):
            candidates.insert(0, self._key_chain[version])

        for key in candidates:
            try:
                plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
                return json.loads(plaintext.decode("utf-8"))
            except (InvalidTag, ValueError):
                continue

        raise ValueError("Decryption failed: no valid key found")

    def re_encrypt(self, encrypted_data: bytes) -> bytes:
        """Re-encrypt data with the current key (key rotation)."""
        return self.encrypt(self.decrypt(encrypted_data))


# Global instance
_encryption_service: EncryptionService | None = None


def get_encryption_service() -> EncryptionService:
    """Get or create the encryption service singleton."""
    global _encryption_service
    if _encryption_service is None:
        _encryption_service = EncryptionService()
    return _encryption_service


def reset_encryption_service() -> None:
    """Reset the encryption service singleton (for testing or key rotation)."""
    global _encryption_service
    _encryption_service = None
