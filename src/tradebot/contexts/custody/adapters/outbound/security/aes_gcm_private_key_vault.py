from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from tradebot.contexts.custody.application.ports import (
    KeyDecryptionError,
    KeyVaultConfigurationError,
    PrivateKeyVault,
)
from tradebot.contexts.custody.domain.value_objects import (
    EncryptedKeyEnvelope,
    normalize_private_key_hex,
)

_KEY_LENGTH = 32
_NONCE_LENGTH = 12
_TAG_LENGTH = 16
_PRIVATE_KEY_LENGTH = 32


class AesGcmPrivateKeyVault(PrivateKeyVault):
    """
    AesGcmPrivateKeyVault — AES-256-GCM vault sealing wallet private keys with random nonces.

    The key is decoded once in the constructor and never leaves the instance; envelopes store
    nonce, ciphertext, and tag as independent base64 fields.

    Related:
      - src/tradebot/contexts/custody/application/ports/private_key_vault.py
      - src/tradebot/contexts/custody/domain/value_objects/encrypted_key_envelope.py
      - apps/api/wiring/modules/tradebot.py
    """

    def __init__(self, *, key_b64: str) -> None:
        """
        Initialize vault from base64 key (`ENCRYPTION_KEY_BASE64`).

        Args:
            key_b64: Base64-encoded 32-byte AES key.
        Returns:
            None.
        Assumptions:
            Vault is constructed once per process at wiring time.
        Raises:
            KeyVaultConfigurationError: If key is blank, not base64, or not 32 bytes.
        Side Effects:
            None.
        """
        normalized_key_b64 = key_b64.strip()
        if not normalized_key_b64:
            raise KeyVaultConfigurationError(message="ENCRYPTION_KEY_BASE64 must be non-empty")
        try:
            key_bytes = base64.b64decode(normalized_key_b64, validate=True)
        except binascii.Error as error:
            raise KeyVaultConfigurationError(
                message="ENCRYPTION_KEY_BASE64 must be valid base64"
            ) from error
        if len(key_bytes) != _KEY_LENGTH:
            raise KeyVaultConfigurationError(
                message="ENCRYPTION_KEY_BASE64 must decode to exactly 32 bytes for AES-256-GCM"
            )
        self._aesgcm = AESGCM(key_bytes)

    def __repr__(self) -> str:
        return "AesGcmPrivateKeyVault(key=<redacted>)"

    def encrypt(self, *, private_key_hex: str) -> EncryptedKeyEnvelope:
        """
        Seal 32 raw private key bytes with a fresh 12-byte nonce.

        Args:
            private_key_hex: 64 hex characters with optional `0x` prefix.
        Returns:
            EncryptedKeyEnvelope: Base64 `{iv, ciphertext, tag}` envelope.
        Assumptions:
            Nonce is never reused under the process key.
        Raises:
            ValueError: If private key literal is malformed.
        Side Effects:
            Reads OS CSPRNG.
        """
        plaintext = bytes.fromhex(normalize_private_key_hex(private_key_hex)[2:])
        nonce = os.urandom(_NONCE_LENGTH)
        sealed = self._aesgcm.encrypt(nonce, plaintext, None)
        ciphertext, tag = sealed[:-_TAG_LENGTH], sealed[-_TAG_LENGTH:]
        return EncryptedKeyEnvelope(
            iv=_b64(nonce),
            ciphertext=_b64(ciphertext),
            tag=_b64(tag),
        )

    def decrypt(self, *, envelope: EncryptedKeyEnvelope) -> str:
        """
        Authenticate and open envelope.

        Args:
            envelope: Stored envelope.
        Returns:
            str: `0x` + 64 lowercase hex characters.
        Assumptions:
            Any single-bit change of nonce, ciphertext, or tag fails authentication.
        Raises:
            KeyDecryptionError: If parts are malformed or authentication fails.
        Side Effects:
            None.
        """
        nonce = _unb64(value=envelope.iv, field_name="iv")
        ciphertext = _unb64(value=envelope.ciphertext, field_name="ciphertext")
        tag = _unb64(value=envelope.tag, field_name="tag")
        if len(nonce) != _NONCE_LENGTH:
            raise KeyDecryptionError(message="envelope iv must be 12 bytes")
        if len(tag) != _TAG_LENGTH:
            raise KeyDecryptionError(message="envelope tag must be 16 bytes")

        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as error:
            raise KeyDecryptionError(message="envelope authentication failed") from error
        if len(plaintext) != _PRIVATE_KEY_LENGTH:
            raise KeyDecryptionError(message="decrypted private key must be 32 bytes")
        return "0x" + plaintext.hex()


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _unb64(*, value: str, field_name: str) -> bytes:
    """
    Decode one envelope field with strict base64 validation.

    Args:
        value: Base64 text.
        field_name: Envelope field name for deterministic error messages.
    Returns:
        bytes: Decoded bytes.
    Assumptions:
        None.
    Raises:
        KeyDecryptionError: If value is not valid base64.
    Side Effects:
        None.
    """
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as error:
        raise KeyDecryptionError(message=f"envelope {field_name} is not valid base64") from error
