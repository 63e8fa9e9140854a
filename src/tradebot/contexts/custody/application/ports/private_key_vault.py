from __future__ import annotations

from typing import Protocol

from tradebot.contexts.custody.domain.value_objects import EncryptedKeyEnvelope
from tradebot.platform.errors import ErrorKind, TradeBotError, UserMessageCategory

_WALLET_UNAVAILABLE_MESSAGE = (
    "Your wallet could not be unlocked. Please contact support before trading again."
)


class KeyVaultConfigurationError(TradeBotError):
    """
    KeyVaultConfigurationError — process encryption key is missing or not 32 bytes.

    Raised once at startup; processes must refuse to start rather than run without custody.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="key_vault_misconfigured",
            message=message,
            kind=ErrorKind.CRYPTO,
            category=UserMessageCategory.UNKNOWN,
            status_code=500,
        )


class KeyDecryptionError(TradeBotError):
    """
    KeyDecryptionError — envelope authentication failed (tampering, corruption or wrong key).

    Never retried; indicates storage corruption or key rotation without re-encryption.
    """

    def __init__(self, *, message: str) -> None:
        super().__init__(
            code="key_decryption_failed",
            message=message,
            kind=ErrorKind.CRYPTO,
            category=UserMessageCategory.WALLET,
            status_code=500,
            user_message=_WALLET_UNAVAILABLE_MESSAGE,
        )


class PrivateKeyVault(Protocol):
    """
    PrivateKeyVault — authenticated symmetric encryption port for wallet private keys.

    Related:
      - src/tradebot/contexts/custody/adapters/outbound/security/aes_gcm_private_key_vault.py
      - src/tradebot/contexts/custody/application/use_cases/ensure_user_wallet.py
      - src/tradebot/contexts/custody/application/use_cases/resolve_signer.py
    """

    def encrypt(self, *, private_key_hex: str) -> EncryptedKeyEnvelope:
        """
        Seal private key with a fresh random nonce.

        Args:
            private_key_hex: 64 hex characters with optional `0x` prefix.
        Returns:
            EncryptedKeyEnvelope: Base64 `{iv, ciphertext, tag}` envelope.
        Assumptions:
            Two calls with the same plaintext produce different envelopes.
        Raises:
            ValueError: If private key literal is malformed.
        Side Effects:
            Reads OS CSPRNG.
        """
        ...

    def decrypt(self, *, envelope: EncryptedKeyEnvelope) -> str:
        """
        Open envelope and return `0x`-prefixed private key hex.

        Args:
            envelope: Stored envelope.
        Returns:
            str: `0x` + 64 lowercase hex characters.
        Assumptions:
            No partial plaintext is ever returned.
        Raises:
            KeyDecryptionError: If authentication fails or envelope parts are malformed.
        Side Effects:
            None.
        """
        ...
