from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Mapping

_ENVELOPE_FIELDS = ("iv", "ciphertext", "tag")


@dataclass(frozen=True, slots=True)
class EncryptedKeyEnvelope:
    """
    EncryptedKeyEnvelope — AES-GCM sealed private key stored as three base64 fields.

    Related:
      - src/tradebot/contexts/custody/application/ports/private_key_vault.py
      - src/tradebot/contexts/custody/adapters/outbound/security/aes_gcm_private_key_vault.py
      - alembic/versions/20261019_0001_tradebot_storage_v1.py
    """

    iv: str
    ciphertext: str
    tag: str

    def __post_init__(self) -> None:
        """
        Validate that every field is non-empty strict base64.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Lengths of decoded parts are checked by the vault at decryption time.
        Raises:
            ValueError: If one of fields is blank or not valid base64.
        Side Effects:
            None.
        """
        for field_name in _ENVELOPE_FIELDS:
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"EncryptedKeyEnvelope.{field_name} must be non-empty string")
            try:
                base64.b64decode(value, validate=True)
            except binascii.Error as error:
                raise ValueError(
                    f"EncryptedKeyEnvelope.{field_name} must be valid base64"
                ) from error

    def to_mapping(self) -> dict[str, str]:
        """
        Serialize envelope into JSON-compatible mapping with stable key order.

        Args:
            None.
        Returns:
            dict[str, str]: `{"iv", "ciphertext", "tag"}` mapping.
        Assumptions:
            Mapping is stored as JSONB.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {"iv": self.iv, "ciphertext": self.ciphertext, "tag": self.tag}

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> EncryptedKeyEnvelope:
        """
        Parse envelope from stored JSON mapping.

        Args:
            payload: Mapping with `iv`, `ciphertext`, and `tag` keys.
        Returns:
            EncryptedKeyEnvelope: Validated envelope.
        Assumptions:
            Extra keys are ignored.
        Raises:
            ValueError: If a key is missing or a value is invalid.
        Side Effects:
            None.
        """
        missing = [name for name in _ENVELOPE_FIELDS if name not in payload]
        if missing:
            raise ValueError(f"EncryptedKeyEnvelope mapping is missing keys: {missing}")
        return cls(
            iv=str(payload["iv"]),
            ciphertext=str(payload["ciphertext"]),
            tag=str(payload["tag"]),
        )
