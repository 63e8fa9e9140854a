from .encrypted_key_envelope import EncryptedKeyEnvelope
from .private_key_hex import normalize_private_key_hex

__all__ = [
    "EncryptedKeyEnvelope",
    "normalize_private_key_hex",
]
