from .entities import UserWallet
from .value_objects import EncryptedKeyEnvelope, normalize_private_key_hex

__all__ = [
    "EncryptedKeyEnvelope",
    "UserWallet",
    "normalize_private_key_hex",
]
