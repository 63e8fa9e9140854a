from .aes_gcm_private_key_vault import AesGcmPrivateKeyVault
from .eth_account_factory import EthAccountFactory

__all__ = [
    "AesGcmPrivateKeyVault",
    "EthAccountFactory",
]
