"""
Shared Kernel primitives.

This package re-exports the minimal set of domain primitives so that other
modules can import them from one place:

    from tradebot.shared_kernel.primitives import EvmAddress, UserId
"""

from .evm_address import EvmAddress
from .token_units import NATIVE_DECIMALS, from_raw_units, to_raw_units
from .user_id import UserId
from .utc_datetime import ensure_utc_datetime

__all__ = [
    "EvmAddress",
    "NATIVE_DECIMALS",
    "UserId",
    "ensure_utc_datetime",
    "from_raw_units",
    "to_raw_units",
]
