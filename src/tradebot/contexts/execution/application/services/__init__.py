from .allowance_manager import AllowanceApprovalError, AllowanceManager
from .per_user_trade_lock import PerUserTradeLock, TradeInProgressError
from .trade_execution_hooks import TradeExecutionHooks

__all__ = [
    "AllowanceApprovalError",
    "AllowanceManager",
    "PerUserTradeLock",
    "TradeExecutionHooks",
    "TradeInProgressError",
]
