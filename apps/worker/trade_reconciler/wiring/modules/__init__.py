from .trade_reconciler import (
    TradeReconcilerApp,
    TradeReconcilerMetrics,
    build_trade_reconciler_app,
)

__all__ = [
    "TradeReconcilerApp",
    "TradeReconcilerMetrics",
    "build_trade_reconciler_app",
]
