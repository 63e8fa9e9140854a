from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class TradeExecutionHooks:
    """
    TradeExecutionHooks — optional callbacks for trade execution counters and latencies.

    Related:
      - apps/api/wiring/modules/tradebot.py
      - apps/worker/trade_reconciler/wiring/modules/trade_reconciler.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
    """

    on_trade_succeeded: Callable[[str], None] | None = None
    on_trade_failed: Callable[[str, str], None] | None = None
    on_trade_duration: Callable[[str, float], None] | None = None
    on_approval_sent: Callable[[], None] | None = None
    on_attempt_settled: Callable[[str], None] | None = None
