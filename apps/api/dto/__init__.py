from .ledger import (
    HoldingResponse,
    HoldingsResponse,
    TradeRecordResponse,
    TransactionsResponse,
    build_holdings_response,
    build_transactions_response,
)
from .trades import (
    BuyTradeResponse,
    SellTradeResponse,
    TradeRequest,
    build_buy_trade_response,
    build_sell_trade_response,
)
from .wallets import (
    TokenBalanceResponse,
    TokenBalancesResponse,
    WalletCreateRequest,
    WalletImportRequest,
    WalletAddressResponse,
    WalletResponse,
    build_token_balances_response,
    build_wallet_response,
)

__all__ = [
    "BuyTradeResponse",
    "HoldingResponse",
    "HoldingsResponse",
    "SellTradeResponse",
    "TokenBalanceResponse",
    "TokenBalancesResponse",
    "TradeRecordResponse",
    "TradeRequest",
    "TransactionsResponse",
    "WalletCreateRequest",
    "WalletImportRequest",
    "WalletAddressResponse",
    "WalletResponse",
    "build_buy_trade_response",
    "build_holdings_response",
    "build_sell_trade_response",
    "build_token_balances_response",
    "build_transactions_response",
    "build_wallet_response",
]
