from __future__ import annotations

import re
from decimal import Decimal

_SUSPICIOUS_KEYWORDS = re.compile(
    r"(t\.me|claim|redeem|airdrop|bonus|reward|free|cpool|launch|drop|click|invite)",
    re.IGNORECASE,
)
_URL_LIKE = re.compile(
    r"(https?://|t\.ly|bit\.ly|tinyurl|discord\.gg|\.com|\.xyz|\.io|\.org)",
    re.IGNORECASE,
)
_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")
_MIN_SYMBOL_LENGTH = 2
_MAX_SYMBOL_LENGTH = 12
_MAX_NAME_LENGTH = 50


class TokenSpamFilter:
    """
    TokenSpamFilter — display-layer heuristic hiding airdropped scam tokens from balance lists.

    Heuristics only affect what is shown; they never block trading a token.

    Related:
      - src/tradebot/contexts/custody/application/use_cases/list_token_balances.py
      - tests/unit/contexts/custody/application/test_token_spam_filter.py
    """

    def is_suspicious(self, *, name: str, symbol: str, balance: Decimal) -> bool:
        """
        Return whether token metadata looks like spam.

        Args:
            name: Token name.
            symbol: Token symbol.
            balance: Human-unit balance.
        Returns:
            bool: `True` when any heuristic matches.
        Assumptions:
            Name and symbol come from an untrusted on-chain source.
        Raises:
            None.
        Side Effects:
            None.
        """
        combined = name + symbol
        if _SUSPICIOUS_KEYWORDS.search(combined) is not None:
            return True
        if _URL_LIKE.search(combined) is not None:
            return True
        if not _MIN_SYMBOL_LENGTH <= len(symbol) <= _MAX_SYMBOL_LENGTH:
            return True
        if len(name) > _MAX_NAME_LENGTH:
            return True
        if balance == 0:
            return True
        if _ZERO_WIDTH.search(combined) is not None:
            return True
        return not combined.isascii()
