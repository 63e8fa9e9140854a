from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from tradebot.contexts.custody.application.ports import (
    RawTokenBalance,
    TokenBalanceSource,
    TokenBalanceSourceError,
    WalletRepository,
)
from tradebot.contexts.custody.application.services import TokenSpamFilter
from tradebot.contexts.custody.application.use_cases.custody_errors import (
    TokenBalancesUnavailableError,
    WalletNotFoundError,
)
from tradebot.contexts.custody.application.use_cases.custody_models import TokenBalanceView
from tradebot.shared_kernel.primitives import UserId, from_raw_units

log = logging.getLogger(__name__)

_DEFAULT_DECIMALS = 18
_UNKNOWN_SYMBOL = "UNKNOWN"


class ListTokenBalancesUseCase:
    """
    ListTokenBalancesUseCase — on-chain ERC-20 balances of user's wallet for display.

    Zero balances and tokens without usable metadata are skipped. When a spam filter is
    configured, tokens matching its heuristics are hidden as well.

    Related:
      - src/tradebot/contexts/custody/application/ports/token_balance_source.py
      - src/tradebot/contexts/custody/application/services/token_spam_filter.py
      - apps/api/routes/wallets.py
    """

    def __init__(
        self,
        *,
        repository: WalletRepository,
        balance_source: TokenBalanceSource,
        spam_filter: TokenSpamFilter | None,
        max_workers: int = 8,
    ) -> None:
        """
        Initialize use-case dependencies.

        Args:
            repository: Wallet storage port.
            balance_source: ERC-20 balance indexer port.
            spam_filter: Optional display heuristic; `None` disables filtering.
            max_workers: Upper bound of concurrent metadata requests.
        Returns:
            None.
        Assumptions:
            Balance source is thread-safe.
        Raises:
            ValueError: If dependencies are missing or `max_workers` is not positive.
        Side Effects:
            None.
        """
        if repository is None:  # type: ignore[truthy-bool]
            raise ValueError("ListTokenBalancesUseCase requires repository")
        if balance_source is None:  # type: ignore[truthy-bool]
            raise ValueError("ListTokenBalancesUseCase requires balance_source")
        if max_workers <= 0:
            raise ValueError("ListTokenBalancesUseCase.max_workers must be > 0")
        self._repository = repository
        self._balance_source = balance_source
        self._spam_filter = spam_filter
        self._max_workers = max_workers

    def list_balances(self, *, user_id: UserId) -> tuple[TokenBalanceView, ...]:
        """
        Return display-ready balances in indexer order.

        Args:
            user_id: Wallet owner.
        Returns:
            tuple[TokenBalanceView, ...]: Non-zero, non-hidden balances.
        Assumptions:
            Metadata failures affect only the failing token.
        Raises:
            WalletNotFoundError: If user has no wallet.
            TokenBalancesUnavailableError: If balance listing itself fails.
        Side Effects:
            Outbound HTTP calls to the balance indexer.
        """
        wallet = self._repository.find_by_user_id(user_id=user_id)
        if wallet is None:
            raise WalletNotFoundError()

        try:
            balances = self._balance_source.list_balances(owner=wallet.address)
        except TokenBalanceSourceError as error:
            raise TokenBalancesUnavailableError(message=str(error)) from error

        non_zero = [item for item in balances if item.raw_balance > 0]
        if not non_zero:
            return ()

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(non_zero))) as executor:
            views = list(executor.map(self._describe, non_zero))
        return tuple(view for view in views if view is not None)

    def _describe(self, balance: RawTokenBalance) -> TokenBalanceView | None:
        """
        Fetch metadata for one balance and apply display filters.

        Args:
            balance: Raw non-zero balance.
        Returns:
            TokenBalanceView | None: View or `None` when the token is skipped.
        Assumptions:
            None.
        Raises:
            None.
        Side Effects:
            One outbound HTTP call.
        """
        try:
            metadata = self._balance_source.fetch_metadata(
                contract_address=balance.contract_address
            )
        except TokenBalanceSourceError as error:
            log.warning(
                "custody token metadata unavailable contract=%s error=%s",
                balance.contract_address,
                error,
            )
            return None

        symbol = metadata.symbol.strip()
        if not symbol or symbol == _UNKNOWN_SYMBOL:
            return None
        decimals = metadata.decimals or _DEFAULT_DECIMALS
        try:
            human_balance = from_raw_units(raw_amount=balance.raw_balance, decimals=decimals)
        except ValueError:
            log.warning(
                "custody token decimals unsupported contract=%s decimals=%s",
                balance.contract_address,
                decimals,
            )
            return None

        if self._spam_filter is not None and self._spam_filter.is_suspicious(
            name=metadata.name,
            symbol=symbol,
            balance=human_balance,
        ):
            log.debug("custody token hidden by spam filter contract=%s", balance.contract_address)
            return None

        return TokenBalanceView(
            contract_address=balance.contract_address,
            symbol=symbol,
            name=metadata.name,
            decimals=decimals,
            balance=human_balance,
        )
