from __future__ import annotations

import base64
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tradebot.contexts.custody.adapters.outbound.persistence.in_memory import (
    InMemoryWalletRepository,
)
from tradebot.contexts.custody.adapters.outbound.security import AesGcmPrivateKeyVault
from tradebot.contexts.custody.application.ports import (
    RawTokenBalance,
    TokenBalanceMetadata,
    TokenBalanceSourceError,
)
from tradebot.contexts.custody.application.services import TokenSpamFilter
from tradebot.contexts.custody.application.use_cases import (
    ListTokenBalancesUseCase,
    TokenBalancesUnavailableError,
    WalletNotFoundError,
)
from tradebot.contexts.custody.domain.entities import UserWallet
from tradebot.platform.errors import ErrorKind
from tradebot.shared_kernel.primitives import EvmAddress, UserId

_NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)
_OWNER = EvmAddress("0x2c7536e3605d9c16a7a3d7b1898e529396a65c23")
_USDC = EvmAddress("0x" + "01" * 20)
_SPAM = EvmAddress("0x" + "02" * 20)
_ZERO = EvmAddress("0x" + "03" * 20)
_BROKEN = EvmAddress("0x" + "04" * 20)
_NO_DECIMALS = EvmAddress("0x" + "05" * 20)


class _StaticBalanceSource:
    """
    Balance source stub with fixed balances and per-contract metadata.
    """

    def __init__(
        self,
        *,
        balances: tuple[RawTokenBalance, ...] | None,
        metadata: dict[EvmAddress, TokenBalanceMetadata],
    ) -> None:
        self._balances = balances
        self._metadata = metadata
        self.metadata_requests: list[EvmAddress] = []

    def list_balances(self, *, owner: EvmAddress) -> tuple[RawTokenBalance, ...]:
        _ = owner
        if self._balances is None:
            raise TokenBalanceSourceError("indexer down")
        return self._balances

    def fetch_metadata(self, *, contract_address: EvmAddress) -> TokenBalanceMetadata:
        self.metadata_requests.append(contract_address)
        if contract_address not in self._metadata:
            raise TokenBalanceSourceError("metadata unavailable")
        return self._metadata[contract_address]


def _repository_with_wallet() -> InMemoryWalletRepository:
    repository = InMemoryWalletRepository()
    vault = AesGcmPrivateKeyVault(key_b64=base64.b64encode(b"v" * 32).decode("ascii"))
    repository.create(
        wallet=UserWallet(
            user_id=UserId("77"),
            address=_OWNER,
            envelope=vault.encrypt(private_key_hex="0x" + "11" * 32),
            created_at=_NOW,
            updated_at=_NOW,
        )
    )
    return repository


def _balances() -> tuple[RawTokenBalance, ...]:
    return (
        RawTokenBalance(contract_address=_USDC, raw_balance=1_500_000),
        RawTokenBalance(contract_address=_SPAM, raw_balance=10**18),
        RawTokenBalance(contract_address=_ZERO, raw_balance=0),
        RawTokenBalance(contract_address=_BROKEN, raw_balance=5),
        RawTokenBalance(contract_address=_NO_DECIMALS, raw_balance=2 * 10**18),
    )


def _metadata() -> dict[EvmAddress, TokenBalanceMetadata]:
    return {
        _USDC: TokenBalanceMetadata(name="USD Coin", symbol="USDC", decimals=6),
        _SPAM: TokenBalanceMetadata(name="Claim airdrop at t.me", symbol="GIFT", decimals=18),
        _ZERO: TokenBalanceMetadata(name="Zero", symbol="ZERO", decimals=18),
        _NO_DECIMALS: TokenBalanceMetadata(name="Degen", symbol="DEGEN", decimals=None),
    }


def test_list_token_balances_skips_zero_spam_and_failed_metadata() -> None:
    """
    Verify display list keeps order and hides zero, spam, and metadata-less tokens.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Missing decimals default to 18.
    Raises:
        AssertionError: If filtering or conversion is broken.
    Side Effects:
        None.
    """
    source = _StaticBalanceSource(balances=_balances(), metadata=_metadata())
    use_case = ListTokenBalancesUseCase(
        repository=_repository_with_wallet(),
        balance_source=source,
        spam_filter=TokenSpamFilter(),
        max_workers=4,
    )

    views = use_case.list_balances(user_id=UserId("77"))

    assert [(view.symbol, view.balance, view.decimals) for view in views] == [
        ("USDC", Decimal("1.5"), 6),
        ("DEGEN", Decimal("2"), 18),
    ]
    assert _ZERO not in source.metadata_requests


def test_list_token_balances_without_spam_filter_shows_suspicious_tokens() -> None:
    use_case = ListTokenBalancesUseCase(
        repository=_repository_with_wallet(),
        balance_source=_StaticBalanceSource(balances=_balances(), metadata=_metadata()),
        spam_filter=None,
    )

    symbols = [view.symbol for view in use_case.list_balances(user_id=UserId("77"))]

    assert symbols == ["USDC", "GIFT", "DEGEN"]


def test_list_token_balances_maps_indexer_failure_to_retryable_error() -> None:
    use_case = ListTokenBalancesUseCase(
        repository=_repository_with_wallet(),
        balance_source=_StaticBalanceSource(balances=None, metadata={}),
        spam_filter=None,
    )

    with pytest.raises(TokenBalancesUnavailableError) as error_info:
        use_case.list_balances(user_id=UserId("77"))

    assert error_info.value.kind is ErrorKind.NETWORK
    assert error_info.value.is_retryable is True


def test_list_token_balances_requires_wallet() -> None:
    use_case = ListTokenBalancesUseCase(
        repository=InMemoryWalletRepository(),
        balance_source=_StaticBalanceSource(balances=(), metadata={}),
        spam_filter=None,
    )

    with pytest.raises(WalletNotFoundError):
        use_case.list_balances(user_id=UserId("77"))
