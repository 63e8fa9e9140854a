from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.api.common import register_api_error_handlers
from apps.api.routes import build_wallets_router
from tradebot.contexts.custody.adapters.outbound.persistence.in_memory import (
    InMemoryWalletRepository,
)
from tradebot.contexts.custody.adapters.outbound.security import (
    AesGcmPrivateKeyVault,
    EthAccountFactory,
)
from tradebot.contexts.custody.application.ports import (
    RawTokenBalance,
    TokenBalanceMetadata,
    TokenBalanceSourceError,
)
from tradebot.contexts.custody.application.use_cases import (
    EnsureUserWalletUseCase,
    GetWalletAddressUseCase,
    ImportUserWalletUseCase,
    ListTokenBalancesUseCase,
)
from tradebot.shared_kernel.primitives import EvmAddress

_KEY_B64 = "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY="
_KNOWN_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
_KNOWN_ADDRESS = "0x2c7536e3605d9c16a7a3d7b1898e529396a65c23"
_USDC = EvmAddress("0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")


class _FixedClock:
    def now(self) -> datetime:
        return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class _BalanceSourceStub:
    """
    Balance indexer stub with one USDC balance or a scripted failure.
    """

    def __init__(self, *, fail: bool = False) -> None:
        self._fail = fail

    def list_balances(self, *, owner: EvmAddress) -> tuple[RawTokenBalance, ...]:
        _ = owner
        if self._fail:
            raise TokenBalanceSourceError("alchemy responded with 503")
        return (RawTokenBalance(contract_address=_USDC, raw_balance=12_500_000),)

    def fetch_metadata(self, *, contract_address: EvmAddress) -> TokenBalanceMetadata:
        _ = contract_address
        return TokenBalanceMetadata(name="USD Coin", symbol="USDC", decimals=6)


def _client(*, balances_fail: bool = False) -> TestClient:
    """
    Build API client with real custody use-cases over in-memory storage.

    Args:
        balances_fail: Whether balance indexer should fail.
    Returns:
        TestClient: Configured test client.
    Assumptions:
        Vault key is a fixed 32-byte test key.
    Raises:
        ValueError: If wiring dependencies are invalid.
    Side Effects:
        None.
    """
    repository = InMemoryWalletRepository()
    vault = AesGcmPrivateKeyVault(key_b64=_KEY_B64)
    account_factory = EthAccountFactory()
    clock = _FixedClock()
    app = FastAPI()
    register_api_error_handlers(app=app)
    app.include_router(
        build_wallets_router(
            ensure_wallet=EnsureUserWalletUseCase(
                repository=repository,
                vault=vault,
                account_factory=account_factory,
                clock=clock,
            ),
            import_wallet=ImportUserWalletUseCase(
                repository=repository,
                vault=vault,
                account_factory=account_factory,
                clock=clock,
            ),
            get_wallet_address=GetWalletAddressUseCase(repository=repository),
            list_token_balances=ListTokenBalancesUseCase(
                repository=repository,
                balance_source=_BalanceSourceStub(fail=balances_fail),
                spam_filter=None,
            ),
        )
    )
    return TestClient(app)


def test_post_wallet_is_idempotent() -> None:
    """
    Verify first POST creates wallet and repeated POST returns the same address.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Wallet creation happens on first contact only.
    Raises:
        AssertionError: If address changes or created flag is wrong.
    Side Effects:
        None.
    """
    client = _client()

    first = client.post("/users/100/wallet", json={"username": "alice"})
    second = client.post("/users/100/wallet")

    assert first.status_code == 200
    assert first.json()["created"] is True
    assert second.json() == {"address": first.json()["address"], "created": False}
    assert client.get("/users/100/wallet").json() == {"address": first.json()["address"]}


def test_put_wallet_imports_key_and_never_echoes_it() -> None:
    client = _client()

    response = client.put("/users/100/wallet", json={"private_key": _KNOWN_KEY})

    assert response.status_code == 200
    assert response.json() == {"address": _KNOWN_ADDRESS}
    assert _KNOWN_KEY[2:] not in response.text
    assert client.get("/users/100/wallet").json() == {"address": _KNOWN_ADDRESS}


def test_put_wallet_rejects_malformed_key_without_echoing_input() -> None:
    client = _client()

    response = client.put("/users/100/wallet", json={"private_key": "0xnot-a-key-material"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "invalid_private_key"
    assert "not-a-key-material" not in response.text


def test_get_wallet_returns_404_for_unknown_user() -> None:
    response = _client().get("/users/404/wallet")

    assert response.status_code == 404
    assert response.json() == {
        "error": {
            "code": "wallet_not_found",
            "category": "wallet",
            "message": "Wallet not found. Please use /start to create a wallet.",
        }
    }


def test_get_balances_renders_human_amounts() -> None:
    client = _client()
    client.put("/users/100/wallet", json={"private_key": _KNOWN_KEY})

    response = client.get("/users/100/wallet/balances")

    assert response.status_code == 200
    assert response.json() == {
        "items": [
            {
                "contract_address": str(_USDC),
                "symbol": "USDC",
                "name": "USD Coin",
                "decimals": 6,
                "balance": "12.5",
            }
        ]
    }


def test_get_balances_maps_indexer_failure_to_503() -> None:
    client = _client(balances_fail=True)
    client.post("/users/100/wallet")

    response = client.get("/users/100/wallet/balances")

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "token_balances_unavailable"
