"""
Wallet custody API routes.
"""

from __future__ import annotations

from fastapi import APIRouter

from apps.api.common import parse_user_id
from apps.api.dto import (
    TokenBalancesResponse,
    WalletAddressResponse,
    WalletCreateRequest,
    WalletImportRequest,
    WalletResponse,
    build_token_balances_response,
    build_wallet_response,
)
from tradebot.contexts.custody.application.use_cases import (
    EnsureUserWalletUseCase,
    GetWalletAddressUseCase,
    ImportUserWalletUseCase,
    ListTokenBalancesUseCase,
    WalletNotFoundError,
)


def build_wallets_router(
    *,
    ensure_wallet: EnsureUserWalletUseCase,
    import_wallet: ImportUserWalletUseCase,
    get_wallet_address: GetWalletAddressUseCase,
    list_token_balances: ListTokenBalancesUseCase,
) -> APIRouter:
    """
    Build wallet router exposing create/import/address/balances endpoints.

    Related:
      - apps/api/dto/wallets.py
      - apps/api/wiring/modules/tradebot.py
      - src/tradebot/contexts/custody/application/use_cases/ensure_user_wallet.py

    Args:
        ensure_wallet: First-contact wallet use-case.
        import_wallet: Private-key import use-case.
        get_wallet_address: Address lookup use-case.
        list_token_balances: On-chain balance listing use-case.
    Returns:
        APIRouter: Configured wallets router.
    Assumptions:
        Caller authentication happens in front of this service (bot process boundary).
    Raises:
        ValueError: If one required dependency is missing.
    Side Effects:
        None.
    """
    if ensure_wallet is None:  # type: ignore[truthy-bool]
        raise ValueError("build_wallets_router requires ensure_wallet")
    if import_wallet is None:  # type: ignore[truthy-bool]
        raise ValueError("build_wallets_router requires import_wallet")
    if get_wallet_address is None:  # type: ignore[truthy-bool]
        raise ValueError("build_wallets_router requires get_wallet_address")
    if list_token_balances is None:  # type: ignore[truthy-bool]
        raise ValueError("build_wallets_router requires list_token_balances")

    router = APIRouter(tags=["wallets"])

    @router.post("/users/{user_id}/wallet", response_model=WalletResponse)
    def post_wallet(
        user_id: str,
        request: WalletCreateRequest | None = None,
    ) -> WalletResponse:
        """
        Register user and create a wallet when none exists.

        Args:
            user_id: Front-end user identifier.
            request: Optional body carrying the front-end username.
        Returns:
            WalletResponse: Wallet address and whether it was created now.
        Assumptions:
            Endpoint is idempotent.
        Raises:
            TradeBotError: Classified validation or storage errors.
        Side Effects:
            May write user and wallet rows.
        """
        username = request.username if request is not None else None
        ensured = ensure_wallet.ensure(user_id=parse_user_id(user_id), username=username)
        return build_wallet_response(wallet=ensured)

    @router.put("/users/{user_id}/wallet", response_model=WalletAddressResponse)
    def put_wallet(user_id: str, request: WalletImportRequest) -> WalletAddressResponse:
        address = import_wallet.import_private_key(
            user_id=parse_user_id(user_id),
            private_key_hex=request.private_key.get_secret_value(),
        )
        return WalletAddressResponse(address=str(address))

    @router.get("/users/{user_id}/wallet", response_model=WalletAddressResponse)
    def get_wallet(user_id: str) -> WalletAddressResponse:
        address = get_wallet_address.find_address(user_id=parse_user_id(user_id))
        if address is None:
            raise WalletNotFoundError()
        return WalletAddressResponse(address=str(address))

    @router.get("/users/{user_id}/wallet/balances", response_model=TokenBalancesResponse)
    def get_wallet_balances(user_id: str) -> TokenBalancesResponse:
        balances = list_token_balances.list_balances(user_id=parse_user_id(user_id))
        return build_token_balances_response(balances=balances)

    return router
