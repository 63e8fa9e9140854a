from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, cast

import requests

from tradebot.contexts.custody.application.ports import (
    RawTokenBalance,
    TokenBalanceMetadata,
    TokenBalanceSource,
    TokenBalanceSourceError,
)
from tradebot.shared_kernel.primitives import EvmAddress

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AlchemyTokenBalanceSourceConfig:
    """
    AlchemyTokenBalanceSourceConfig — runtime settings for Alchemy JSON-RPC balance adapter.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/config/trade_execution_runtime_config.py
      - apps/api/wiring/modules/tradebot.py
      - configs/dev/tradebot.yaml
    """

    rpc_url: str
    timeout_s: float

    def __post_init__(self) -> None:
        """
        Validate Alchemy adapter config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            RPC URL embeds the API key and comes from environment.
        Raises:
            ValueError: If URL is blank or timeout is not positive.
        Side Effects:
            None.
        """
        normalized_url = self.rpc_url.strip()
        if not normalized_url:
            raise ValueError("AlchemyTokenBalanceSourceConfig.rpc_url must be non-empty")
        if not normalized_url.startswith(("https://", "http://")):
            raise ValueError(
                "AlchemyTokenBalanceSourceConfig.rpc_url must start with http:// or https://"
            )
        if self.timeout_s <= 0:
            raise ValueError("AlchemyTokenBalanceSourceConfig.timeout_s must be > 0")
        object.__setattr__(self, "rpc_url", normalized_url)


class AlchemyHttpResponse(Protocol):
    """
    AlchemyHttpResponse — minimal HTTP response contract used by Alchemy adapter.
    """

    status_code: int

    def json(self) -> Any:
        ...


class AlchemyHttpSession(Protocol):
    """
    AlchemyHttpSession — minimal HTTP session contract for Alchemy adapter testability.
    """

    def post(
        self,
        *,
        url: str,
        json: Mapping[str, Any],
        timeout: float,
    ) -> AlchemyHttpResponse:
        ...


class AlchemyTokenBalanceSource(TokenBalanceSource):
    """
    AlchemyTokenBalanceSource — ERC-20 balances via `alchemy_getTokenBalances` and metadata.

    Related:
      - src/tradebot/contexts/custody/application/ports/token_balance_source.py
      - src/tradebot/contexts/custody/application/use_cases/list_token_balances.py
      - tests/unit/contexts/custody/adapters/test_alchemy_token_balance_source.py
    """

    def __init__(
        self,
        *,
        config: AlchemyTokenBalanceSourceConfig,
        session: AlchemyHttpSession | None = None,
    ) -> None:
        """
        Initialize Alchemy adapter dependencies.

        Args:
            config: Validated adapter config.
            session: Optional injected HTTP session for tests.
        Returns:
            None.
        Assumptions:
            `requests.Session` is shared by metadata worker threads.
        Raises:
            ValueError: If config is missing.
        Side Effects:
            Creates `requests.Session` when no custom session is injected.
        """
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("AlchemyTokenBalanceSource requires config")
        self._config = config
        self._session = (
            session
            if session is not None
            else cast(AlchemyHttpSession, requests.Session())
        )

    def list_balances(self, *, owner: EvmAddress) -> tuple[RawTokenBalance, ...]:
        """
        Call `alchemy_getTokenBalances` for owner.

        Args:
            owner: Wallet address.
        Returns:
            tuple[RawTokenBalance, ...]: Balances in response order.
        Assumptions:
            Balances are hex quantity strings.
        Raises:
            TokenBalanceSourceError: If request fails or payload is malformed.
        Side Effects:
            One outbound HTTP request.
        """
        result = self._call(method="alchemy_getTokenBalances", params=[str(owner)])
        raw_items = result.get("tokenBalances") if isinstance(result, Mapping) else None
        if not isinstance(raw_items, list):
            raise TokenBalanceSourceError("alchemy_getTokenBalances returned no tokenBalances")

        balances: list[RawTokenBalance] = []
        for item in raw_items:
            try:
                balances.append(
                    RawTokenBalance(
                        contract_address=EvmAddress(str(item["contractAddress"])),
                        raw_balance=_parse_quantity(item.get("tokenBalance")),
                    )
                )
            except (KeyError, TypeError, ValueError):
                log.warning("alchemy token balance entry skipped entry=%s", item)
        return tuple(balances)

    def fetch_metadata(self, *, contract_address: EvmAddress) -> TokenBalanceMetadata:
        """
        Call `alchemy_getTokenMetadata` for one contract.

        Args:
            contract_address: ERC-20 contract.
        Returns:
            TokenBalanceMetadata: Name, symbol, and optional decimals.
        Assumptions:
            Missing name/symbol are mapped to empty strings.
        Raises:
            TokenBalanceSourceError: If request fails or payload is malformed.
        Side Effects:
            One outbound HTTP request.
        """
        result = self._call(method="alchemy_getTokenMetadata", params=[str(contract_address)])
        if not isinstance(result, Mapping):
            raise TokenBalanceSourceError("alchemy_getTokenMetadata returned non-object result")
        raw_decimals = result.get("decimals")
        return TokenBalanceMetadata(
            name=str(result.get("name") or ""),
            symbol=str(result.get("symbol") or ""),
            decimals=int(raw_decimals) if isinstance(raw_decimals, int) else None,
        )

    def _call(self, *, method: str, params: list[Any]) -> Any:
        """
        Execute one JSON-RPC call and return its `result` member.

        Args:
            method: JSON-RPC method name.
            params: Positional params.
        Returns:
            Any: Decoded `result`.
        Assumptions:
            Alchemy answers JSON-RPC errors with HTTP 200 and `error` member.
        Raises:
            TokenBalanceSourceError: On transport, status, JSON, or JSON-RPC failure.
        Side Effects:
            One outbound HTTP request.
        """
        try:
            response = self._session.post(
                url=self._config.rpc_url,
                json={"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
                timeout=self._config.timeout_s,
            )
        except requests.RequestException as error:
            raise TokenBalanceSourceError(f"{method} request failed: {error}") from error

        if response.status_code != 200:
            raise TokenBalanceSourceError(f"{method} failed status_code={response.status_code}")
        try:
            payload = response.json()
        except ValueError as error:
            raise TokenBalanceSourceError(f"{method} returned invalid JSON") from error
        if not isinstance(payload, Mapping):
            raise TokenBalanceSourceError(f"{method} returned non-object payload")

        rpc_error = payload.get("error")
        if rpc_error is not None:
            message = rpc_error.get("message") if isinstance(rpc_error, Mapping) else rpc_error
            raise TokenBalanceSourceError(f"{method} error: {message}")
        return payload.get("result")


def _parse_quantity(raw_value: Any) -> int:
    """
    Parse JSON-RPC hex quantity (`0x...`) or decimal string into int.

    Args:
        raw_value: Raw quantity.
    Returns:
        int: Parsed non-negative integer; `None` maps to `0`.
    Assumptions:
        None.
    Raises:
        ValueError: If value is not a valid quantity.
    Side Effects:
        None.
    """
    if raw_value is None:
        return 0
    text = str(raw_value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16) if len(text) > 2 else 0
    return int(text)
