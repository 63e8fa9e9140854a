from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, cast

import requests

from tradebot.contexts.execution.application.ports import (
    MalformedQuoteError,
    NoLiquidityError,
    QuoteServiceUnavailableError,
    SwapQuoteSource,
)
from tradebot.contexts.execution.domain.entities import SwapQuote
from tradebot.shared_kernel.primitives import EvmAddress

log = logging.getLogger(__name__)

_API_VERSION = "v2"


@dataclass(frozen=True, slots=True)
class ZeroXSwapQuoteClientConfig:
    """
    ZeroXSwapQuoteClientConfig — runtime settings for the 0x allowance-holder quote client.

    Related:
      - src/tradebot/contexts/execution/adapters/outbound/config/trade_execution_runtime_config.py
      - apps/api/wiring/modules/tradebot.py
      - configs/dev/tradebot.yaml
    """

    quote_url: str
    api_key: str | None
    chain_id: int
    timeout_s: float

    def __post_init__(self) -> None:
        """
        Validate 0x client config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            API key is optional; unauthenticated requests are rate limited by 0x.
        Raises:
            ValueError: If URL, chain id, or timeout is invalid.
        Side Effects:
            Normalizes blank API key to `None`.
        """
        normalized_url = self.quote_url.strip()
        if not normalized_url.startswith(("https://", "http://")):
            raise ValueError(
                "ZeroXSwapQuoteClientConfig.quote_url must start with http:// or https://"
            )
        if self.chain_id <= 0:
            raise ValueError("ZeroXSwapQuoteClientConfig.chain_id must be > 0")
        if self.timeout_s <= 0:
            raise ValueError("ZeroXSwapQuoteClientConfig.timeout_s must be > 0")
        normalized_key = self.api_key.strip() if self.api_key is not None else ""
        object.__setattr__(self, "quote_url", normalized_url)
        object.__setattr__(self, "api_key", normalized_key or None)

    def __repr__(self) -> str:
        return (
            "ZeroXSwapQuoteClientConfig("
            f"quote_url={self.quote_url!r}, api_key=<redacted>, "
            f"chain_id={self.chain_id}, timeout_s={self.timeout_s})"
        )


class ZeroXHttpResponse(Protocol):
    """
    ZeroXHttpResponse — minimal HTTP response contract used by the 0x client.
    """

    status_code: int

    def json(self) -> Any:
        ...


class ZeroXHttpSession(Protocol):
    """
    ZeroXHttpSession — minimal HTTP session contract for 0x client testability.
    """

    def get(
        self,
        url: str,
        *,
        params: Mapping[str, str],
        headers: Mapping[str, str],
        timeout: float,
    ) -> ZeroXHttpResponse:
        ...


class ZeroXSwapQuoteClient(SwapQuoteSource):
    """
    ZeroXSwapQuoteClient — 0x Swap API v2 quote adapter normalizing both response shapes.

    Newer responses nest the executable call under `transaction{to,data,value}`; older ones
    flatten `to/data/value` at top level. Both map to one `SwapQuote`.

    Related:
      - src/tradebot/contexts/execution/application/ports/swap_quote_source.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - tests/unit/contexts/execution/adapters/test_zerox_swap_quote_client.py
    """

    def __init__(
        self,
        *,
        config: ZeroXSwapQuoteClientConfig,
        session: ZeroXHttpSession | None = None,
    ) -> None:
        """
        Initialize 0x client dependencies.

        Args:
            config: Validated client config.
            session: Optional injected HTTP session for tests.
        Returns:
            None.
        Assumptions:
            Session is safe to share across request threads.
        Raises:
            ValueError: If config is missing.
        Side Effects:
            Creates `requests.Session` when no custom session is injected.
        """
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("ZeroXSwapQuoteClient requires config")
        self._config = config
        self._session = (
            session
            if session is not None
            else cast(ZeroXHttpSession, requests.Session())
        )

    def fetch_quote(
        self,
        *,
        sell_token: str,
        buy_token: str,
        sell_amount_raw: int,
        taker: str,
    ) -> SwapQuote:
        """
        Request one executable quote.

        Args:
            sell_token: Token address or native sentinel.
            buy_token: Token address or native sentinel.
            sell_amount_raw: Positive smallest-unit amount.
            taker: Address that will submit the transaction.
        Returns:
            SwapQuote: Normalized quote.
        Assumptions:
            No retry is performed here.
        Raises:
            QuoteServiceUnavailableError: On transport failure or non-200 status.
            NoLiquidityError: If `liquidityAvailable` is not true.
            MalformedQuoteError: If body is not JSON or lacks an executable transaction.
        Side Effects:
            One outbound HTTP request.
        """
        if sell_amount_raw <= 0:
            raise ValueError("ZeroXSwapQuoteClient.sell_amount_raw must be > 0")
        params = {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellAmount": str(sell_amount_raw),
            "taker": taker,
            "chainId": str(self._config.chain_id),
        }
        headers = {"0x-version": _API_VERSION}
        if self._config.api_key is not None:
            headers["0x-api-key"] = self._config.api_key

        log.debug(
            "zerox quote request sell_token=%s buy_token=%s sell_amount=%s",
            sell_token,
            buy_token,
            sell_amount_raw,
        )
        try:
            response = self._session.get(
                self._config.quote_url,
                params=params,
                headers=headers,
                timeout=self._config.timeout_s,
            )
        except requests.RequestException as error:
            raise QuoteServiceUnavailableError(
                message=f"0x quote request failed: {error}",
            ) from error

        if response.status_code != 200:
            log.warning("zerox quote failed status_code=%s", response.status_code)
            raise QuoteServiceUnavailableError(
                message=f"0x quote error status_code={response.status_code}",
            )
        try:
            payload = response.json()
        except ValueError as error:
            raise MalformedQuoteError(message="0x quote body is not valid JSON") from error
        if not isinstance(payload, Mapping):
            raise MalformedQuoteError(message="0x quote body must be JSON object")

        if payload.get("liquidityAvailable") is not True:
            log.warning(
                "zerox quote reports no liquidity sell_token=%s buy_token=%s",
                sell_token,
                buy_token,
            )
            raise NoLiquidityError()
        return _normalize_quote(payload=payload)


def _normalize_quote(*, payload: Mapping[str, Any]) -> SwapQuote:
    """
    Map nested or flattened 0x payload into `SwapQuote`.

    Args:
        payload: Decoded JSON object.
    Returns:
        SwapQuote: Normalized quote.
    Assumptions:
        Nested `transaction` wins over flattened fields when both are present.
    Raises:
        MalformedQuoteError: If `to` is missing or a numeric field is malformed.
    Side Effects:
        None.
    """
    transaction = payload.get("transaction")
    source: Mapping[str, Any] = transaction if isinstance(transaction, Mapping) else payload
    raw_to = source.get("to")
    if not raw_to:
        raise MalformedQuoteError(message="Invalid quote response: missing transaction data")

    try:
        return SwapQuote(
            to=EvmAddress(str(raw_to)),
            data=str(source.get("data") or "0x"),
            value=_parse_int(source.get("value"), default=0),
            buy_amount=_parse_int(payload.get("buyAmount"), default=0),
            sell_amount=_parse_optional_int(payload.get("sellAmount")),
            allowance_target=_resolve_allowance_target(payload=payload),
            liquidity_available=True,
        )
    except (TypeError, ValueError) as error:
        raise MalformedQuoteError(message=f"0x quote has malformed field: {error}") from error


def _resolve_allowance_target(*, payload: Mapping[str, Any]) -> EvmAddress | None:
    """
    Read ERC-20 spender from `allowanceTarget` or `issues.allowance.spender`.

    Args:
        payload: Decoded JSON object.
    Returns:
        EvmAddress | None: Spender or `None` when no approval is needed.
    Assumptions:
        Native-asset sells carry no spender.
    Raises:
        ValueError: If spender is present but malformed.
    Side Effects:
        None.
    """
    raw_target = payload.get("allowanceTarget")
    if not raw_target:
        issues = payload.get("issues")
        allowance = issues.get("allowance") if isinstance(issues, Mapping) else None
        raw_target = allowance.get("spender") if isinstance(allowance, Mapping) else None
    if not raw_target:
        return None
    return EvmAddress(str(raw_target))


def _parse_int(raw_value: Any, *, default: int) -> int:
    if raw_value is None or raw_value == "":
        return default
    if isinstance(raw_value, bool):
        raise ValueError("boolean is not a valid integer amount")
    text = str(raw_value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def _parse_optional_int(raw_value: Any) -> int | None:
    if raw_value is None or raw_value == "":
        return None
    return _parse_int(raw_value, default=0)
