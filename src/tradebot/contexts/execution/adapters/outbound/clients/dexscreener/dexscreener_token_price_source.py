from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, cast

import requests

from tradebot.contexts.execution.application.ports import TokenPriceSource
from tradebot.shared_kernel.primitives import EvmAddress

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DexScreenerTokenPriceSourceConfig:
    """
    DexScreenerTokenPriceSourceConfig — runtime settings for DexScreener price lookups.
    """

    api_base_url: str
    timeout_s: float

    def __post_init__(self) -> None:
        normalized_url = self.api_base_url.strip()
        if not normalized_url.startswith(("https://", "http://")):
            raise ValueError(
                "DexScreenerTokenPriceSourceConfig.api_base_url must start with "
                "http:// or https://"
            )
        if self.timeout_s <= 0:
            raise ValueError("DexScreenerTokenPriceSourceConfig.timeout_s must be > 0")
        object.__setattr__(self, "api_base_url", normalized_url.rstrip("/"))


class DexScreenerHttpResponse(Protocol):
    status_code: int

    def json(self) -> Any:
        ...


class DexScreenerHttpSession(Protocol):
    def get(self, url: str, *, timeout: float) -> DexScreenerHttpResponse:
        ...


class DexScreenerTokenPriceSource(TokenPriceSource):
    """
    DexScreenerTokenPriceSource — best-effort USD price from the first DexScreener pair.

    Every failure (transport, status, payload shape) is logged as a warning and mapped to
    `None`; price never blocks a trade.

    Related:
      - src/tradebot/contexts/execution/application/ports/token_price_source.py
      - src/tradebot/contexts/execution/application/use_cases/execute_trade.py
      - tests/unit/contexts/execution/adapters/test_dexscreener_token_price_source.py
    """

    def __init__(
        self,
        *,
        config: DexScreenerTokenPriceSourceConfig,
        session: DexScreenerHttpSession | None = None,
    ) -> None:
        if config is None:  # type: ignore[truthy-bool]
            raise ValueError("DexScreenerTokenPriceSource requires config")
        self._config = config
        self._session = (
            session
            if session is not None
            else cast(DexScreenerHttpSession, requests.Session())
        )

    def find_price_usd(self, *, token_address: EvmAddress) -> Decimal | None:
        """
        Return `pairs[0].priceUsd` for token or `None`.

        Args:
            token_address: ERC-20 contract.
        Returns:
            Decimal | None: Price or `None`.
        Assumptions:
            First pair is DexScreener's most liquid pair.
        Raises:
            None.
        Side Effects:
            One outbound HTTP request.
        """
        url = f"{self._config.api_base_url}/tokens/{token_address}"
        try:
            response = self._session.get(url, timeout=self._config.timeout_s)
            if response.status_code != 200:
                log.warning(
                    "dexscreener price lookup failed status_code=%s token=%s",
                    response.status_code,
                    token_address,
                )
                return None
            payload = response.json()
        except (requests.RequestException, ValueError) as error:
            log.warning("dexscreener price lookup failed token=%s error=%s", token_address, error)
            return None
        return _first_pair_price(payload=payload)


def _first_pair_price(*, payload: Any) -> Decimal | None:
    """
    Extract positive finite `priceUsd` of the first pair.

    Args:
        payload: Decoded JSON body.
    Returns:
        Decimal | None: Price or `None` when absent or malformed.
    Assumptions:
        DexScreener encodes prices as decimal strings.
    Raises:
        None.
    Side Effects:
        None.
    """
    if not isinstance(payload, dict):
        return None
    pairs = payload.get("pairs")
    if not isinstance(pairs, list) or not pairs or not isinstance(pairs[0], dict):
        return None
    raw_price = pairs[0].get("priceUsd")
    if raw_price is None or raw_price == "":
        return None
    try:
        price = Decimal(str(raw_price))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price
