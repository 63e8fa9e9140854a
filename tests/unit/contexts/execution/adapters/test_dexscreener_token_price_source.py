from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
import requests

from tradebot.contexts.execution.adapters.outbound.clients.dexscreener import (
    DexScreenerTokenPriceSource,
    DexScreenerTokenPriceSourceConfig,
)
from tradebot.shared_kernel.primitives import EvmAddress

_TOKEN = EvmAddress("0x4ed4e862860bed51a9570b96d89af5e1b0efefed")


class _FakeResponse:
    def __init__(self, *, status_code: int, payload: Any = None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class _FakeSession:
    def __init__(
        self,
        *,
        response: _FakeResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        self._response = response
        self._error = error
        self.urls: list[str] = []

    def get(self, url: str, *, timeout: float) -> _FakeResponse:
        _ = timeout
        self.urls.append(url)
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _source(session: _FakeSession) -> DexScreenerTokenPriceSource:
    return DexScreenerTokenPriceSource(
        config=DexScreenerTokenPriceSourceConfig(
            api_base_url="https://api.dexscreener.com/latest/dex/",
            timeout_s=5.0,
        ),
        session=session,
    )


def test_dexscreener_returns_first_pair_price() -> None:
    """
    Verify price comes from `pairs[0].priceUsd` and URL targets the token endpoint.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Trailing slash in base URL is normalized away.
    Raises:
        AssertionError: If URL or parsed price differs.
    Side Effects:
        None.
    """
    session = _FakeSession(
        response=_FakeResponse(
            status_code=200,
            payload={"pairs": [{"priceUsd": "0.01234"}, {"priceUsd": "9.99"}]},
        )
    )

    price = _source(session).find_price_usd(token_address=_TOKEN)

    assert price == Decimal("0.01234")
    assert session.urls == [f"https://api.dexscreener.com/latest/dex/tokens/{_TOKEN}"]


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(status_code=404, payload={}),
        _FakeResponse(status_code=200, invalid_json=True),
        _FakeResponse(status_code=200, payload={"pairs": None}),
        _FakeResponse(status_code=200, payload={"pairs": []}),
        _FakeResponse(status_code=200, payload={"pairs": [{"priceUsd": "n/a"}]}),
        _FakeResponse(status_code=200, payload={"pairs": [{"priceUsd": "-1"}]}),
        _FakeResponse(status_code=200, payload={"pairs": [{}]}),
    ],
)
def test_dexscreener_maps_unusable_responses_to_none(response: _FakeResponse) -> None:
    assert _source(_FakeSession(response=response)).find_price_usd(token_address=_TOKEN) is None


def test_dexscreener_maps_transport_error_to_none() -> None:
    session = _FakeSession(error=requests.Timeout("read timed out"))

    assert _source(session).find_price_usd(token_address=_TOKEN) is None
