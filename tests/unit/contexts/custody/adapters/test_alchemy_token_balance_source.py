from __future__ import annotations

from typing import Any, Mapping

import pytest
import requests

from tradebot.contexts.custody.adapters.outbound.clients.alchemy import (
    AlchemyTokenBalanceSource,
    AlchemyTokenBalanceSourceConfig,
)
from tradebot.contexts.custody.application.ports import TokenBalanceSourceError
from tradebot.shared_kernel.primitives import EvmAddress

_OWNER = EvmAddress("0x" + "11" * 20)
_USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"


class _FakeResponse:
    """
    Minimal response object with fixed status and JSON payload.
    """

    def __init__(self, *, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _RecordingSession:
    """
    Session stub replaying queued responses and recording JSON-RPC bodies.
    """

    def __init__(self, *responses: _FakeResponse | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[Mapping[str, Any]] = []

    def post(self, *, url: str, json: Mapping[str, Any], timeout: float) -> _FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _source(session: _RecordingSession) -> AlchemyTokenBalanceSource:
    return AlchemyTokenBalanceSource(
        config=AlchemyTokenBalanceSourceConfig(
            rpc_url="https://base-mainnet.g.alchemy.com/v2/secret",
            timeout_s=7.0,
        ),
        session=session,
    )


def test_alchemy_list_balances_parses_hex_quantities_and_skips_bad_entries() -> None:
    """
    Verify balance listing maps hex quantities and drops malformed entries.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Alchemy returns `tokenBalances` list inside JSON-RPC `result`.
    Raises:
        AssertionError: If parsing or request shape is wrong.
    Side Effects:
        None.
    """
    session = _RecordingSession(
        _FakeResponse(
            status_code=200,
            payload={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "address": str(_OWNER),
                    "tokenBalances": [
                        {"contractAddress": _USDC, "tokenBalance": "0x0f4240"},
                        {"contractAddress": "not-an-address", "tokenBalance": "0x01"},
                        {"contractAddress": "0x" + "22" * 20, "tokenBalance": "0x"},
                    ],
                },
            },
        )
    )

    balances = _source(session).list_balances(owner=_OWNER)

    assert [(str(item.contract_address), item.raw_balance) for item in balances] == [
        (_USDC, 1_000_000),
        ("0x" + "22" * 20, 0),
    ]
    assert session.calls[0]["json"] == {
        "jsonrpc": "2.0",
        "method": "alchemy_getTokenBalances",
        "params": [str(_OWNER)],
        "id": 1,
    }
    assert session.calls[0]["timeout"] == 7.0


def test_alchemy_fetch_metadata_maps_missing_fields() -> None:
    session = _RecordingSession(
        _FakeResponse(
            status_code=200,
            payload={"result": {"name": "USD Coin", "symbol": None, "decimals": 6}},
        )
    )

    metadata = _source(session).fetch_metadata(contract_address=EvmAddress(_USDC))

    assert metadata.name == "USD Coin"
    assert metadata.symbol == ""
    assert metadata.decimals == 6


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("boom"),
        _FakeResponse(status_code=429, payload={}),
        _FakeResponse(status_code=200, payload=ValueError("bad json")),
        _FakeResponse(status_code=200, payload={"error": {"code": -32602, "message": "bad"}}),
        _FakeResponse(status_code=200, payload={"result": {}}),
    ],
)
def test_alchemy_list_balances_maps_failures_to_source_error(
    response: _FakeResponse | Exception,
) -> None:
    """
    Verify transport, status, JSON, and JSON-RPC failures raise one adapter error type.

    Args:
        response: Failing response or transport exception.
    Returns:
        None.
    Assumptions:
        Use-case maps adapter error to retryable network error.
    Raises:
        AssertionError: If failure leaks raw exception type.
    Side Effects:
        None.
    """
    with pytest.raises(TokenBalanceSourceError):
        _source(_RecordingSession(response)).list_balances(owner=_OWNER)


def test_alchemy_config_rejects_non_http_url_and_bad_timeout() -> None:
    with pytest.raises(ValueError):
        AlchemyTokenBalanceSourceConfig(rpc_url="ws://node", timeout_s=1.0)
    with pytest.raises(ValueError):
        AlchemyTokenBalanceSourceConfig(rpc_url="https://node", timeout_s=0)
