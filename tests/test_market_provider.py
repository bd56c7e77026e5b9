from __future__ import annotations

import asyncio
import hashlib
import hmac
from typing import Any, Callable

import httpx
import pytest

from daily_pnl_dashboard import ProviderConfig
from daily_pnl_dashboard.market import BinanceRestProvider, BinanceSpotSigner, ProviderError

BASES = ["https://api1.example.test", "https://api2.example.test"]


def _run(handler: Callable[[httpx.Request], httpx.Response], call: Callable[[BinanceRestProvider], Any], signer=None):
    async def scenario() -> Any:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = BinanceRestProvider(
                ProviderConfig(base_urls=BASES, api_key_env="PNL_TEST_NO_KEY", api_secret_env="PNL_TEST_NO_SECRET"),
                client=client,
                signer=signer,
            )
            return await call(provider)

    return asyncio.run(scenario())


def test_signer_appends_deterministic_signature() -> None:
    signer = BinanceSpotSigner(api_key="key", api_secret="secret", recv_window_ms=5000)
    query = signer.signed_query({"symbol": "BTCUSDT", "startTime": 1000}, timestamp_ms=2000)
    payload = "symbol=BTCUSDT&startTime=1000&recvWindow=5000&timestamp=2000"
    expected = hmac.new(b"secret", payload.encode("utf-8"), hashlib.sha256).hexdigest()
    assert query == f"{payload}&signature={expected}"
    assert signer.headers() == {"X-MBX-APIKEY": "key"}


def test_restricted_host_falls_through_to_next_base() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "api1.example.test":
            return httpx.Response(451, json={"code": 0, "msg": "Service unavailable from a restricted location"})
        return httpx.Response(200, json={"symbol": "BTCUSDT", "price": "50123.45"})

    price = _run(handler, lambda p: p.fetch_price("BTCUSDT"))
    assert price == 50123.45
    assert hosts == ["api1.example.test", "api2.example.test"]


def test_all_bases_failing_raises_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(ProviderError):
        _run(handler, lambda p: p.fetch_ticker_24h("BTCUSDT"))


def test_signed_fill_request_carries_key_and_signature() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": 1, "orderId": 9, "price": "1", "qty": "1", "isBuyer": True}])

    signer = BinanceSpotSigner(api_key="key", api_secret="secret")
    rows = _run(handler, lambda p: p.fetch_fills("XRPUSDT", 1_767_225_600_000), signer=signer)
    assert rows == [{"id": 1, "orderId": 9, "price": "1", "qty": "1", "isBuyer": True}]
    request = seen[0]
    assert request.url.path == "/api/v3/myTrades"
    assert request.headers["X-MBX-APIKEY"] == "key"
    assert request.url.params["symbol"] == "XRPUSDT"
    assert request.url.params["startTime"] == "1767225600000"
    assert "signature" in request.url.params


def test_no_access_code_means_no_fills() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"code": -2015, "msg": "Invalid API-key, IP, or permissions for action."})

    signer = BinanceSpotSigner(api_key="key", api_secret="secret")
    assert _run(handler, lambda p: p.fetch_fills("XRPUSDT", 0), signer=signer) == []


def test_signed_call_without_credentials_fails(monkeypatch) -> None:
    monkeypatch.delenv("PNL_TEST_NO_KEY", raising=False)
    monkeypatch.delenv("PNL_TEST_NO_SECRET", raising=False)

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ProviderError):
        _run(handler, lambda p: p.fetch_balances())


def test_balances_and_batch_prices_are_parsed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v3/account":
            return httpx.Response(
                200,
                json={"balances": [{"asset": "BTC", "free": "0.5", "locked": "0.1"}, {"asset": "USDT", "free": "10", "locked": "0"}]},
            )
        assert request.url.params["symbols"] == '["BTCUSDT","ETHUSDT"]'
        return httpx.Response(200, json=[{"symbol": "BTCUSDT", "price": "50000"}, {"symbol": "ETHUSDT", "price": "3000"}])

    signer = BinanceSpotSigner(api_key="key", api_secret="secret")

    async def both(provider: BinanceRestProvider) -> tuple[Any, Any]:
        return await provider.fetch_balances(), await provider.fetch_prices(["BTCUSDT", "ETHUSDT"])

    balances, prices = _run(handler, both, signer=signer)
    assert [(b.asset, b.total) for b in balances] == [("BTC", pytest.approx(0.6)), ("USDT", 10.0)]
    assert prices == {"BTCUSDT": 50000.0, "ETHUSDT": 3000.0}
