"""预言机数据归一化与 HTTP 客户端测试。"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest

from conftest import make_settings
from position_maker.clients.feeds import normalize_coincap_data, normalize_compound_data, resolve_normalizer
from position_maker.clients.oracle import OracleClient
from position_maker.errors import OracleFetchError


def test_coincap_prefers_rate_usd() -> None:
    payload = {"data": {"symbol": "BTC", "rateUsd": "41000.5", "priceUsd": "40000"}, "timestamp": 1700000000}
    reading = normalize_coincap_data(payload)
    assert reading.price == "41000.5"
    assert reading.symbol == "BTC"
    assert reading.timestamp == 1700000000


def test_coincap_falls_back_to_price_usd() -> None:
    reading = normalize_coincap_data({"data": {"symbol": "ETH", "priceUsd": "2000.1"}})
    assert reading.price == "2000.1"


def test_coincap_without_data_is_rejected() -> None:
    with pytest.raises(OracleFetchError):
        normalize_coincap_data({"error": "not found"})


def test_compound_rate_is_percent_with_two_places() -> None:
    reading = normalize_compound_data({"cToken": [{"supply_rate": {"value": "0.0123456"}}]})
    assert reading.price == Decimal("1.23")


def test_compound_without_ctoken_is_rejected() -> None:
    with pytest.raises(OracleFetchError):
        normalize_compound_data({"cToken": []})


def test_compound_non_numeric_rate_is_rejected() -> None:
    with pytest.raises(OracleFetchError):
        normalize_compound_data({"cToken": [{"supply_rate": {"value": "n/a"}}]})


def test_resolve_normalizer_by_host_and_override() -> None:
    assert resolve_normalizer("https://api.coincap.io/v2/rates/bitcoin") is normalize_coincap_data
    assert resolve_normalizer("https://api.compound.finance/api/v2/ctoken") is normalize_compound_data
    assert resolve_normalizer("https://feed.example.com/x", provider="coincap") is normalize_coincap_data
    with pytest.raises(OracleFetchError):
        resolve_normalizer("https://feed.example.com/x")


def _client(handler) -> OracleClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OracleClient(make_settings(), http=http)


def test_oracle_client_fetches_and_normalizes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "api.coincap.io"
        return httpx.Response(200, json={"data": {"symbol": "BTC", "rateUsd": "0.40"}, "timestamp": 1})

    async def _run():
        client = _client(handler)
        try:
            return await client.fetch("https://api.coincap.io/v2/rates/bitcoin")
        finally:
            await client.close()

    reading = asyncio.run(_run())
    assert reading.price == "0.40"


def test_oracle_client_raises_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    async def _run():
        client = _client(handler)
        try:
            await client.fetch("https://api.coincap.io/v2/rates/bitcoin")
        finally:
            await client.close()

    with pytest.raises(OracleFetchError):
        asyncio.run(_run())


def test_oracle_client_raises_on_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    async def _run():
        client = _client(handler)
        try:
            await client.fetch("https://api.coincap.io/v2/rates/bitcoin")
        finally:
            await client.close()

    with pytest.raises(OracleFetchError):
        asyncio.run(_run())
