"""Tests for finz.markets (ForexClient, CryptoClient)."""

from __future__ import annotations

from datetime import date

import httpx
import pytest
import respx

from finz.core.config import CryptoConfig, ForexConfig
from finz.core.exceptions import UpstreamError
from finz.markets import CryptoClient, ForexClient

FOREX_BASE = "https://api.frankfurter.app"
CRYPTO_URL = "https://api.coingecko.com/api/v3/simple/price"


def _rate(value, day="2024-01-10") -> httpx.Response:
    return httpx.Response(
        200, json={"amount": 1.0, "base": "USD", "date": day, "rates": {"KRW": value}}
    )


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture
def forex(http_client) -> ForexClient:
    return ForexClient(ForexConfig(), http_client)


@pytest.fixture
def crypto(http_client) -> CryptoClient:
    return CryptoClient(CryptoConfig(), http_client)


class TestForexSnapshot:
    @respx.mock
    async def test_latest_and_previous(self, forex):
        latest = respx.get(f"{FOREX_BASE}/latest").mock(return_value=_rate(1380.5))
        respx.get(f"{FOREX_BASE}/2024-01-09").mock(return_value=_rate(1375.25, "2024-01-09"))
        snapshot = await forex.get_snapshot()
        assert snapshot.rate == 1380.5
        assert snapshot.previous_rate == 1375.25
        assert snapshot.as_of == date(2024, 1, 10)
        params = latest.calls.last.request.url.params
        assert (params["from"], params["to"]) == ("USD", "KRW")

    @respx.mock
    async def test_latest_failure_raises(self, forex):
        respx.get(f"{FOREX_BASE}/latest").mock(return_value=httpx.Response(503))
        with pytest.raises(UpstreamError):
            await forex.get_snapshot()

    @respx.mock
    async def test_missing_rate_reads_zero(self, forex):
        respx.get(f"{FOREX_BASE}/latest").mock(
            return_value=httpx.Response(200, json={"date": "2024-01-10", "rates": {}})
        )
        respx.get(url__regex=rf"{FOREX_BASE}/2024-01-0\d").mock(return_value=_rate(1370.0))
        snapshot = await forex.get_snapshot()
        assert snapshot.rate == 0.0
        assert snapshot.previous_rate == 1370.0

    def test_pair(self, forex):
        assert forex.pair == "USD/KRW"


class TestFindPreviousRate:
    @respx.mock
    async def test_seventh_day_used_when_first_six_fail(self, forex):
        for day in range(4, 10):
            respx.get(f"{FOREX_BASE}/2024-01-{day:02d}").mock(
                return_value=httpx.Response(404)
            )
        seventh = respx.get(f"{FOREX_BASE}/2024-01-03").mock(
            return_value=_rate(1366.0, "2024-01-03")
        )
        assert await forex.find_previous_rate(date(2024, 1, 10)) == 1366.0
        assert seventh.call_count == 1

    @respx.mock
    async def test_all_days_failing_returns_zero(self, forex):
        route = respx.get(url__regex=rf"{FOREX_BASE}/2024-01-\d\d").mock(
            return_value=httpx.Response(500)
        )
        assert await forex.find_previous_rate(date(2024, 1, 10)) == 0.0
        assert route.call_count == 7

    @respx.mock
    async def test_stops_at_first_positive_rate(self, forex):
        respx.get(f"{FOREX_BASE}/2024-01-09").mock(
            return_value=httpx.Response(200, json={"rates": {"KRW": 0}})
        )
        respx.get(f"{FOREX_BASE}/2024-01-08").mock(return_value=_rate(1371.0))
        assert await forex.find_previous_rate(date(2024, 1, 10)) == 1371.0

    @respx.mock
    async def test_transport_errors_skipped(self, forex):
        respx.get(f"{FOREX_BASE}/2024-01-09").mock(side_effect=httpx.ConnectError("down"))
        respx.get(f"{FOREX_BASE}/2024-01-08").mock(return_value=_rate(1371.0))
        assert await forex.find_previous_rate(date(2024, 1, 10)) == 1371.0

    @respx.mock
    async def test_respects_lookback_window(self, http_client):
        client = ForexClient(ForexConfig(lookback_days=2), http_client)
        route = respx.get(url__regex=rf"{FOREX_BASE}/2024-01-\d\d").mock(
            return_value=httpx.Response(404)
        )
        assert await client.find_previous_rate(date(2024, 1, 10)) == 0.0
        assert route.call_count == 2

    @respx.mock
    async def test_crosses_month_boundary(self, forex):
        respx.get(f"{FOREX_BASE}/2024-02-29").mock(return_value=httpx.Response(404))
        respx.get(f"{FOREX_BASE}/2024-02-28").mock(return_value=_rate(1333.0))
        assert await forex.find_previous_rate(date(2024, 3, 1)) == 1333.0


class TestCrypto:
    @respx.mock
    async def test_quote(self, crypto):
        route = respx.get(CRYPTO_URL).mock(
            return_value=httpx.Response(
                200, json={"bitcoin": {"usd": 67250.0, "usd_24h_change": -1.42}}
            )
        )
        quote = await crypto.get_quote()
        assert quote.coin_id == "bitcoin"
        assert quote.price == 67250.0
        assert quote.change_percent == -1.42
        params = route.calls.last.request.url.params
        assert params["ids"] == "bitcoin"
        assert params["vs_currencies"] == "usd"
        assert params["include_24hr_change"] == "true"

    @respx.mock
    async def test_missing_fields_read_zero(self, crypto):
        respx.get(CRYPTO_URL).mock(return_value=httpx.Response(200, json={}))
        quote = await crypto.get_quote()
        assert quote.price == 0.0
        assert quote.change_percent == 0.0

    @respx.mock
    async def test_other_vs_currency(self, http_client):
        client = CryptoClient(CryptoConfig(coin_id="ethereum", vs_currency="krw"), http_client)
        respx.get(CRYPTO_URL).mock(
            return_value=httpx.Response(
                200, json={"ethereum": {"krw": 4500000, "krw_24h_change": 2.5}}
            )
        )
        quote = await client.get_quote()
        assert quote.price == 4500000.0
        assert quote.change_percent == 2.5

    @respx.mock
    async def test_failure_raises(self, crypto):
        respx.get(CRYPTO_URL).mock(return_value=httpx.Response(429))
        with pytest.raises(UpstreamError) as exc_info:
            await crypto.get_quote()
        assert exc_info.value.status == 429
