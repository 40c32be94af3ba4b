"""Shared pytest fixtures for finz."""

import pytest

from finz.core.config import HttpConfig, YahooConfig
from finz.core.models import ChartPoint, ChartSeries, QuoteResult


@pytest.fixture
def http_config() -> HttpConfig:
    return HttpConfig(request_timeout=5)


@pytest.fixture
def yahoo_config() -> YahooConfig:
    return YahooConfig()


@pytest.fixture
def quote_payload() -> dict:
    """Mock /v7/finance/quote response for AAPL."""
    return {
        "quoteResponse": {
            "result": [
                {
                    "symbol": "AAPL",
                    "shortName": "Apple Inc.",
                    "longName": "Apple Inc.",
                    "regularMarketPrice": 189.25,
                    "regularMarketChangePercent": 1.37,
                    "regularMarketPreviousClose": 186.69,
                    "currency": "USD",
                    "exchange": "NMS",
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def empty_quote_payload() -> dict:
    return {"quoteResponse": {"result": [], "error": None}}


@pytest.fixture
def summary_payload() -> dict:
    """Mock /v10/finance/quoteSummary response with an asset profile."""
    return {
        "quoteSummary": {
            "result": [{"assetProfile": {"industry": "Consumer Electronics"}}],
            "error": None,
        }
    }


@pytest.fixture
def chart_payload() -> dict:
    """Mock /v8/finance/chart response with one missing close."""
    return {
        "chart": {
            "result": [
                {
                    "meta": {"symbol": "AAPL", "currency": "USD"},
                    "timestamp": [1700000000, 1700086400, 1700172800],
                    "indicators": {
                        "quote": [
                            {
                                "close": [1.0, None, 3.0],
                                "open": [0.9, 1.5, 2.8],
                                "high": [1.2, 1.8, 3.1],
                                "low": [0.8, 1.4, 2.7],
                            }
                        ]
                    },
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def search_payload() -> dict:
    """Mock /v1/finance/search response."""
    return {
        "quotes": [
            {"symbol": "AAPL", "shortname": "Apple Inc.", "longname": "Apple Inc.",
             "exchange": "NMS", "currency": "USD"},
            {"symbol": "APLE", "longname": "Apple Hospitality REIT, Inc.", "exchange": "NYQ"},
            {"shortname": "No symbol here"},
            {"symbol": "005930.KS", "name": "Samsung Electronics", "exchange": "KSC",
             "currency": "KRW"},
        ],
        "news": [],
    }


@pytest.fixture
def sample_quote() -> QuoteResult:
    return QuoteResult(
        symbol="AAPL",
        display_name="Apple Inc.",
        price=189.25,
        change_percent=1.37,
        currency="USD",
        exchange="NMS",
        industry="Consumer Electronics",
        short_name="Apple Inc.",
        long_name="Apple Inc.",
    )


@pytest.fixture
def sample_series() -> ChartSeries:
    return ChartSeries(
        symbol="AAPL",
        points=[
            ChartPoint(timestamp_millis=1700000000000, close=10.0, open=9.0, high=11.0, low=8.0),
            ChartPoint(timestamp_millis=1700086400000, close=12.0, open=10.0, high=13.0, low=9.5),
            ChartPoint(timestamp_millis=1700172800000, close=11.0, open=12.0, high=12.5, low=10.5),
        ],
    )
