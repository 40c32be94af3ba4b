"""Adapters from raw quote-provider JSON to finz models.

Each adapter is a pure transformation and tolerates missing optional
fields. None of them perform I/O.
"""

from __future__ import annotations

import math
from typing import Any, Protocol, runtime_checkable

from finz.core.models import ChartPoint, ChartSeries, QuoteResult, SearchResult

# Display price resolution order.
PRICE_FIELDS: tuple[str, ...] = (
    "regularMarketPrice",
    "postMarketPrice",
    "preMarketPrice",
    "regularMarketPreviousClose",
)


@runtime_checkable
class ResponseAdapter(Protocol):
    """Transforms one raw provider response for a symbol."""

    def adapt(self, raw_data: Any, symbol: str) -> Any: ...


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite(value: Any) -> float | None:
    """Return ``value`` as a float if it is a finite number, else None."""
    if _is_number(value) and math.isfinite(value):
        return float(value)
    return None


def _first_text(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None on any structural mismatch."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[step] if isinstance(step, int) else current.get(step)
    return current


class QuoteAdapter:
    """Parses a ``/v7/finance/quote`` response into a ``QuoteResult``."""

    def adapt(self, raw_data: Any, symbol: str) -> QuoteResult | None:
        """Return the first quote entry, or None when the result list is empty."""
        entry = _dig(raw_data, "quoteResponse", "result", 0)
        if not isinstance(entry, dict):
            return None

        short_name = _first_text(entry.get("shortName"))
        long_name = _first_text(entry.get("longName"))

        return QuoteResult(
            symbol=_first_text(entry.get("symbol")) or symbol,
            display_name=short_name or long_name or symbol,
            price=resolve_price(entry),
            change_percent=_finite(entry.get("regularMarketChangePercent")),
            currency=_first_text(entry.get("currency")),
            exchange=_first_text(entry.get("exchange")),
            short_name=short_name,
            long_name=long_name,
        )


def resolve_price(entry: dict[str, Any]) -> float | None:
    """First numeric field of regular → post-market → pre-market → previous close."""
    for field in PRICE_FIELDS:
        value = _finite(entry.get(field))
        if value is not None:
            return value
    return None


class ChartAdapter:
    """Parses a ``/v8/finance/chart`` response into a ``ChartSeries``.

    Zips the parallel timestamp/OHLC arrays and drops every index whose
    close is not a finite number. Provider timestamps are seconds; points
    carry milliseconds.
    """

    def adapt(self, raw_data: Any, symbol: str) -> ChartSeries:
        result = _dig(raw_data, "chart", "result", 0)
        if not isinstance(result, dict):
            return ChartSeries(symbol=symbol, points=[])

        timestamps = result.get("timestamp") or []
        quote = _dig(result, "indicators", "quote", 0) or {}
        closes = quote.get("close") or []
        opens = quote.get("open") or []
        highs = quote.get("high") or []
        lows = quote.get("low") or []

        points: list[ChartPoint] = []
        for i, ts in enumerate(timestamps):
            if _finite(ts) is None:
                continue
            close = _finite(closes[i]) if i < len(closes) else None
            if close is None:
                continue
            points.append(
                ChartPoint(
                    timestamp_millis=int(ts) * 1000,
                    close=close,
                    open=_finite(opens[i]) if i < len(opens) else None,
                    high=_finite(highs[i]) if i < len(highs) else None,
                    low=_finite(lows[i]) if i < len(lows) else None,
                )
            )

        points.sort(key=lambda p: p.timestamp_millis)
        return ChartSeries(symbol=symbol, points=points)


class IndustryAdapter:
    """Extracts ``assetProfile.industry`` from a ``quoteSummary`` response."""

    def adapt(self, raw_data: Any, symbol: str) -> str | None:
        industry = _dig(raw_data, "quoteSummary", "result", 0, "assetProfile", "industry")
        return _first_text(industry)


class SearchAdapter:
    """Parses a ``/v1/finance/search`` response into ``SearchResult`` items."""

    def adapt(self, raw_data: Any, limit: int) -> list[SearchResult]:
        quotes = _dig(raw_data, "quotes")
        if not isinstance(quotes, list):
            return []

        results: list[SearchResult] = []
        for item in quotes:
            if not isinstance(item, dict):
                continue
            symbol = _first_text(item.get("symbol"))
            if symbol is None:
                continue
            results.append(
                SearchResult(
                    symbol=symbol,
                    short_name=_first_text(
                        item.get("shortname"), item.get("longname"), item.get("name")
                    ),
                    long_name=_first_text(item.get("longname"), item.get("shortname")),
                    exchange=_first_text(item.get("exchange")),
                    currency=_first_text(item.get("currency")),
                )
            )
        return results[:limit]
