"""Authenticated client for the quote/chart provider."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any
from urllib.parse import quote as url_quote

import httpx

from finz.core.config import HttpConfig, YahooConfig
from finz.core.exceptions import FinzError, UpstreamError
from finz.core.http import create_http_client, get_json
from finz.core.models import ChartRange, ChartSeries, QuoteResult, SearchResult
from finz.quotes.adapters import (
    ChartAdapter,
    IndustryAdapter,
    QuoteAdapter,
    SearchAdapter,
)
from finz.quotes.session import SessionCache, YahooSessionSource

logger = logging.getLogger(__name__)

_QUOTE_PATH = "/v7/finance/quote"
_CHART_PATH = "/v8/finance/chart/{symbol}"
_SUMMARY_PATH = "/v10/finance/quoteSummary/{symbol}"
_SEARCH_PATH = "/v1/finance/search"

# Statuses that mean the credential itself was rejected.
_AUTH_REJECTED = frozenset({401, 403})


class YahooClient:
    """Quote, chart, industry, and search lookups against the provider.

    Every request carries the session token as the ``crumb`` query
    parameter and the session cookie as a header. Use via
    ``async with YahooClient(...) as client:`` or call ``close()``.

    Parameters
    ----------
    config : YahooConfig
        Provider endpoints and session TTL.
    http_config : HttpConfig
        Browser headers and timeout.
    client : httpx.AsyncClient | None
        Shared HTTP client. One is created (and owned) when omitted.
    session : SessionCache | None
        Credential cache. Built on top of ``client`` when omitted.
    """

    def __init__(
        self,
        config: YahooConfig,
        http_config: HttpConfig,
        client: httpx.AsyncClient | None = None,
        session: SessionCache | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or create_http_client(http_config)
        self._session = session or SessionCache(
            YahooSessionSource(self._client, config, http_config),
            ttl=timedelta(seconds=config.session_ttl_seconds),
        )
        self._quote_adapter = QuoteAdapter()
        self._chart_adapter = ChartAdapter()
        self._industry_adapter = IndustryAdapter()
        self._search_adapter = SearchAdapter()

    async def __aenter__(self) -> YahooClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def session(self) -> SessionCache:
        return self._session

    # --- Authenticated Fetch ---

    async def fetch_json(
        self,
        base_url: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Issue an authenticated GET and parse the JSON body.

        Empty parameter values are dropped. A 401/403 response evicts the
        credential used, so the next call acquires a fresh one.

        Raises:
            AuthError: No credential could be acquired.
            UpstreamError: Non-2xx status or transport failure.
        """
        credential = await self._session.get_credential()

        query = {k: v for k, v in (params or {}).items() if v}
        query["crumb"] = credential.token

        try:
            return await get_json(
                self._client,
                f"{base_url.rstrip('/')}{path}",
                params=query,
                headers={"Cookie": credential.cookie},
            )
        except UpstreamError as e:
            if e.status in _AUTH_REJECTED:
                logger.warning("Provider rejected session credential (HTTP %s)", e.status)
                self._session.invalidate(credential)
            raise

    # --- Lookups ---

    async def get_quote(self, symbol: str) -> QuoteResult | None:
        """Fetch a quote. Returns None when the provider knows no such symbol."""
        data = await self.fetch_json(
            self._config.quote_base_url, _QUOTE_PATH, {"symbols": symbol}
        )
        return self._quote_adapter.adapt(data, symbol)

    async def get_industry(self, symbol: str) -> str | None:
        """Fetch the company's industry. Never raises; failures yield None."""
        try:
            data = await self.fetch_json(
                self._config.summary_base_url,
                _SUMMARY_PATH.format(symbol=url_quote(symbol, safe="")),
                {"modules": "assetProfile"},
            )
        except FinzError as e:
            logger.warning("Industry lookup failed for %s: %s", symbol, e)
            return None
        return self._industry_adapter.adapt(data, symbol)

    async def get_quote_with_industry(self, symbol: str) -> QuoteResult | None:
        """Fetch quote and industry concurrently and merge them."""
        quote, industry = await asyncio.gather(
            self.get_quote(symbol),
            self.get_industry(symbol),
        )
        if quote is None:
            return None
        return quote.model_copy(update={"industry": industry})

    async def get_chart(self, symbol: str, chart_range: ChartRange) -> ChartSeries:
        """Fetch daily chart points for ``chart_range``."""
        data = await self.fetch_json(
            self._config.quote_base_url,
            _CHART_PATH.format(symbol=url_quote(symbol, safe="")),
            {"interval": "1d", "range": chart_range.provider_range},
        )
        return self._chart_adapter.adapt(data, symbol)

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Search instruments by name or ticker."""
        limit = limit or self._config.search_limit
        data = await self.fetch_json(
            self._config.summary_base_url,
            _SEARCH_PATH,
            {"q": query, "quotesCount": str(limit), "newsCount": "0"},
        )
        return self._search_adapter.adapt(data, limit)
