"""Company profile assembly."""

from __future__ import annotations

import logging

from finz.core.exceptions import NotFoundError
from finz.core.models import CompanyProfile, Market, ProfileSource
from finz.profiles.summarizer import BULLET, CompanySummarizer
from finz.quotes.client import YahooClient

logger = logging.getLogger(__name__)

KOREA_SUFFIXES = (".KS", ".KQ")
KOREA_EXCHANGES = frozenset({"KSE", "KOE", "KSC", "KOSDAQ"})


def detect_market(
    symbol: str,
    currency: str | None = None,
    exchange: str | None = None,
) -> Market:
    """Classify a listing as Korea or USA.

    Ticker suffix wins, then currency, then exchange code.
    """
    if symbol.upper().endswith(KOREA_SUFFIXES):
        return Market.KOREA
    if (currency or "").upper() == "KRW":
        return Market.KOREA
    if (exchange or "").upper() in KOREA_EXCHANGES:
        return Market.KOREA
    return Market.USA


def build_fallback_bullets(
    symbol: str,
    company_name: str,
    market: Market,
    industry: str | None,
) -> list[str]:
    """Deterministic 3-line blurb used when no AI summary is available."""
    return [
        f"{BULLET}{company_name} ({symbol}) is listed on the {market.value} market.",
        f"{BULLET}Core business: {industry or 'industry information pending'}.",
        f"{BULLET}Check recent filings and news together with earnings and risk.",
    ]


class ProfileService:
    """Builds ``CompanyProfile`` records from quote data and a summarizer."""

    def __init__(self, yahoo: YahooClient, summarizer: CompanySummarizer) -> None:
        self._yahoo = yahoo
        self._summarizer = summarizer

    async def get_profile(self, symbol: str) -> CompanyProfile:
        """Assemble the profile for ``symbol``.

        Raises:
            NotFoundError: The provider has no quote for ``symbol``.
            AuthError / UpstreamError: The quote lookup failed.
        """
        quote = await self._yahoo.get_quote_with_industry(symbol)
        if quote is None:
            raise NotFoundError(f"Symbol not found: {symbol}", context={"symbol": symbol})

        company_name = quote.long_name or quote.short_name or symbol
        market = detect_market(symbol, quote.currency, quote.exchange)

        bullets = await self._summarizer.summarize(
            symbol=symbol,
            company_name=company_name,
            market=market.value,
            industry=quote.industry,
        )
        source = ProfileSource.AI_GENERATED
        if bullets is None:
            bullets = build_fallback_bullets(symbol, company_name, market, quote.industry)
            source = ProfileSource.FALLBACK

        return CompanyProfile(
            symbol=symbol,
            company_name=company_name,
            market=market,
            industry=quote.industry,
            bullets=bullets,
            source=source,
        )
