"""FastAPI route definitions for the finz dashboard API.

Provider outages never crash a request: quote, chart, and profile errors
surface through the app's exception handler, while forex, crypto, search,
and state return their zeroed/empty payloads directly.
"""

from __future__ import annotations

import logging

import pydantic
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import JSONResponse

import finz
from finz.api.deps import (
    get_config,
    get_crypto,
    get_forex,
    get_profiles,
    get_state_store,
    get_yahoo,
)
from finz.api.schemas import (
    ChartResponse,
    CryptoResponse,
    ForexResponse,
    HealthResponse,
    ProfileResponse,
    QuoteResponse,
    SearchItemResponse,
    StateValueResponse,
    StateWriteRequest,
    StateWriteResponse,
)
from finz.core.config import FinzConfig, ForexConfig
from finz.core.exceptions import FinzError, NotFoundError, StorageError, ValidationError
from finz.core.models import ChartRange, ExchangeRateSnapshot
from finz.markets import CryptoClient, ForexClient
from finz.profiles import ProfileService
from finz.quotes import YahooClient
from finz.state import StateStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _require(name: str, value: str | None) -> str:
    """Reject missing or blank required query parameters."""
    if value is None or not value.strip():
        raise ValidationError(f"{name} required", context={"field": name})
    return value.strip()


# -- Health --


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StateStore | None = Depends(get_state_store)):
    """Service version and state store reachability."""
    if store is None:
        store_status = "disabled"
    else:
        store_status = "ok" if await store.health_check() else "unreachable"
    return HealthResponse(version=finz.__version__, state_store=store_status)


# -- Quotes --


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    symbol: str | None = Query(None, description="Ticker symbol"),
    yahoo: YahooClient = Depends(get_yahoo),
):
    """Quote with display price, change, and industry."""
    symbol = _require("symbol", symbol)
    quote = await yahoo.get_quote_with_industry(symbol)
    if quote is None:
        raise NotFoundError(f"Symbol not found: {symbol}", context={"symbol": symbol})
    return QuoteResponse.from_result(quote)


@router.get("/chart", response_model=ChartResponse)
async def get_chart(
    symbol: str | None = Query(None, description="Ticker symbol"),
    chart_range: str = Query(ChartRange.DAYS_30.value, alias="range"),
    yahoo: YahooClient = Depends(get_yahoo),
):
    """Daily chart points. Unknown ranges fall back to 30d."""
    symbol = _require("symbol", symbol)
    try:
        window = ChartRange(chart_range)
    except ValueError:
        window = ChartRange.DAYS_30
    series = await yahoo.get_chart(symbol, window)
    return ChartResponse.from_series(series)


@router.get("/search", response_model=list[SearchItemResponse])
async def search(
    q: str | None = Query(None, description="Name or ticker fragment"),
    limit: str | None = Query(None),
    yahoo: YahooClient = Depends(get_yahoo),
    config: FinzConfig = Depends(get_config),
):
    """Instrument search. Any failure yields an empty list."""
    if q is None or not q.strip():
        return []
    try:
        results = await yahoo.search(q.strip(), _parse_limit(limit, config.yahoo.search_limit))
    except FinzError as e:
        logger.warning("Search failed for %r: %s", q, e)
        return []
    return [SearchItemResponse.from_result(r) for r in results]


def _parse_limit(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


# -- Profiles --


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    symbol: str | None = Query(None, description="Ticker symbol"),
    profiles: ProfileService = Depends(get_profiles),
):
    """Company name, market, industry, and a 3-line blurb."""
    symbol = _require("symbol", symbol)
    profile = await profiles.get_profile(symbol)
    return ProfileResponse.from_profile(profile)


# -- Markets --


@router.get("/forex", response_model=ForexResponse)
async def get_forex(
    background_tasks: BackgroundTasks,
    forex: ForexClient = Depends(get_forex),
    store: StateStore | None = Depends(get_state_store),
    config: FinzConfig = Depends(get_config),
):
    """Latest and previous exchange rate."""
    try:
        snapshot = await forex.get_snapshot()
    except FinzError as e:
        logger.warning("Forex lookup failed: %s", e)
        return JSONResponse(
            status_code=500,
            content=ForexResponse().model_dump(by_alias=True),
        )

    if store is not None:
        background_tasks.add_task(_persist_rates, store, config.forex, snapshot)
    return ForexResponse.from_snapshot(snapshot)


@router.get("/crypto", response_model=CryptoResponse)
async def get_crypto(crypto: CryptoClient = Depends(get_crypto)):
    """Spot price and 24h change."""
    try:
        quote = await crypto.get_quote()
    except FinzError as e:
        logger.warning("Crypto lookup failed: %s", e)
        return JSONResponse(
            status_code=500,
            content=CryptoResponse().model_dump(by_alias=True),
        )
    return CryptoResponse.from_quote(quote)


# -- State --


@router.get("/state", response_model=StateValueResponse)
async def get_state(
    key: str | None = Query(None),
    store: StateStore | None = Depends(get_state_store),
):
    """Read one stored value; null when unset or storage is disabled."""
    key = _require("key", key)
    if store is None:
        return StateValueResponse(value=None)
    try:
        value = await store.get(key)
    except StorageError as e:
        logger.error("State read failed for %r: %s", key, e)
        return JSONResponse(status_code=500, content={"value": None})
    return StateValueResponse(value=value)


@router.post("/state", response_model=StateWriteResponse)
async def put_state(
    request: Request,
    store: StateStore | None = Depends(get_state_store),
):
    """Upsert one value. Last write wins per key."""
    if store is None:
        return JSONResponse(status_code=503, content={"ok": False})

    try:
        body = StateWriteRequest.model_validate(await request.json())
    except (ValueError, pydantic.ValidationError):
        return JSONResponse(status_code=400, content={"ok": False})

    try:
        await store.put(body.key, body.value)
    except StorageError as e:
        logger.error("State write failed for %r: %s", body.key, e)
        return JSONResponse(status_code=500, content={"ok": False})
    return StateWriteResponse(ok=True)


# -- Helpers --


async def _persist_rates(
    store: StateStore, config: ForexConfig, snapshot: ExchangeRateSnapshot
) -> None:
    """Best-effort side write of FX rates; runs after the response is sent."""
    writes = [
        (config.previous_state_key, snapshot.previous_rate),
        (config.latest_state_key, snapshot.rate),
    ]
    for key, value in writes:
        if value <= 0:
            continue
        try:
            await store.put(key, value)
        except StorageError as e:
            logger.warning("Could not persist %s: %s", key, e)
