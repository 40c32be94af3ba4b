"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from finz.core.config import FinzConfig
from finz.markets import CryptoClient, ForexClient
from finz.profiles import ProfileService
from finz.quotes import YahooClient
from finz.state import StateStore


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: FinzConfig
    http_client: httpx.AsyncClient
    yahoo: YahooClient
    forex: ForexClient
    crypto: CryptoClient
    profiles: ProfileService
    state_store: StateStore | None = None


def get_app_state(request: Request) -> AppState:
    """Dependency: retrieve AppState from the request."""
    return request.app.state.app_state


def get_config(request: Request) -> FinzConfig:
    return request.app.state.app_state.config


def get_yahoo(request: Request) -> YahooClient:
    return request.app.state.app_state.yahoo


def get_forex(request: Request) -> ForexClient:
    return request.app.state.app_state.forex


def get_crypto(request: Request) -> CryptoClient:
    return request.app.state.app_state.crypto


def get_profiles(request: Request) -> ProfileService:
    return request.app.state.app_state.profiles


def get_state_store(request: Request) -> StateStore | None:
    """Dependency: the state store, or None when storage is disabled."""
    return request.app.state.app_state.state_store


EXEMPT_PATHS = {"/api/health"}


async def api_key_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware: validate X-API-Key header when authentication is enabled."""
    if request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    config = request.app.state.app_state.config
    if config.api.api_key:
        api_key = request.headers.get("X-API-Key")
        if api_key != config.api.api_key:
            return JSONResponse(
                status_code=401,
                content={"error": "Unauthorized", "detail": "Invalid or missing API key"},
            )
    return await call_next(request)
