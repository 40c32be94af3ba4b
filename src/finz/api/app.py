"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finz.api.deps import AppState, api_key_middleware
from finz.api.routes import router
from finz.core.config import FinzConfig, load_config
from finz.core.exceptions import (
    ConfigError,
    FinzError,
    LLMError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from finz.core.http import create_http_client
from finz.markets import CryptoClient, ForexClient
from finz.profiles import CompanySummarizer, ProfileService
from finz.quotes import YahooClient
from finz.state import create_state_store

logger = logging.getLogger(__name__)


def _create_summarizer(config: FinzConfig) -> CompanySummarizer:
    try:
        return CompanySummarizer.from_config(config.summary)
    except LLMError as e:
        logger.warning("Company blurbs disabled: %s", e)
        return CompanySummarizer(None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config
    http_client = create_http_client(config.http)
    yahoo = YahooClient(config.yahoo, config.http, client=http_client)
    state_store = await create_state_store(config.storage)

    app.state.app_state = AppState(
        config=config,
        http_client=http_client,
        yahoo=yahoo,
        forex=ForexClient(config.forex, http_client),
        crypto=CryptoClient(config.crypto, http_client),
        profiles=ProfileService(yahoo, _create_summarizer(config)),
        state_store=state_store,
    )

    yield

    if state_store is not None:
        await state_store.close()
    await http_client.aclose()


def create_app(config: FinzConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit config, one is loaded here (FINZ_CONFIG, finz.yml,
    FINZ_ env vars) so that middleware and lifespan see the same settings.
    """
    import finz

    config = config or load_config()

    app = FastAPI(
        title="finz API",
        description="Quotes, charts, FX, crypto, and company blurbs for the finz dashboard",
        version=finz.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config

    # Registered before CORS so CORS stays outermost and answers preflights
    if config.api.api_key:
        app.middleware("http")(api_key_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.exception_handler(FinzError)
    async def finz_exception_handler(request: Request, exc: FinzError):
        status_map = {
            ValidationError: 400,
            ConfigError: 400,
            NotFoundError: 404,
            StorageUnavailableError: 503,
        }
        status = status_map.get(type(exc), 500)
        if status == 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app
