"""API-specific request/response schemas (Pydantic v2).

Wire field names are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from finz.core.models import (
    ChartSeries,
    CompanyProfile,
    CryptoQuote,
    ExchangeRateSnapshot,
    QuoteResult,
    SearchResult,
)


class WireModel(BaseModel):
    """Base for every JSON body crossing the HTTP boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- Error --


class ErrorResponse(WireModel):
    """Standard error envelope."""

    error: str
    detail: str | None = None


# -- Quotes --


class QuoteResponse(WireModel):
    symbol: str
    display_name: str
    price: float | None = None
    change_percent: float | None = None
    currency: str | None = None
    exchange: str | None = None
    industry: str | None = None

    @classmethod
    def from_result(cls, quote: QuoteResult) -> QuoteResponse:
        return cls(
            symbol=quote.symbol,
            display_name=quote.display_name,
            price=quote.price,
            change_percent=quote.change_percent,
            currency=quote.currency,
            exchange=quote.exchange,
            industry=quote.industry,
        )


class ChartPointResponse(WireModel):
    timestamp_millis: int
    close: float
    open: float | None = None
    high: float | None = None
    low: float | None = None


class ChartResponse(WireModel):
    symbol: str
    points: list[ChartPointResponse]

    @classmethod
    def from_series(cls, series: ChartSeries) -> ChartResponse:
        return cls(
            symbol=series.symbol,
            points=[ChartPointResponse(**p.model_dump()) for p in series.points],
        )


class SearchItemResponse(WireModel):
    symbol: str
    short_name: str | None = None
    long_name: str | None = None
    exchange: str | None = None
    currency: str | None = None

    @classmethod
    def from_result(cls, result: SearchResult) -> SearchItemResponse:
        return cls(**result.model_dump())


# -- Markets --


class ForexResponse(WireModel):
    rate: float = 0.0
    previous_rate: float = 0.0

    @classmethod
    def from_snapshot(cls, snapshot: ExchangeRateSnapshot) -> ForexResponse:
        return cls(rate=snapshot.rate, previous_rate=snapshot.previous_rate)


class CryptoResponse(WireModel):
    price: float = 0.0
    change_percent: float = 0.0

    @classmethod
    def from_quote(cls, quote: CryptoQuote) -> CryptoResponse:
        return cls(price=quote.price, change_percent=quote.change_percent)


# -- Profiles --


class ProfileResponse(WireModel):
    symbol: str
    company_name: str
    market: str
    industry: str | None = None
    bullets: list[str]
    source: str

    @classmethod
    def from_profile(cls, profile: CompanyProfile) -> ProfileResponse:
        return cls(
            symbol=profile.symbol,
            company_name=profile.company_name,
            market=profile.market.value,
            industry=profile.industry,
            bullets=list(profile.bullets),
            source=profile.source.value,
        )


# -- State --


class StateValueResponse(WireModel):
    value: float | None = None


class StateWriteRequest(WireModel):
    """Request body for POST /api/state."""

    key: str = Field(..., min_length=1)
    value: float

    @field_validator("value", mode="before")
    @classmethod
    def value_is_number(cls, v: object) -> object:
        # Strings like "1" and booleans are rejected, not coerced.
        if not isinstance(v, (int, float)) or isinstance(v, bool):
            raise ValueError("value must be a number")
        return v


class StateWriteResponse(WireModel):
    ok: bool


# -- Health --


class HealthResponse(WireModel):
    """Response for GET /api/health."""

    status: str = "ok"
    version: str
    state_store: str
