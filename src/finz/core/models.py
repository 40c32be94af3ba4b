"""Pydantic data models: the system's type contracts."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# --- Type Aliases ---

Symbol = str
CurrencyCode = str

# --- Enumerations ---


class Market(StrEnum):
    """Listing market derived from ticker suffix, currency, and exchange."""

    KOREA = "Korea"
    USA = "USA"


class ProfileSource(StrEnum):
    """Where a company profile's bullet lines came from."""

    AI_GENERATED = "ai-generated"
    FALLBACK = "fallback"


class ChartRange(StrEnum):
    """Chart windows exposed to the dashboard."""

    DAYS_30 = "30d"
    MONTHS_3 = "3mo"
    YEAR_1 = "1y"

    @property
    def provider_range(self) -> str:
        """The provider's range parameter for this window."""
        return _PROVIDER_RANGES[self]


_PROVIDER_RANGES: dict[ChartRange, str] = {
    ChartRange.DAYS_30: "1mo",
    ChartRange.MONTHS_3: "3mo",
    ChartRange.YEAR_1: "1y",
}


class LLMProvider(StrEnum):
    """Supported text-generation providers for company blurbs."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


# --- Session ---


class Credential(BaseModel):
    """Token + cookie pair authorizing quote provider requests.

    Replaced wholesale on expiry; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    cookie: str
    expires_at: datetime

    @field_validator("token", "cookie")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("credential parts must not be blank")
        return v

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


# --- Quotes ---


class QuoteResult(BaseModel):
    """Normalized quote for one symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    display_name: str
    price: float | None = None
    change_percent: float | None = None
    currency: CurrencyCode | None = None
    exchange: str | None = None
    industry: str | None = None
    short_name: str | None = None
    long_name: str | None = None


class ChartPoint(BaseModel):
    """A single chart bar. `close` is always present and finite."""

    model_config = ConfigDict(frozen=True)

    timestamp_millis: int
    close: float
    open: float | None = None
    high: float | None = None
    low: float | None = None


class ChartSeries(BaseModel):
    """Chart points for one symbol, ascending by time."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    points: list[ChartPoint]

    @model_validator(mode="after")
    def points_ascending(self) -> ChartSeries:
        stamps = [p.timestamp_millis for p in self.points]
        if stamps != sorted(stamps):
            raise ValueError("chart points must be ascending by timestamp")
        return self

    @property
    def closes(self) -> list[float]:
        return [p.close for p in self.points]


class SearchResult(BaseModel):
    """One instrument match from the provider's search endpoint."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    short_name: str | None = None
    long_name: str | None = None
    exchange: str | None = None
    currency: CurrencyCode | None = None


# --- Markets ---


class ExchangeRateSnapshot(BaseModel):
    """USD→local rate plus the most recent earlier rate.

    `previous_rate` is 0.0 when no lookback day produced a positive rate;
    callers must read that as "unavailable", not as a real rate.
    """

    model_config = ConfigDict(frozen=True)

    rate: float
    previous_rate: float = 0.0
    as_of: date | None = None

    @property
    def has_previous(self) -> bool:
        return self.previous_rate > 0


class CryptoQuote(BaseModel):
    """Spot price and 24h change for one coin."""

    model_config = ConfigDict(frozen=True)

    coin_id: str
    price: float
    change_percent: float


# --- Profiles ---


class CompanyProfile(BaseModel):
    """Company blurb shown on the detail view."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    company_name: str
    market: Market
    industry: str | None = None
    bullets: list[str]
    source: ProfileSource

    @field_validator("bullets")
    @classmethod
    def exactly_three_bullets(cls, v: list[str]) -> list[str]:
        if len(v) != 3:
            raise ValueError(f"bullets must contain exactly 3 lines, got {len(v)}")
        return v
