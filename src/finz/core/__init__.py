"""finz.core: Foundation types, config, and exceptions."""

from finz.core.config import (
    APIConfig,
    CryptoConfig,
    FinzConfig,
    ForexConfig,
    HttpConfig,
    StorageConfig,
    SummaryConfig,
    YahooConfig,
    load_config,
)
from finz.core.exceptions import (
    AuthError,
    ConfigError,
    FinzError,
    LLMError,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    UpstreamError,
    ValidationError,
)
from finz.core.models import (
    ChartPoint,
    ChartRange,
    ChartSeries,
    CompanyProfile,
    Credential,
    CryptoQuote,
    CurrencyCode,
    ExchangeRateSnapshot,
    LLMProvider,
    Market,
    ProfileSource,
    QuoteResult,
    SearchResult,
    Symbol,
)

__all__ = [
    # Type aliases
    "Symbol",
    "CurrencyCode",
    # Enums
    "Market",
    "ProfileSource",
    "ChartRange",
    "LLMProvider",
    # Models
    "Credential",
    "QuoteResult",
    "ChartPoint",
    "ChartSeries",
    "SearchResult",
    "ExchangeRateSnapshot",
    "CryptoQuote",
    "CompanyProfile",
    # Config
    "FinzConfig",
    "HttpConfig",
    "YahooConfig",
    "ForexConfig",
    "CryptoConfig",
    "SummaryConfig",
    "StorageConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "FinzError",
    "ConfigError",
    "AuthError",
    "UpstreamError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    "LLMError",
]
