"""Quote/chart provider access: session cache, adapters, client."""

from finz.quotes.adapters import (
    ChartAdapter,
    IndustryAdapter,
    QuoteAdapter,
    ResponseAdapter,
    SearchAdapter,
    resolve_price,
)
from finz.quotes.client import YahooClient
from finz.quotes.session import CredentialSource, SessionCache, YahooSessionSource

__all__ = [
    "ChartAdapter",
    "CredentialSource",
    "IndustryAdapter",
    "QuoteAdapter",
    "ResponseAdapter",
    "SearchAdapter",
    "SessionCache",
    "YahooClient",
    "YahooSessionSource",
    "resolve_price",
]
