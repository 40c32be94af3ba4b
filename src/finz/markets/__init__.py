"""Public market data that needs no session: FX rates and crypto prices."""

from finz.markets.crypto import CryptoClient
from finz.markets.forex import ForexClient

__all__ = ["CryptoClient", "ForexClient"]
