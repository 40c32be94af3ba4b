"""Cryptocurrency spot prices."""

from __future__ import annotations

from typing import Any

import httpx

from finz.core.config import CryptoConfig
from finz.core.http import get_json
from finz.core.models import CryptoQuote


class CryptoClient:
    """Fetches spot price and 24h change for one coin (free, no key)."""

    def __init__(self, config: CryptoConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    async def get_quote(self) -> CryptoQuote:
        """Current price and 24h change percent; missing fields read as 0.

        Raises:
            UpstreamError: Transport failure or non-2xx status.
        """
        vs = self._config.vs_currency
        data = await get_json(
            self._client,
            f"{self._config.base_url.rstrip('/')}/simple/price",
            params={
                "ids": self._config.coin_id,
                "vs_currencies": vs,
                "include_24hr_change": "true",
            },
        )
        coin = data.get(self._config.coin_id) if isinstance(data, dict) else None
        coin = coin if isinstance(coin, dict) else {}
        return CryptoQuote(
            coin_id=self._config.coin_id,
            price=_number(coin.get(vs)),
            change_percent=_number(coin.get(f"{vs}_24h_change")),
        )


def _number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0
