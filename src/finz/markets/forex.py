"""Foreign-exchange snapshots: latest rate plus the last earlier rate."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

import httpx

from finz.core.config import ForexConfig
from finz.core.exceptions import UpstreamError
from finz.core.http import get_json
from finz.core.models import ExchangeRateSnapshot

logger = logging.getLogger(__name__)


class ForexClient:
    """Fetches base→quote exchange rates from the FX provider.

    The previous rate is found by a bounded sequential scan backwards from
    the latest quoted date: day −1, −2, … −lookback_days, stopping at the
    first day with a positive rate. Days without a fixing (weekends,
    holidays) are skipped.
    """

    def __init__(self, config: ForexConfig, client: httpx.AsyncClient) -> None:
        self._config = config
        self._client = client

    @property
    def pair(self) -> str:
        return f"{self._config.base_currency}/{self._config.quote_currency}"

    async def get_snapshot(self) -> ExchangeRateSnapshot:
        """Latest rate and previous rate.

        Raises:
            UpstreamError: The latest-rate request failed.
        """
        data = await self._fetch("latest")
        rate = self._extract_rate(data)
        as_of = _parse_date(data.get("date") if isinstance(data, dict) else None)

        previous = await self.find_previous_rate(as_of or date.today())
        return ExchangeRateSnapshot(rate=rate, previous_rate=previous, as_of=as_of)

    async def find_previous_rate(self, latest: date) -> float:
        """Scan back from ``latest`` for the most recent positive rate.

        Failed or empty days are skipped. Returns 0.0 when the whole window
        yields nothing.
        """
        for offset in range(1, self._config.lookback_days + 1):
            day = latest - timedelta(days=offset)
            try:
                data = await self._fetch(day.isoformat())
            except UpstreamError as e:
                logger.debug("No %s rate for %s: %s", self.pair, day, e)
                continue
            rate = self._extract_rate(data)
            if rate > 0:
                return rate
        logger.warning(
            "No %s rate found within %d days before %s",
            self.pair, self._config.lookback_days, latest,
        )
        return 0.0

    async def _fetch(self, endpoint: str) -> Any:
        return await get_json(
            self._client,
            f"{self._config.base_url.rstrip('/')}/{endpoint}",
            params={
                "from": self._config.base_currency,
                "to": self._config.quote_currency,
            },
        )

    def _extract_rate(self, data: Any) -> float:
        rates = data.get("rates") if isinstance(data, dict) else None
        value = rates.get(self._config.quote_currency) if isinstance(rates, dict) else None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return 0.0


def _parse_date(value: Any) -> date | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
