"""Display-currency conversion and price labels."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class DisplayPrice:
    """An amount ready to render.

    ``rate_unavailable`` is set when a conversion was wanted but no usable
    rate existed; ``amount`` is then still in the source currency.
    """

    amount: float
    currency: str
    converted: bool = False
    rate_unavailable: bool = False

    def label(self) -> str:
        decimals = 0 if self.currency.upper() == "KRW" else 2
        text = f"{self.currency.upper()} {self.amount:.{decimals}f}"
        if self.rate_unavailable:
            text += " (rate unavailable)"
        return text


def convert_for_display(
    amount: float,
    source: str,
    target: str,
    rate: float | None,
    base: str = "USD",
    quote: str = "KRW",
) -> DisplayPrice:
    """Convert ``amount`` from ``source`` to ``target`` currency.

    ``rate`` is quoted as units of ``quote`` per one ``base``. Conversion
    happens only when the currencies differ; base→quote multiplies,
    quote→base divides. A missing or non-positive rate, or a pair the rate
    does not cover, leaves the amount in ``source`` flagged unavailable.
    """
    src, dst = source.upper(), target.upper()
    if src == dst:
        return DisplayPrice(amount=amount, currency=src)

    usable = rate is not None and math.isfinite(rate) and rate > 0
    if usable and (src, dst) == (base.upper(), quote.upper()):
        return DisplayPrice(amount=amount * rate, currency=dst, converted=True)
    if usable and (src, dst) == (quote.upper(), base.upper()):
        return DisplayPrice(amount=amount / rate, currency=dst, converted=True)
    return DisplayPrice(amount=amount, currency=src, rate_unavailable=True)


def format_usd_krw(price_usd: float, krw_rate: float | None) -> str:
    """``KRW 123456 (USD 98.76)``, or just ``USD 98.76`` without a rate."""
    if not price_usd or not krw_rate or krw_rate <= 0:
        return f"USD {price_usd:.2f}"
    return f"KRW {price_usd * krw_rate:.0f} (USD {price_usd:.2f})"


def format_delta(delta: float | None) -> str | None:
    """Signed percentage such as ``+1.23%``; None when missing or NaN."""
    if delta is None or math.isnan(delta):
        return None
    sign = "+" if delta >= 0 else ""
    return f"{sign}{delta:.2f}%"


def rate_change_percent(rate: float, previous_rate: float) -> float | None:
    """Percent change between two FX rates; None when either is unavailable."""
    if rate <= 0 or previous_rate <= 0:
        return None
    return (rate - previous_rate) / previous_rate * 100
