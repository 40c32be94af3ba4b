"""Value → pixel mapping for sparklines and candlestick charts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from finz.core.models import ChartPoint

MIN_BODY_PX = 2.0
BODY_WIDTH_RATIO = 0.6


def scale_values(values: Sequence[float], height: float) -> list[float]:
    """Map each value to a y pixel, top of the window at y=0.

    ``y = height − ((v − min) / (max − min || 1)) · height``. A flat window
    (all values equal) maps every value to the bottom edge.
    """
    if not values:
        return []
    lo = min(values)
    span = (max(values) - lo) or 1
    return [height - ((v - lo) / span) * height for v in values]


def sparkline_points(
    values: Sequence[float], width: float, height: float
) -> list[tuple[float, float]]:
    """(x, y) vertices of a sparkline spread evenly across ``width``."""
    steps = (len(values) - 1) or 1
    ys = scale_values(values, height)
    return [(i / steps * width, y) for i, y in enumerate(ys)]


@dataclass(frozen=True)
class Candle:
    """Pixel geometry for one candlestick."""

    x: float
    body_y: float
    body_height: float
    body_width: float
    wick_top: float
    wick_bottom: float
    is_up: bool


def candlestick_layout(
    points: Sequence[ChartPoint],
    width: float,
    height: float,
    padding: float = 20.0,
) -> list[Candle]:
    """Lay out candles for points that carry both high and low.

    The price axis spans ``[min(low), max(high)]`` inside a vertical
    ``padding``. Missing open falls back to close. Bodies are at least
    ``MIN_BODY_PX`` tall and wide.
    """
    valid = [p for p in points if p.high is not None and p.low is not None]
    if not valid:
        return []

    lo = min(p.low for p in valid)
    hi = max(p.high for p in valid)
    span = (hi - lo) or 1
    inner = height - padding * 2
    slot = width / len(valid)
    body_width = max(MIN_BODY_PX, slot * BODY_WIDTH_RATIO)

    def scale_y(value: float) -> float:
        return padding + ((hi - value) / span) * inner

    candles: list[Candle] = []
    for i, p in enumerate(valid):
        open_ = p.open if p.open is not None else p.close
        y_open = scale_y(open_)
        y_close = scale_y(p.close)
        candles.append(
            Candle(
                x=i * slot + slot / 2,
                body_y=min(y_open, y_close),
                body_height=max(MIN_BODY_PX, abs(y_open - y_close)),
                body_width=body_width,
                wick_top=scale_y(p.high),
                wick_bottom=scale_y(p.low),
                is_up=p.close >= open_,
            )
        )
    return candles
