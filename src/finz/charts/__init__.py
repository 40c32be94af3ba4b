"""Pure chart math used by the rendering layer."""

from finz.charts.display import (
    DisplayPrice,
    convert_for_display,
    format_delta,
    format_usd_krw,
    rate_change_percent,
)
from finz.charts.scaling import Candle, candlestick_layout, scale_values, sparkline_points
from finz.charts.ticks import axis_ticks, nice_step

__all__ = [
    "Candle",
    "DisplayPrice",
    "axis_ticks",
    "candlestick_layout",
    "convert_for_display",
    "format_delta",
    "format_usd_krw",
    "nice_step",
    "rate_change_percent",
    "scale_values",
    "sparkline_points",
]
