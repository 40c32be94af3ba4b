"""Nice-number axis ticks."""

from __future__ import annotations

import math

NICE_STEPS = (1, 2, 5, 10)
DEFAULT_INTERVALS = 5

# Absorbs float noise such as 0.30000000000000004 / 0.1.
_EPSILON = 1e-9


def nice_step(raw_step: float) -> float:
    """Round ``raw_step`` up to the nearest {1, 2, 5, 10} × 10^k."""
    if raw_step <= 0 or not math.isfinite(raw_step):
        raise ValueError(f"raw_step must be a positive finite number, got {raw_step}")
    magnitude = 10 ** math.floor(math.log10(raw_step))
    residual = raw_step / magnitude
    for candidate in NICE_STEPS:
        if residual <= candidate + _EPSILON:
            return candidate * magnitude
    return NICE_STEPS[-1] * magnitude


def axis_ticks(
    lo: float, hi: float, intervals: int = DEFAULT_INTERVALS
) -> list[float]:
    """Tick values from the rounded-up max down to the rounded-down min.

    The range is split into ``intervals`` raw steps, the step is rounded to
    a nice number, and the extrema are snapped outward to multiples of it,
    so the returned ticks always bound ``[lo, hi]`` inclusive.

    >>> axis_ticks(7, 43)
    [50.0, 40.0, 30.0, 20.0, 10.0, 0.0]
    """
    if intervals < 1:
        raise ValueError(f"intervals must be >= 1, got {intervals}")
    if lo > hi:
        lo, hi = hi, lo

    span = hi - lo
    if span == 0:
        span = abs(hi) or 1
    step = nice_step(span / intervals)

    top = math.ceil(hi / step - _EPSILON) * step
    bottom = math.floor(lo / step + _EPSILON) * step
    count = round((top - bottom) / step)
    decimals = max(0, -math.floor(math.log10(step)))
    return [round(top - i * step, decimals) + 0.0 for i in range(count + 1)]
