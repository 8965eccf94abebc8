"""Technical indicator library."""

from .technical import (
    calculate_wma,
    calculate_hma,
    calculate_rsi,
    is_bullish_candle,
    is_breakout_above_previous_high,
    is_crossover,
)

__all__ = [
    "calculate_wma",
    "calculate_hma",
    "calculate_rsi",
    "is_bullish_candle",
    "is_breakout_above_previous_high",
    "is_crossover",
]
