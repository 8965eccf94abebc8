"""Technical indicators and candle predicates.

Indicator series are oldest-first ``numpy`` arrays aligned with their input;
positions without enough lookback hold ``numpy.nan``.
"""

import math
from typing import Sequence

import numpy as np
import pandas as pd

from ..core.models import Candle


def calculate_wma(values: Sequence[float], period: int) -> np.ndarray:
    """Weighted moving average with linearly increasing weight toward the newest value."""
    if period < 1:
        raise ValueError(f"WMA period must be positive, got {period}")

    series = pd.Series(np.asarray(values, dtype=float))
    weights = np.arange(1, period + 1, dtype=float)
    total_weight = weights.sum()

    # rolling() leaves a window containing NaN undefined
    wma = series.rolling(window=period).apply(
        lambda window: np.dot(window, weights) / total_weight, raw=True
    )
    return wma.to_numpy(dtype=float)


def calculate_hma(values: Sequence[float], period: int) -> np.ndarray:
    """Hull moving average: WMA(2 * WMA(n/2) - WMA(n), sqrt(n))."""
    if period < 2:
        raise ValueError(f"HMA period must be at least 2, got {period}")

    half_period = period // 2
    sqrt_period = int(math.floor(math.sqrt(period)))

    wma_full = calculate_wma(values, period)
    wma_half = calculate_wma(values, half_period)
    raw_hma = 2 * wma_half - wma_full

    return calculate_wma(raw_hma, sqrt_period)


def calculate_rsi(prices: Sequence[float], period: int = 14) -> np.ndarray:
    """
    Relative strength index with Wilder smoothing.

    Args:
        prices: Oldest-first prices
        period: Smoothing period

    Returns:
        RSI values for input indices ``period`` .. ``len(prices) - 1``.
        Empty when fewer than ``period + 1`` prices are given.
    """
    if period < 1:
        raise ValueError(f"RSI period must be positive, got {period}")

    changes = np.diff(np.asarray(prices, dtype=float))
    if len(changes) < period:
        return np.array([], dtype=float)

    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    rsi = [_rsi_from_averages(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rsi.append(_rsi_from_averages(avg_gain, avg_loss))

    return np.array(rsi, dtype=float)


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    # No losses in the window: relative strength is unbounded
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def is_bullish_candle(candle: Candle) -> bool:
    """Close above open."""
    return candle.close > candle.open


def is_breakout_above_previous_high(current: Candle, previous: Candle) -> bool:
    """Close above the previous candle's high."""
    return current.close > previous.high


def is_crossover(
    prev_price: float,
    current_price: float,
    prev_ma: float,
    current_ma: float
) -> bool:
    """Price was below the average on the previous bar and is above it now."""
    return bool(prev_price < prev_ma and current_price > current_ma)
