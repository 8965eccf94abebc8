"""Per-coin condition evaluation over a daily candle series."""

from functools import cached_property
from typing import Dict, List, Optional
import logging

import numpy as np

from ..core.enums import Condition
from ..core.exceptions import InsufficientHistoryError
from ..core.models import Candle, ScreeningMetrics
from ..indicators.technical import (
    calculate_hma,
    calculate_rsi,
    is_bullish_candle,
    is_breakout_above_previous_high,
    is_crossover,
)

logger = logging.getLogger(__name__)

MIN_CANDLES = 3

VOLUME_SURGE_MULTIPLIER = 1.5
VOLUME_LOOKBACK_DAYS = 10
SHORT_VOLUME_LOOKBACK_DAYS = 3
STRONG_BREAKOUT_PCT = 2.0


def _defined(value: float) -> Optional[float]:
    return None if np.isnan(value) else float(value)


class ConditionEvaluator:
    """
    Computes screening conditions for one coin.

    The series must be newest first. Index 0 may be the still-forming day, so
    the candle conditions compare index 1 (previous completed day) against
    index 2. Every condition is computed on first access only.
    """

    def __init__(self, candles: List[Candle]):
        if len(candles) < MIN_CANDLES:
            raise InsufficientHistoryError(len(candles), MIN_CANDLES)
        self.candles = candles

    # ------------------------------------------------------------------
    # Series
    # ------------------------------------------------------------------

    @cached_property
    def closes(self) -> np.ndarray:
        """Closing prices, oldest first."""
        return np.array([c.close for c in reversed(self.candles)], dtype=float)

    @cached_property
    def hma20(self) -> np.ndarray:
        """HMA(20), newest first."""
        return calculate_hma(self.closes, 20)[::-1]

    @cached_property
    def hma5(self) -> np.ndarray:
        """HMA(5), newest first."""
        return calculate_hma(self.closes, 5)[::-1]

    @cached_property
    def average_volume(self) -> float:
        """Mean volume over the most recent prior days."""
        window = self.candles[1:1 + VOLUME_LOOKBACK_DAYS]
        return float(np.mean([c.volume for c in window]))

    @cached_property
    def breakout_strength(self) -> float:
        """Percent by which the previous close cleared the prior high (0 if it did not)."""
        if not self.breakout_above_prior_high:
            return 0.0
        prior_high = self.candles[2].high
        if prior_high <= 0:
            return 0.0
        return (self.candles[1].close - prior_high) / prior_high * 100

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    @cached_property
    def previous_day_bullish(self) -> bool:
        """Previous completed day closed above its open."""
        return is_bullish_candle(self.candles[1])

    @cached_property
    def breakout_above_prior_high(self) -> bool:
        """Previous close cleared the high of the day before."""
        return is_breakout_above_previous_high(self.candles[1], self.candles[2])

    @cached_property
    def hma20_crossover(self) -> bool:
        """Close crossed from below to above HMA(20) between day 1 and day 0."""
        return is_crossover(
            self.candles[1].close,
            self.candles[0].close,
            self.hma20[1],
            self.hma20[0],
        )

    @cached_property
    def volume_surge(self) -> bool:
        """Latest volume above 1.5x the ten-day average."""
        if self.average_volume <= 0:
            return False
        return self.candles[0].volume > self.average_volume * VOLUME_SURGE_MULTIPLIER

    @cached_property
    def volume_surge_3day(self) -> bool:
        """Previous day's volume against the three days before it."""
        window = self.candles[2:2 + SHORT_VOLUME_LOOKBACK_DAYS]
        if len(window) < SHORT_VOLUME_LOOKBACK_DAYS:
            return False
        avg_volume = float(np.mean([c.volume for c in window]))
        if avg_volume <= 0:
            return False
        return self.candles[1].volume > avg_volume * VOLUME_SURGE_MULTIPLIER

    @cached_property
    def short_term_uptrend(self) -> bool:
        """HMA(5) rising over the last three days."""
        hma5 = self.hma5
        # NaN comparisons are False
        return bool(hma5[0] > hma5[1] > hma5[2])

    @cached_property
    def strong_breakout(self) -> bool:
        """Breakout of more than 2% above the prior high."""
        return self.breakout_strength > STRONG_BREAKOUT_PCT

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @cached_property
    def rsi14(self) -> Optional[float]:
        """RSI(14) of the latest close."""
        rsi = calculate_rsi(self.closes, 14)
        return float(rsi[-1]) if len(rsi) else None

    def conditions(self) -> Dict[Condition, bool]:
        """All standard conditions, in declaration order."""
        return {
            Condition.PREVIOUS_DAY_BULLISH: self.previous_day_bullish,
            Condition.BREAKOUT_ABOVE_PRIOR_HIGH: self.breakout_above_prior_high,
            Condition.HMA20_CROSSOVER: self.hma20_crossover,
            Condition.VOLUME_SURGE: self.volume_surge,
            Condition.SHORT_TERM_UPTREND: self.short_term_uptrend,
            Condition.STRONG_BREAKOUT: self.strong_breakout,
        }

    def metrics(self) -> ScreeningMetrics:
        """Current HMA(20), volume ratio when surging, and RSI(14)."""
        volume_ratio = None
        if self.volume_surge:
            volume_ratio = self.candles[0].volume / self.average_volume
        return ScreeningMetrics(
            hma20=_defined(self.hma20[0]),
            volume_ratio=volume_ratio,
            rsi14=self.rsi14,
        )

    @property
    def current_price(self) -> float:
        """Latest close."""
        return self.candles[0].close
