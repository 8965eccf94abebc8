"""Core enumerations for the screening engine."""

from enum import Enum


class ScreeningType(str, Enum):
    """Screening strategies."""
    ALL = "all"
    BULLISH_BREAKOUT = "bullish_breakout"
    HMA_CROSSOVER = "hma_crossover"
    PREMIUM_HMA = "premium_hma"
    PREMIUM_BULLISH = "premium_bullish"


class Condition(str, Enum):
    """Condition labels, in the order they are reported."""
    PREVIOUS_DAY_BULLISH = "Previous day bullish"
    BREAKOUT_ABOVE_PRIOR_HIGH = "Previous close above prior high"
    HMA20_CROSSOVER = "20 HMA crossover"
    VOLUME_SURGE = "Volume surge"
    SHORT_TERM_UPTREND = "Short-term uptrend"
    STRONG_BREAKOUT = "Strong breakout (2%+)"
