"""Screening engine: conditions, strategies and the scan orchestrator."""

from .conditions import ConditionEvaluator
from .strategies import (
    ScreeningStrategy,
    StrategyOutcome,
    AllConditionsStrategy,
    BullishBreakoutStrategy,
    HMACrossoverStrategy,
    PremiumHMAStrategy,
    PremiumBullishStrategy,
    get_strategy,
)
from .orchestrator import ScreeningService

__all__ = [
    "ConditionEvaluator",
    "ScreeningStrategy",
    "StrategyOutcome",
    "AllConditionsStrategy",
    "BullishBreakoutStrategy",
    "HMACrossoverStrategy",
    "PremiumHMAStrategy",
    "PremiumBullishStrategy",
    "get_strategy",
    "ScreeningService",
]
