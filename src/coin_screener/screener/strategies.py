"""Screening strategies built on the condition evaluator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
import logging

from ..core.enums import Condition, ScreeningType
from ..core.exceptions import InvalidStrategyError
from ..core.models import ScreeningMetrics
from .conditions import ConditionEvaluator

logger = logging.getLogger(__name__)


@dataclass
class StrategyOutcome:
    """Pass/fail decision with the labels of the conditions that held."""
    passed: bool
    conditions: List[str] = field(default_factory=list)
    current_price: Optional[float] = None
    metrics: Optional[ScreeningMetrics] = None


def _labels(checks: List[Tuple[Condition, bool]]) -> List[str]:
    return [condition.value for condition, held in checks if held]


class ScreeningStrategy(ABC):
    """Abstract base class for screening strategies."""

    screening_type: ScreeningType
    min_candles: int

    @abstractmethod
    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        """Decide whether the coin passes."""
        pass


class AllConditionsStrategy(ScreeningStrategy):
    """
    Combined screen.

    Needs two of the three base signals (bullish day, breakout, HMA20
    crossover) and one of the three confirmations (volume surge, short-term
    uptrend, strong breakout).
    """

    screening_type = ScreeningType.ALL
    min_candles = 22

    def __init__(self, min_base: int = 2, min_confirmations: int = 1):
        self.min_base = min_base
        self.min_confirmations = min_confirmations

    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        conditions = evaluator.conditions()

        base = [
            conditions[Condition.PREVIOUS_DAY_BULLISH],
            conditions[Condition.BREAKOUT_ABOVE_PRIOR_HIGH],
            conditions[Condition.HMA20_CROSSOVER],
        ]
        confirmations = [
            conditions[Condition.VOLUME_SURGE],
            conditions[Condition.SHORT_TERM_UPTREND],
            conditions[Condition.STRONG_BREAKOUT],
        ]
        passed = sum(base) >= self.min_base and sum(confirmations) >= self.min_confirmations

        if not passed:
            return StrategyOutcome(passed=False)
        return StrategyOutcome(
            passed=True,
            conditions=_labels(list(conditions.items())),
            current_price=evaluator.current_price,
            metrics=evaluator.metrics(),
        )


class BullishBreakoutStrategy(ScreeningStrategy):
    """Previous day bullish and closed above the prior day's high."""

    screening_type = ScreeningType.BULLISH_BREAKOUT
    min_candles = 3

    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        bullish = evaluator.previous_day_bullish
        breakout = evaluator.breakout_above_prior_high
        if not (bullish and breakout):
            return StrategyOutcome(passed=False)
        return StrategyOutcome(
            passed=True,
            conditions=_labels([
                (Condition.PREVIOUS_DAY_BULLISH, bullish),
                (Condition.BREAKOUT_ABOVE_PRIOR_HIGH, breakout),
            ]),
        )


class HMACrossoverStrategy(ScreeningStrategy):
    """Close crossed above HMA(20)."""

    screening_type = ScreeningType.HMA_CROSSOVER
    min_candles = 22

    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        if not evaluator.hma20_crossover:
            return StrategyOutcome(passed=False)
        return StrategyOutcome(passed=True, conditions=[Condition.HMA20_CROSSOVER.value])


class PremiumHMAStrategy(ScreeningStrategy):
    """HMA(20) crossover confirmed by a volume surge and a short-term uptrend."""

    screening_type = ScreeningType.PREMIUM_HMA
    min_candles = 22

    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        # Confirmations are only worth computing after a crossover
        if not evaluator.hma20_crossover:
            return StrategyOutcome(passed=False)

        checks = [
            (Condition.HMA20_CROSSOVER, True),
            (Condition.VOLUME_SURGE, evaluator.volume_surge),
            (Condition.SHORT_TERM_UPTREND, evaluator.short_term_uptrend),
        ]
        if not all(held for _, held in checks):
            return StrategyOutcome(passed=False)
        return StrategyOutcome(
            passed=True,
            conditions=_labels(checks),
            current_price=evaluator.current_price,
            metrics=evaluator.metrics(),
        )


class PremiumBullishStrategy(ScreeningStrategy):
    """
    Bullish breakout with a confirmation.

    Volume is judged on the previous day against the three days before it,
    not the ten-day window the other screens use.
    """

    screening_type = ScreeningType.PREMIUM_BULLISH
    min_candles = 5

    def evaluate(self, evaluator: ConditionEvaluator) -> StrategyOutcome:
        bullish = evaluator.previous_day_bullish
        breakout = evaluator.breakout_above_prior_high
        volume = evaluator.volume_surge_3day
        strong = evaluator.strong_breakout

        if not (bullish and breakout and (volume or strong)):
            return StrategyOutcome(passed=False)
        return StrategyOutcome(
            passed=True,
            conditions=_labels([
                (Condition.PREVIOUS_DAY_BULLISH, bullish),
                (Condition.BREAKOUT_ABOVE_PRIOR_HIGH, breakout),
                (Condition.VOLUME_SURGE, volume),
                (Condition.STRONG_BREAKOUT, strong),
            ]),
        )


STRATEGIES: Dict[ScreeningType, ScreeningStrategy] = {
    strategy.screening_type: strategy
    for strategy in (
        AllConditionsStrategy(),
        BullishBreakoutStrategy(),
        HMACrossoverStrategy(),
        PremiumHMAStrategy(),
        PremiumBullishStrategy(),
    )
}


def get_strategy(name: Union[ScreeningType, str]) -> ScreeningStrategy:
    """Look up a strategy by screening type or its string value."""
    try:
        screening_type = ScreeningType(name)
    except ValueError:
        raise InvalidStrategyError(name) from None
    return STRATEGIES[screening_type]
