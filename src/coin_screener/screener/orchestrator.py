"""Scan orchestrator: runs a strategy across the coin universe."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from ..core.enums import ScreeningType
from ..core.exceptions import DataUnavailableError
from ..core.models import Coin, Candle, ScreeningResult, ScanStats
from ..core.state_lock import StateManager
from ..data.connector import CandleRepository, normalize_candles
from .conditions import ConditionEvaluator
from .strategies import ScreeningStrategy, get_strategy

logger = logging.getLogger(__name__)


class ScreeningService:
    """
    Screens every coin in the universe against one strategy.

    Coins are processed strictly one at a time, with a fixed delay before
    every candle request to stay inside the provider's rate limit. Only one
    scan runs at a time; concurrent calls to :meth:`screen` queue behind it.
    Progress is a percentage owned by this instance and may be polled from
    other tasks at any time.
    """

    def __init__(self, repository: CandleRepository, config: Optional[Dict] = None):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults
        self.repository = repository

        self._progress = 0
        self._cancel_requested = False
        self._state = StateManager()
        self._last_results: List[ScreeningResult] = []
        self._last_stats: Optional[ScanStats] = None
        logger.info("Screening service initialized")

    @staticmethod
    def _default_config() -> Dict:
        return {
            "request_delay_seconds": 0.5,
            "candle_count": 30,
            "max_results": 20,
        }

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_progress(self) -> int:
        """Percentage of the current (or last) scan processed, 0-100."""
        return self._progress

    def reset_progress(self) -> None:
        """Set progress back to 0."""
        self._progress = 0

    def is_scanning(self) -> bool:
        """Whether a scan currently holds the scan lock."""
        return self._state.get_lock("scan").is_locked()

    def cancel(self) -> None:
        """Stop the running scan after the coin currently being processed."""
        if self.is_scanning():
            logger.info("Scan cancellation requested")
            self._cancel_requested = True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def screen(self, strategy_name: Union[ScreeningType, str]) -> List[ScreeningResult]:
        """Run a full scan with the named strategy and return matching coins."""
        # Unknown names fail before anything is fetched
        strategy = get_strategy(strategy_name)

        async with self._state.lock_state("scan"):
            return await self._run_scan(strategy)

    def get_last_results(self) -> List[ScreeningResult]:
        """Results of the last completed scan."""
        return list(self._last_results)

    def get_top_results(self, n: Optional[int] = None) -> List[ScreeningResult]:
        """Return top *n* results from the last scan."""
        if n is None:
            n = self.config["max_results"]
        return self._last_results[:n]

    def get_last_scan_stats(self) -> Optional[ScanStats]:
        """Counters of the last (or running) scan."""
        return self._last_stats

    # ------------------------------------------------------------------
    # Scan loop
    # ------------------------------------------------------------------

    async def _run_scan(self, strategy: ScreeningStrategy) -> List[ScreeningResult]:
        """Scan every coin in the universe with *strategy*."""
        self.reset_progress()
        self._cancel_requested = False
        stats = ScanStats(strategy=strategy.screening_type)
        self._last_stats = stats

        coins = await self.repository.get_coins()
        stats.total = len(coins)
        logger.info(f"Starting {strategy.screening_type.value} scan over {stats.total} coins")

        results: List[ScreeningResult] = []
        if not coins:
            logger.warning("Coin universe is empty, nothing to screen")
            stats.finished_at = datetime.now()
            self._last_results = results
            return results

        for index, coin in enumerate(coins):
            if self._cancel_requested:
                logger.warning(f"Scan cancelled after {stats.processed}/{stats.total} coins")
                stats.cancelled = True
                break

            result = await self._screen_coin(coin, strategy, stats)
            if result is not None:
                results.append(result)
                stats.matched += 1

            stats.processed = index + 1
            self._progress = (stats.processed * 100) // stats.total

        if strategy.screening_type == ScreeningType.ALL:
            # sort() is stable, so ties keep encounter order
            results.sort(key=lambda r: len(r.conditions), reverse=True)

        stats.finished_at = datetime.now()
        self._last_results = results
        logger.info(
            f"Finished {strategy.screening_type.value} scan: {stats.matched} matched, "
            f"{stats.skipped} skipped, {stats.failed} failed"
        )
        return results

    async def _screen_coin(
        self,
        coin: Coin,
        strategy: ScreeningStrategy,
        stats: ScanStats
    ) -> Optional[ScreeningResult]:
        """Fetch, evaluate and wrap a single coin; None when it is skipped or fails."""
        try:
            candles = await self._fetch_candles(coin.market)
        except DataUnavailableError as e:
            logger.error(f"Skipping {coin.market}: {e}")
            stats.failed += 1
            return None

        if len(candles) < strategy.min_candles:
            logger.debug(
                f"Skipping {coin.market}: {len(candles)} candles, "
                f"{strategy.min_candles} required"
            )
            stats.skipped += 1
            return None

        candles = normalize_candles(candles)
        if len(candles) < strategy.min_candles:
            stats.skipped += 1
            return None

        outcome = strategy.evaluate(ConditionEvaluator(candles))
        if not outcome.passed:
            return None

        logger.debug(f"{coin.market} passed {strategy.screening_type.value}: {outcome.conditions}")
        return ScreeningResult(
            coin=coin,
            candles=candles,
            conditions=outcome.conditions,
            current_price=outcome.current_price,
            metrics=outcome.metrics,
        )

    async def _fetch_candles(self, market: str) -> List[Candle]:
        """Wait out the request delay, then fetch candles."""
        await asyncio.sleep(self.config["request_delay_seconds"])
        try:
            candles = await self.repository.get_candles(market, self.config["candle_count"])
        except Exception as e:
            raise DataUnavailableError(market, str(e)) from e
        if not candles:
            raise DataUnavailableError(market, "empty response")
        return candles
