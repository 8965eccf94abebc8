"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from coin_screener.core.models import Coin, Candle
from coin_screener.data.connector import CandleRepository

LATEST_DAY = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_candle(
    days_ago: int,
    open: float = 100.0,
    high: float = 101.0,
    low: float = 99.0,
    close: float = 100.0,
    volume: float = 100.0,
    market: str = "KRW-TEST",
) -> Candle:
    """Create a daily candle *days_ago* days before the latest trading day."""
    return Candle(
        market=market,
        timestamp=LATEST_DAY - timedelta(days=days_ago),
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def make_series(overrides: Dict[int, Dict], length: int, market: str = "KRW-TEST") -> List[Candle]:
    """
    Flat series (open 100, high 101, low 99, close 100, volume 100), newest
    first, with per-day overrides keyed by index (0 = latest).
    """
    return [make_candle(i, market=market, **overrides.get(i, {})) for i in range(length)]


def crossover_series(
    day1: Optional[Dict] = None,
    day0_volume: float = 100.0,
    length: int = 30,
    market: str = "KRW-TEST",
) -> List[Candle]:
    """
    Flat closes at 100, a dip to 90 on day 1 and a jump to 120 on day 0.

    HMA(20) is ~98.93 on day 1 and ~100.39 on day 0, so the close crosses
    above it. HMA(5) is 100, 93.33, 107.33 over days 2, 1, 0: no uptrend.
    """
    return make_series(
        {
            0: dict(open=90.0, high=121.0, low=90.0, close=120.0, volume=day0_volume),
            1: day1 or dict(open=92.0, high=93.0, low=89.0, close=90.0),
        },
        length,
        market=market,
    )


class InMemoryRepository(CandleRepository):
    """Candle repository backed by dicts, recording the calls it receives."""

    def __init__(self, candles_by_market: Optional[Dict[str, List[Candle]]] = None, coins=None):
        self.candles_by_market = candles_by_market or {}
        if coins is None:
            coins = [Coin(market=m) for m in self.candles_by_market]
        self.coins = coins
        self.calls: List[str] = []
        self.closed = False

    async def get_coins(self) -> List[Coin]:
        return list(self.coins)

    async def get_candles(self, market: str, count: int = 30) -> List[Candle]:
        self.calls.append(market)
        return list(self.candles_by_market.get(market, []))[:count]

    async def close(self):
        self.closed = True


@pytest.fixture
def flat_series():
    """Thirty flat daily candles."""
    return make_series({}, 30)


@pytest.fixture
def fast_config():
    """Service config without request delay."""
    return {"request_delay_seconds": 0, "candle_count": 30}
