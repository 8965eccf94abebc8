"""Market data connectors for the coin universe and daily candles."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

import aiohttp
import ccxt.async_support as ccxt

from ..core.models import Coin, Candle
from ..core.exceptions import DataUnavailableError

logger = logging.getLogger(__name__)


class CandleRepository(ABC):
    """Abstract source of coins and daily candles.

    Implementations never raise past this boundary: failures are logged and
    reported as empty results.
    """

    @abstractmethod
    async def get_coins(self) -> List[Coin]:
        """Get the coin universe for the configured quote currency."""
        pass

    @abstractmethod
    async def get_candles(self, market: str, count: int = 30) -> List[Candle]:
        """Get up to *count* most recent daily candles, in any order."""
        pass

    @abstractmethod
    async def close(self):
        """Close connection."""
        pass


def normalize_candles(candles: List[Candle]) -> List[Candle]:
    """Sort candles newest first, dropping repeated trading days."""
    ordered = sorted(candles, key=lambda c: c.timestamp, reverse=True)
    result: List[Candle] = []
    for candle in ordered:
        if result and result[-1].timestamp == candle.timestamp:
            continue
        result.append(candle)
    return result


def _unique_by_market(coins: List[Coin]) -> List[Coin]:
    seen = set()
    unique: List[Coin] = []
    for coin in coins:
        if coin.market in seen:
            continue
        seen.add(coin.market)
        unique.append(coin)
    return unique


class UpbitConnector(CandleRepository):
    """Upbit public REST API connector."""

    BASE_URL = "https://api.upbit.com/v1"

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        self.quote_currency = self.config.get('quote_currency', 'KRW')
        self.base_url = self.config.get('base_url', self.BASE_URL)
        self.timeout = self.config.get('timeout_seconds', 10)
        self._session: Optional[aiohttp.ClientSession] = None
        logger.info(f"Initialized Upbit connector (quote={self.quote_currency})")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def _get_json(self, path: str, params: Dict, market: str = "*"):
        session = await self._get_session()
        async with session.get(f"{self.base_url}{path}", params=params) as resp:
            if resp.status != 200:
                body = await resp.text()
                raise DataUnavailableError(market, f"HTTP {resp.status}: {body[:200]}")
            return await resp.json()

    async def get_coins(self) -> List[Coin]:
        """Get all markets quoted in the configured currency."""
        try:
            data = await self._get_json("/market/all", {"isDetails": "false"})
            prefix = f"{self.quote_currency}-"
            coins = [
                Coin(
                    market=item['market'],
                    korean_name=item.get('korean_name'),
                    english_name=item.get('english_name'),
                )
                for item in data
                if item.get('market', '').startswith(prefix)
            ]
            coins = _unique_by_market(coins)
            logger.info(f"Fetched {len(coins)} {self.quote_currency} markets from Upbit")
            return coins
        except Exception as e:
            logger.error(f"Error fetching markets: {e}")
            return []

    async def get_candles(self, market: str, count: int = 30) -> List[Candle]:
        """Get daily candles for a market."""
        try:
            data = await self._get_json(
                "/candles/days", {"market": market, "count": count}, market=market
            )
            candles = [self._parse_candle(market, item) for item in data]
            logger.debug(f"Retrieved {len(candles)} daily candles for {market}")
            return candles
        except Exception as e:
            logger.error(f"Error fetching candles for {market}: {e}")
            return []

    @staticmethod
    def _parse_candle(market: str, item: Dict) -> Candle:
        day = datetime.fromisoformat(item['candle_date_time_utc']).replace(tzinfo=timezone.utc)
        return Candle(
            market=item.get('market', market),
            timestamp=day,
            open=item['opening_price'],
            high=item['high_price'],
            low=item['low_price'],
            close=item['trade_price'],
            volume=item['candle_acc_trade_volume'],
            quote_volume=item.get('candle_acc_trade_price'),
        )

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("Closed Upbit connector")


class CCXTConnector(CandleRepository):
    """CCXT-based connector for any supported exchange."""

    def __init__(self, exchange_name: str, config: Optional[Dict] = None):
        self.exchange_name = exchange_name
        self.config = config or {}
        self.quote_currency = self.config.get('quote_currency', 'USDT')

        exchange_class = getattr(ccxt, exchange_name)
        self.exchange = exchange_class({
            'enableRateLimit': True,
            'timeout': int(self.config.get('timeout_seconds', 30) * 1000),
        })
        logger.info(f"Initialized CCXT connector for {exchange_name} (quote={self.quote_currency})")

    async def get_coins(self) -> List[Coin]:
        """Get active spot markets quoted in the configured currency."""
        try:
            markets = await self.exchange.load_markets()
            coins = [
                Coin(market=symbol, english_name=info.get('base'))
                for symbol, info in markets.items()
                if info.get('active', True) is not False
                and info.get('quote') == self.quote_currency
                and info.get('spot', True)
            ]
            coins = _unique_by_market(coins)
            logger.info(f"Filtered {len(coins)} {self.quote_currency} markets from {len(markets)} total")
            return coins
        except Exception as e:
            logger.error(f"Error loading markets: {e}")
            return []

    async def get_candles(self, market: str, count: int = 30) -> List[Candle]:
        """Get daily OHLCV candles via fetch_ohlcv."""
        try:
            ohlcv = await self.exchange.fetch_ohlcv(market, '1d', limit=count)
            candles = [
                Candle(
                    market=market,
                    timestamp=datetime.fromtimestamp(row[0] / 1000, tz=timezone.utc),
                    open=row[1],
                    high=row[2],
                    low=row[3],
                    close=row[4],
                    volume=row[5] or 0.0,
                )
                for row in ohlcv
            ]
            logger.debug(f"Retrieved {len(candles)} daily candles for {market}")
            return candles
        except Exception as e:
            logger.error(f"Error fetching OHLCV for {market}: {e}")
            return []

    async def close(self):
        """Close exchange connection."""
        await self.exchange.close()
        logger.info(f"Closed connection to {self.exchange_name}")


def create_connector(config: Optional[Dict] = None) -> CandleRepository:
    """Build the connector named in *config* (``upbit`` or any ccxt exchange id)."""
    config = dict(config or {})
    name = config.pop('name', 'upbit')
    if name == 'upbit':
        return UpbitConnector(config)
    if not hasattr(ccxt, name):
        raise ValueError(f"Unknown market data provider: {name}")
    return CCXTConnector(name, config)
