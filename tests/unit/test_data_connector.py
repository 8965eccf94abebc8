"""Unit tests for market data connectors."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from coin_screener.core.exceptions import DataUnavailableError
from coin_screener.data.connector import (
    CCXTConnector,
    UpbitConnector,
    create_connector,
    normalize_candles,
)
from tests.conftest import make_candle

UPBIT_CANDLE = {
    "market": "KRW-BTC",
    "candle_date_time_utc": "2024-03-01T00:00:00",
    "candle_date_time_kst": "2024-03-01T09:00:00",
    "opening_price": 90_000_000.0,
    "high_price": 92_000_000.0,
    "low_price": 89_000_000.0,
    "trade_price": 91_000_000.0,
    "timestamp": 1709297999000,
    "candle_acc_trade_price": 250_000_000_000.0,
    "candle_acc_trade_volume": 2750.5,
}


class TestNormalizeCandles:
    def test_sorted_newest_first(self):
        candles = [make_candle(2), make_candle(0), make_candle(1)]
        result = normalize_candles(candles)
        assert [c.timestamp for c in result] == sorted(
            (c.timestamp for c in candles), reverse=True
        )

    def test_duplicate_days_collapsed(self):
        candles = [make_candle(0, close=1.0), make_candle(0, close=2.0), make_candle(1)]
        result = normalize_candles(candles)
        assert len(result) == 2
        assert result[0].close == 1.0

    def test_empty(self):
        assert normalize_candles([]) == []


class TestUpbitConnector:
    def test_parse_candle(self):
        candle = UpbitConnector._parse_candle("KRW-BTC", UPBIT_CANDLE)
        assert candle.timestamp == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert candle.open == 90_000_000.0
        assert candle.close == 91_000_000.0
        assert candle.volume == 2750.5
        assert candle.quote_volume == 250_000_000_000.0

    @pytest.mark.asyncio
    async def test_get_coins_filters_quote_currency(self):
        connector = UpbitConnector({"quote_currency": "KRW"})
        connector._get_json = AsyncMock(return_value=[
            {"market": "KRW-BTC", "korean_name": "비트코인", "english_name": "Bitcoin"},
            {"market": "BTC-ETH", "korean_name": "이더리움", "english_name": "Ethereum"},
            {"market": "KRW-ETH", "korean_name": "이더리움", "english_name": "Ethereum"},
            {"market": "KRW-BTC", "korean_name": "비트코인", "english_name": "Bitcoin"},
        ])

        coins = await connector.get_coins()

        assert [c.market for c in coins] == ["KRW-BTC", "KRW-ETH"]
        assert coins[0].english_name == "Bitcoin"

    @pytest.mark.asyncio
    async def test_get_coins_failure_returns_empty(self):
        connector = UpbitConnector()
        connector._get_json = AsyncMock(side_effect=DataUnavailableError("*", "HTTP 500"))
        assert await connector.get_coins() == []

    @pytest.mark.asyncio
    async def test_get_candles(self):
        connector = UpbitConnector()
        connector._get_json = AsyncMock(return_value=[UPBIT_CANDLE])

        candles = await connector.get_candles("KRW-BTC", 30)

        assert len(candles) == 1
        connector._get_json.assert_awaited_once_with(
            "/candles/days", {"market": "KRW-BTC", "count": 30}, market="KRW-BTC"
        )

    @pytest.mark.asyncio
    async def test_get_candles_failure_returns_empty(self):
        connector = UpbitConnector()
        connector._get_json = AsyncMock(side_effect=TimeoutError("slow"))
        assert await connector.get_candles("KRW-BTC") == []

    @pytest.mark.asyncio
    async def test_get_candles_malformed_payload_returns_empty(self):
        connector = UpbitConnector()
        connector._get_json = AsyncMock(return_value=[{"market": "KRW-BTC"}])
        assert await connector.get_candles("KRW-BTC") == []

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        await UpbitConnector().close()


class TestCCXTConnector:
    def _connector(self, exchange):
        connector = CCXTConnector.__new__(CCXTConnector)
        connector.exchange_name = "binance"
        connector.quote_currency = "USDT"
        connector.config = {}
        connector.exchange = exchange
        return connector

    @pytest.mark.asyncio
    async def test_get_coins(self):
        exchange = MagicMock()
        exchange.load_markets = AsyncMock(return_value={
            "BTC/USDT": {"active": True, "quote": "USDT", "base": "BTC", "spot": True},
            "ETH/BTC": {"active": True, "quote": "BTC", "base": "ETH", "spot": True},
            "SOL/USDT": {"active": False, "quote": "USDT", "base": "SOL", "spot": True},
            "BTC/USDT:USDT": {"active": True, "quote": "USDT", "base": "BTC", "spot": False},
        })

        coins = await self._connector(exchange).get_coins()

        assert [c.market for c in coins] == ["BTC/USDT"]
        assert coins[0].english_name == "BTC"

    @pytest.mark.asyncio
    async def test_get_candles(self):
        exchange = MagicMock()
        exchange.fetch_ohlcv = AsyncMock(return_value=[
            [1709251200000, 100.0, 110.0, 95.0, 105.0, 1234.0],
            [1709337600000, 105.0, 112.0, 104.0, 111.0, None],
        ])

        candles = await self._connector(exchange).get_candles("BTC/USDT", 2)

        exchange.fetch_ohlcv.assert_awaited_once_with("BTC/USDT", "1d", limit=2)
        assert candles[0].timestamp == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert candles[0].close == 105.0
        assert candles[1].volume == 0.0
        assert candles[0].quote_volume is None

    @pytest.mark.asyncio
    async def test_get_candles_error(self):
        exchange = MagicMock()
        exchange.fetch_ohlcv = AsyncMock(side_effect=Exception("rate limited"))
        assert await self._connector(exchange).get_candles("BTC/USDT") == []

    @pytest.mark.asyncio
    async def test_get_coins_error(self):
        exchange = MagicMock()
        exchange.load_markets = AsyncMock(side_effect=Exception("network"))
        assert await self._connector(exchange).get_coins() == []


class TestCreateConnector:
    def test_default_is_upbit(self):
        assert isinstance(create_connector(), UpbitConnector)

    def test_ccxt_exchange(self):
        with patch("coin_screener.data.connector.ccxt") as fake_ccxt:
            fake_ccxt.binance = MagicMock()
            connector = create_connector({"name": "binance", "quote_currency": "USDT"})
        assert isinstance(connector, CCXTConnector)
        assert connector.quote_currency == "USDT"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_connector({"name": "not_an_exchange"})
