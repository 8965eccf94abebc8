"""Core data models for the screening engine."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, validator

from .enums import ScreeningType


class Coin(BaseModel):
    """A tradable market."""

    market: str = Field(description="Market code, e.g. KRW-BTC or BTC/KRW")
    korean_name: Optional[str] = Field(default=None, description="Korean display name")
    english_name: Optional[str] = Field(default=None, description="English display name")

    class Config:
        frozen = True


class Candle(BaseModel):
    """One trading day of OHLCV data."""

    market: str = Field(description="Market code")
    timestamp: datetime = Field(description="Trading day (UTC)")

    # Price data
    open: float = Field(description="Opening price")
    high: float = Field(description="High price")
    low: float = Field(description="Low price")
    close: float = Field(description="Closing (trade) price")

    # Volume data
    volume: float = Field(description="Cumulative traded volume")
    quote_volume: Optional[float] = Field(
        default=None, description="Cumulative traded price (quote currency)"
    )

    class Config:
        frozen = True

    @validator('open', 'high', 'low', 'close', 'volume')
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Prices and volume must be non-negative")
        return v


class ScreeningMetrics(BaseModel):
    """Derived metrics attached to a screening result."""

    hma20: Optional[float] = Field(default=None, description="Current HMA(20) value")
    volume_ratio: Optional[float] = Field(
        default=None, description="Latest volume over the 10-day average, when surging"
    )
    rsi14: Optional[float] = Field(default=None, description="RSI(14) of the latest close")


class ScreeningResult(BaseModel):
    """A coin that passed a screening strategy."""

    coin: Coin = Field(description="Screened coin")
    candles: List[Candle] = Field(description="Candle series, most recent first")
    conditions: List[str] = Field(description="Condition labels that held")
    current_price: Optional[float] = Field(default=None, description="Latest close")
    metrics: Optional[ScreeningMetrics] = Field(default=None, description="Derived metrics")


@dataclass
class ScanStats:
    """Counters for a single scan."""
    strategy: ScreeningType
    total: int = 0
    processed: int = 0
    matched: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
