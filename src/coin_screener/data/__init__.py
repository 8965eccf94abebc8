"""Market data module."""

from .connector import (
    CandleRepository,
    UpbitConnector,
    CCXTConnector,
    create_connector,
    normalize_candles,
)

__all__ = [
    "CandleRepository",
    "UpbitConnector",
    "CCXTConnector",
    "create_connector",
    "normalize_candles",
]
