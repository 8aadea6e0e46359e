"""Shared test fixtures for the technical analysis scanner."""

from unittest.mock import AsyncMock

import pytest

from ta_scanner.config import AppSettings, ScanSettings
from ta_scanner.exchange.client import MarketDataProvider
from ta_scanner.exchange.types import Candle, Ticker


def make_candles(
    closes: list[float],
    volumes: list[float] | None = None,
    spread: float = 0.0,
    start_ts: int = 1_700_000_000_000,
    step_ms: int = 60_000,
) -> list[Candle]:
    """Build oldest-first candles from closes.

    High and low sit ``spread`` (a fraction) above and below the close.
    """
    if volumes is None:
        volumes = [1000.0] * len(closes)
    return [
        Candle(
            timestamp=start_ts + i * step_ms,
            open=close,
            high=close * (1 + spread),
            low=close * (1 - spread),
            close=close,
            volume=volume,
        )
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


def flat_closes(n: int = 50, price: float = 100.0) -> list[float]:
    """Constant prices: RSI 100 (overbought sell, strength 80), no SMA or MACD signal."""
    return [price] * n


def growth_closes(n: int = 50, rate: float = 1.01, start: float = 100.0) -> list[float]:
    """Exponential rise: MACD strong_buy (strength 90) is the strongest signal."""
    return [start * rate**i for i in range(n)]


@pytest.fixture
def app_settings() -> AppSettings:
    """AppSettings with test defaults (no API keys, no external reasoning)."""
    return AppSettings(log_level="DEBUG")


@pytest.fixture
def scan_settings() -> ScanSettings:
    """Scan settings with defaults (threshold 70, notify at 80)."""
    return ScanSettings()


@pytest.fixture
def mock_provider() -> AsyncMock:
    """Market data provider with a small liquid universe."""
    provider = AsyncMock(spec=MarketDataProvider)
    provider.fetch_markets.return_value = {
        "BTC/USDT": {"symbol": "BTC/USDT"},
        "ETH/USDT": {"symbol": "ETH/USDT"},
        "SOL/USDT": {"symbol": "SOL/USDT"},
    }
    provider.fetch_tickers.return_value = {
        "BTC/USDT": Ticker(symbol="BTC/USDT", last=100.0, quote_volume=9_000_000.0, percentage=1.5),
        "ETH/USDT": Ticker(symbol="ETH/USDT", last=100.0, quote_volume=5_000_000.0, percentage=-0.5),
        "SOL/USDT": Ticker(symbol="SOL/USDT", last=100.0, quote_volume=2_000_000.0, percentage=3.0),
    }
    provider.fetch_ticker.return_value = Ticker(
        symbol="BTC/USDT", last=100.0, quote_volume=9_000_000.0
    )
    provider.fetch_ohlcv.return_value = make_candles(flat_closes())
    return provider


@pytest.fixture
def candle_factory():
    """Expose make_candles to tests as a fixture."""
    return make_candles


@pytest.fixture
def series():
    """Named close-price generators with known strongest signals."""
    return {"flat": flat_closes, "growth": growth_closes}
