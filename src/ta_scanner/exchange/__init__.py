"""Market data provider layer -- provider contract and ccxt integration."""

from ta_scanner.exchange.ccxt_client import CcxtMarketDataProvider
from ta_scanner.exchange.client import MarketDataProvider
from ta_scanner.exchange.types import Candle, Ticker, parse_ohlcv, parse_ticker

__all__ = [
    "Candle",
    "CcxtMarketDataProvider",
    "MarketDataProvider",
    "Ticker",
    "parse_ohlcv",
    "parse_ticker",
]
