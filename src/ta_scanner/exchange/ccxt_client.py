"""ccxt-backed market data provider.

Wraps any ``ccxt.async_support`` exchange class selected by id, loads
markets once on connect, converts payloads into Candle/Ticker types and
maps every ccxt failure onto ProviderError.
"""

import ccxt.async_support as ccxt_async

from ta_scanner.config import ExchangeSettings
from ta_scanner.exceptions import ProviderError, UnknownExchangeError
from ta_scanner.exchange.client import MarketDataProvider
from ta_scanner.exchange.types import Candle, Ticker, parse_ohlcv, parse_ticker
from ta_scanner.logging import get_logger

logger = get_logger(__name__)


class CcxtMarketDataProvider(MarketDataProvider):
    """Market data provider for any exchange supported by ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings

        exchange_class = getattr(ccxt_async, settings.exchange_id, None)
        if exchange_class is None or settings.exchange_id not in ccxt_async.exchanges:
            raise UnknownExchangeError(f"Unsupported exchange id: {settings.exchange_id}")

        config: dict = {
            "enableRateLimit": settings.enable_rate_limit,
            "options": {"defaultType": settings.default_type},
        }
        api_key = settings.api_key.get_secret_value()
        if api_key:
            config["apiKey"] = api_key
            config["secret"] = settings.api_secret.get_secret_value()

        self._exchange = exchange_class(config)
        self._markets: dict = {}

    @property
    def exchange_id(self) -> str:
        return self._settings.exchange_id

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info("connecting_to_exchange", exchange=self.exchange_id)
        await self.fetch_markets()
        logger.info(
            "exchange_connected",
            exchange=self.exchange_id,
            market_count=len(self._markets),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid leaking the HTTP session."""
        logger.info("closing_exchange_connection", exchange=self.exchange_id)
        await self._exchange.close()

    async def fetch_markets(self) -> dict[str, dict]:
        """Load (or return cached) market metadata keyed by symbol."""
        if self._markets:
            return self._markets
        try:
            self._markets = await self._exchange.load_markets()
        except ccxt_async.BaseError as e:
            raise ProviderError("fetch_markets", reason=str(e)) from e
        return self._markets

    async def fetch_ticker(self, symbol: str) -> Ticker:
        """Fetch current ticker data for a single symbol."""
        try:
            raw = await self._exchange.fetch_ticker(symbol)
        except ccxt_async.BaseError as e:
            raise ProviderError("fetch_ticker", symbol=symbol, reason=str(e)) from e
        return parse_ticker(symbol, raw)

    async def fetch_tickers(self) -> dict[str, Ticker]:
        """Fetch tickers for every listed symbol."""
        try:
            raw_tickers = await self._exchange.fetch_tickers()
        except ccxt_async.BaseError as e:
            raise ProviderError("fetch_tickers", reason=str(e)) from e

        tickers = {
            symbol: parse_ticker(symbol, raw) for symbol, raw in raw_tickers.items()
        }
        logger.debug("fetched_tickers", count=len(tickers))
        return tickers

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1h",
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Candle]:
        """Fetch OHLCV candles and normalize them to ascending timestamp order."""
        try:
            rows = await self._exchange.fetch_ohlcv(symbol, timeframe, since, limit)
        except ccxt_async.BaseError as e:
            raise ProviderError("fetch_ohlcv", symbol=symbol, reason=str(e)) from e

        # Some exchanges return newest-first; the analysis core expects oldest-first
        if len(rows) > 1 and rows[0][0] > rows[-1][0]:
            rows = list(reversed(rows))
        return parse_ohlcv(rows)
