"""Abstract market data provider interface.

Defines the contract the analysis core consumes. Scanner and analysis
code depend only on this interface; the concrete exchange is chosen by
the host application (see ``main.py``).
"""

from abc import ABC, abstractmethod

from ta_scanner.exchange.types import Candle, Ticker


class MarketDataProvider(ABC):
    """Abstract base class for market data providers.

    Every fetch is a network call that may fail. Implementations raise
    ``ProviderError`` on failure so callers see a single error type.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection and load markets."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...

    @abstractmethod
    async def fetch_markets(self) -> dict[str, dict]:
        """Return market metadata keyed by symbol."""
        ...

    @abstractmethod
    async def fetch_ticker(self, symbol: str) -> Ticker:
        """Fetch the current ticker for a single symbol."""
        ...

    @abstractmethod
    async def fetch_tickers(self) -> dict[str, Ticker]:
        """Fetch tickers for every symbol the exchange reports."""
        ...

    @abstractmethod
    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1h",
        since: int | None = None,
        limit: int | None = None,
    ) -> list[Candle]:
        """Fetch OHLCV candles, oldest first with strictly increasing timestamps."""
        ...
