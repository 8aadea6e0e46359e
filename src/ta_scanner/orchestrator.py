"""Application orchestrator -- wires the provider, scanner, recommender and alerts.

Owns component lifecycle (connect, auto-scan, shutdown) and the
single-symbol analysis flow:
  1. FETCH: ticker and the last ``candle_limit`` candles
  2. ANALYZE: single-symbol profile with the scan weights
  3. RECOMMEND: external reasoning when configured, local otherwise
  4. ALERT: price-level and signal-strength checks

Provider failures in the single-symbol flow are not swallowed: they reach
the caller as ProviderError.
"""

import asyncio
from dataclasses import dataclass

from ta_scanner.config import AppSettings
from ta_scanner.exchange.client import MarketDataProvider
from ta_scanner.exchange.types import Ticker
from ta_scanner.logging import get_logger
from ta_scanner.market_data.alerts import AlertMonitor
from ta_scanner.market_data.models import Alert
from ta_scanner.market_data.scanner import MarketScanner
from ta_scanner.recommendation.models import Recommendation
from ta_scanner.recommendation.thresholder import Recommender
from ta_scanner.signals.analyzer import TechnicalAnalyzer, single_symbol_profile
from ta_scanner.signals.models import Analysis

logger = get_logger(__name__)


@dataclass(frozen=True)
class SymbolReport:
    """Everything produced by one single-symbol analysis."""

    symbol: str
    timeframe: str
    short_period: int
    long_period: int
    ticker: Ticker
    analysis: Analysis
    recommendation: Recommendation
    alerts: tuple[Alert, ...] = ()


class Orchestrator:
    """Top-level coordinator for the scanner application.

    Args:
        settings: Application-wide settings.
        provider: Market data provider.
        scanner: Market scanner.
        recommender: Recommendation engine shared with the scanner.
        alert_monitor: Alert evaluator.
    """

    def __init__(
        self,
        settings: AppSettings,
        provider: MarketDataProvider,
        scanner: MarketScanner,
        recommender: Recommender,
        alert_monitor: AlertMonitor,
    ) -> None:
        self._settings = settings
        self._provider = provider
        self._scanner = scanner
        self._recommender = recommender
        self._alert_monitor = alert_monitor
        self._running = False
        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def scanner(self) -> MarketScanner:
        return self._scanner

    @property
    def recommender(self) -> Recommender:
        return self._recommender

    @property
    def alert_monitor(self) -> AlertMonitor:
        return self._alert_monitor

    async def start(self) -> None:
        """Connect the provider and start auto-scan when configured."""
        if self._running:
            logger.warning("orchestrator_already_running")
            return
        try:
            await self._provider.connect()
        except Exception:
            await self._provider.close()
            raise
        self._running = True
        self._stop_event.clear()
        if self._settings.scan.auto_start:
            await self._scanner.start_auto_scan()
        logger.info(
            "orchestrator_started",
            auto_scan=self._settings.scan.auto_start,
            external_reasoning=self._recommender.external_enabled,
        )

    async def stop(self) -> None:
        """Stop auto-scan and close the provider."""
        if not self._running:
            return
        self._running = False
        await self._scanner.stop_auto_scan()
        await self._provider.close()
        self._stop_event.set()
        logger.info("orchestrator_stopped")

    async def wait_stopped(self) -> None:
        """Block until stop() has been called."""
        await self._stop_event.wait()

    async def analyze_symbol(
        self,
        symbol: str,
        timeframe: str | None = None,
        short_period: int | None = None,
        long_period: int | None = None,
    ) -> SymbolReport:
        """Analyze one symbol on demand.

        Args:
            symbol: Unified symbol, e.g. "BTC/USDT".
            timeframe: Candle timeframe. Defaults to the analysis settings.
            short_period: Fast SMA period. Defaults to the analysis settings.
            long_period: Slow SMA period. Defaults to the analysis settings.

        Returns:
            SymbolReport with ticker, analysis, recommendation and fired alerts.

        Raises:
            ProviderError: Ticker or candles could not be fetched.
        """
        analysis_settings = self._settings.analysis
        timeframe = timeframe or analysis_settings.timeframe
        short_period = short_period or analysis_settings.short_period
        long_period = long_period or analysis_settings.long_period

        ticker = await self._provider.fetch_ticker(symbol)
        candles = await self._provider.fetch_ohlcv(
            symbol, timeframe, None, analysis_settings.candle_limit
        )

        analyzer = TechnicalAnalyzer(
            single_symbol_profile(short_period, long_period),
            weights=self._settings.scan.weights,
            scoring_enabled=self._settings.scan.scoring_enabled,
        )
        analysis = analyzer.analyze(candles, ticker.last)

        recommendation = await self._recommender.recommend(
            symbol,
            analysis,
            current_price=analysis.current_price,
            timeframe=timeframe,
            short_period=short_period,
            long_period=long_period,
        )

        alerts = [
            *self._alert_monitor.check_price(symbol, analysis.current_price),
            *self._alert_monitor.check_signals(symbol, analysis.signals),
        ]

        logger.info(
            "symbol_analyzed",
            symbol=symbol,
            timeframe=timeframe,
            candles=len(candles),
            score=analysis.score,
            signals=len(analysis.signals),
            action=recommendation.action.value,
            alerts=len(alerts),
        )
        return SymbolReport(
            symbol=symbol,
            timeframe=timeframe,
            short_period=short_period,
            long_period=long_period,
            ticker=ticker,
            analysis=analysis,
            recommendation=recommendation,
            alerts=tuple(alerts),
        )
