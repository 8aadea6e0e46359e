"""Market scanner: batch technical analysis over a liquidity-ranked universe.

Pipeline per scan:
1. Fetch markets and tickers from the provider.
2. Keep the most liquid tradable symbols (fixed order for the run).
3. Sequentially fetch candles and analyze each symbol under the scan
   profile, keeping symbols whose strongest signal clears the threshold.
   A fixed delay follows every symbol and is the only rate limiting.
4. Rank results by strongest signal strength (stable).

Only one scan runs at a time. A second request while a scan is in flight
is rejected, not queued. Cancellation is checked between symbols.

Auto-scan triggers fire on a fixed schedule measured from the first scan.
A trigger whose deadline passes while a scan is still running is dropped.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import structlog

from ta_scanner.config import ScanSettings
from ta_scanner.exceptions import ProviderError, ScanInProgressError
from ta_scanner.exchange.client import MarketDataProvider
from ta_scanner.logging import get_logger
from ta_scanner.market_data.models import (
    LiquidPair,
    ScanEvent,
    ScanEventKind,
    ScanProgress,
    ScanResult,
    ScanState,
)
from ta_scanner.market_data.universe import select_liquid_pairs
from ta_scanner.recommendation.thresholder import Recommender
from ta_scanner.signals.analyzer import SCAN_PROFILE, TechnicalAnalyzer

logger = get_logger(__name__)

#: Delay after every symbol, in seconds.
REQUEST_DELAY_SECONDS = 0.3
#: Candles fetched per symbol.
OHLCV_LOOKBACK = 50

ScanListener = Callable[[ScanEvent], Awaitable[None]]


class MarketScanner:
    """Scans a liquidity-filtered universe and ranks symbols by signal strength.

    Args:
        provider: Market data source.
        settings: Default scan settings. A scan may override them.
        recommender: Optional. When given, every result carries a local
            recommendation.
        sleep: Awaitable sleep used for the inter-symbol delay and the
            auto-scan interval. Injected for tests.
        request_delay: Seconds to wait after each symbol.
        clock: Monotonic clock in seconds for the auto-scan schedule.
            Defaults to the running event loop's clock.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        settings: ScanSettings,
        recommender: Recommender | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        request_delay: float = REQUEST_DELAY_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._recommender = recommender
        self._sleep = sleep
        self._request_delay = request_delay
        self._clock = clock

        self._listeners: list[ScanListener] = []
        self._is_scanning = False
        self._cancel_event: asyncio.Event | None = None
        self._auto_task: asyncio.Task | None = None  # type: ignore[type-arg]

        self._state = ScanState.IDLE
        self._current = 0
        self._total = 0
        self._symbol: str | None = None
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None
        self._errors = 0
        self._run_results: list[ScanResult] = []

        self._last_results: list[ScanResult] = []
        self._last_scan_time: datetime | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def settings(self) -> ScanSettings:
        return self._settings

    @property
    def is_scanning(self) -> bool:
        return self._is_scanning

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def last_results(self) -> list[ScanResult]:
        return list(self._last_results)

    @property
    def last_scan_time(self) -> datetime | None:
        return self._last_scan_time

    @property
    def auto_scan_running(self) -> bool:
        return self._auto_task is not None and not self._auto_task.done()

    @property
    def progress(self) -> ScanProgress:
        return ScanProgress(
            state=self._state,
            current=self._current,
            total=self._total,
            symbol=self._symbol,
            started_at=self._started_at,
            finished_at=self._finished_at,
            results_count=len(self._run_results),
            errors=self._errors,
        )

    def add_listener(self, listener: ScanListener) -> None:
        """Register an async callback receiving every ScanEvent."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ScanListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _emit(self, kind: ScanEventKind, **payload: object) -> None:
        event = ScanEvent(kind=kind, payload=dict(payload))
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.warning("scan_listener_failed", kind=kind.value, exc_info=True)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def cancel_scan(self) -> bool:
        """Request cancellation of the in-flight scan.

        Returns:
            True if a scan was running and has been signalled.
        """
        if not self._is_scanning or self._cancel_event is None:
            return False
        self._cancel_event.set()
        logger.info("scan_cancel_requested")
        return True

    async def start_scan(
        self,
        settings: ScanSettings | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ScanResult]:
        """Run one full scan.

        Args:
            settings: Overrides the scanner's default settings for this run.
            cancel_event: Checked before each symbol. When set, the scan
                stops and returns the results gathered so far.

        Returns:
            Results ranked by strongest signal strength, descending.

        Raises:
            ScanInProgressError: Another scan is running. It is not affected.
            ProviderError: The universe (markets/tickers) could not be fetched.
        """
        if self._is_scanning:
            logger.info("scan_rejected_in_progress")
            raise ScanInProgressError("a scan is already in progress")

        self._is_scanning = True
        self._cancel_event = cancel_event if cancel_event is not None else asyncio.Event()
        scan_settings = settings or self._settings
        scan_id = uuid.uuid4().hex[:12]

        try:
            with structlog.contextvars.bound_contextvars(scan_id=scan_id):
                return await self._run_scan(scan_settings, self._cancel_event)
        except asyncio.CancelledError:
            self._state = ScanState.CANCELLED
            self._finished_at = datetime.now(timezone.utc)
            logger.info("scan_task_cancelled", scan_id=scan_id, scanned=self._current)
            await asyncio.shield(
                self._emit(
                    ScanEventKind.CANCELLED,
                    results=rank_results(self._run_results),
                    scanned=self._current,
                )
            )
            raise
        except Exception as e:
            if self._state is not ScanState.ERROR:
                self._state = ScanState.ERROR
                self._finished_at = datetime.now(timezone.utc)
                logger.error("scan_failed", scan_id=scan_id, error=str(e), exc_info=True)
                await self._emit(ScanEventKind.ERROR, error=str(e))
            raise
        finally:
            self._is_scanning = False
            self._cancel_event = None
            self._symbol = None

    async def _run_scan(self, settings: ScanSettings, cancel_event: asyncio.Event) -> list[ScanResult]:
        self._current = 0
        self._total = 0
        self._errors = 0
        self._run_results = []
        self._started_at = datetime.now(timezone.utc)
        self._finished_at = None

        self._state = ScanState.FETCHING_UNIVERSE
        logger.info(
            "scan_started",
            timeframe=settings.timeframe,
            max_pairs=settings.max_pairs,
            min_quote_volume=settings.min_quote_volume,
        )
        await self._emit(ScanEventKind.STARTED, timeframe=settings.timeframe)

        try:
            markets = await self._provider.fetch_markets()
            tickers = await self._provider.fetch_tickers()
        except Exception as e:
            self._state = ScanState.ERROR
            self._finished_at = datetime.now(timezone.utc)
            logger.error("scan_universe_fetch_failed", error=str(e))
            await self._emit(ScanEventKind.ERROR, error=str(e))
            if isinstance(e, ProviderError):
                raise
            raise ProviderError("fetch_universe", reason=str(e)) from e

        self._state = ScanState.FILTERING
        pairs = select_liquid_pairs(
            tickers, markets, settings.min_quote_volume, settings.max_pairs
        )
        self._total = len(pairs)
        logger.info("scan_universe_selected", tickers=len(tickers), pairs=len(pairs))

        analyzer = TechnicalAnalyzer(
            SCAN_PROFILE,
            weights=settings.weights,
            scoring_enabled=settings.scoring_enabled,
        )

        results = self._run_results
        for index, pair in enumerate(pairs):
            if cancel_event.is_set():
                return await self._finish_cancelled(results)

            self._state = ScanState.ANALYZING_SYMBOL
            self._current = index + 1
            self._symbol = pair.symbol
            await self._emit(
                ScanEventKind.PROGRESS,
                current=self._current,
                total=self._total,
                symbol=pair.symbol,
            )

            try:
                result = await self._scan_symbol(pair, settings, analyzer)
            except Exception as e:
                self._errors += 1
                logger.warning("symbol_analysis_failed", symbol=pair.symbol, error=str(e))
                result = None

            if result is not None:
                results.append(result)
                strength = result.strongest_signal.strength
                if settings.notify_on_signal and strength >= settings.notify_min_strength:
                    await self._emit(
                        ScanEventKind.SIGNAL,
                        symbol=pair.symbol,
                        signal=result.strongest_signal,
                    )

            await self._sleep(self._request_delay)

        self._state = ScanState.RANKING
        ranked = rank_results(results)

        self._last_results = ranked
        self._last_scan_time = datetime.now(timezone.utc)
        self._finished_at = self._last_scan_time
        self._state = ScanState.COMPLETE
        logger.info(
            "scan_complete",
            scanned=self._total,
            results=len(ranked),
            errors=self._errors,
        )
        await self._emit(ScanEventKind.COMPLETE, results=ranked, timestamp=self._last_scan_time)
        return ranked

    async def _finish_cancelled(self, results: list[ScanResult]) -> list[ScanResult]:
        ranked = rank_results(results)
        self._state = ScanState.CANCELLED
        self._finished_at = datetime.now(timezone.utc)
        logger.info("scan_cancelled", scanned=self._current, results=len(ranked))
        await self._emit(ScanEventKind.CANCELLED, results=ranked, scanned=self._current)
        return ranked

    async def _scan_symbol(
        self,
        pair: LiquidPair,
        settings: ScanSettings,
        analyzer: TechnicalAnalyzer,
    ) -> ScanResult | None:
        """Analyze one symbol; None when it has no signal above the threshold."""
        candles = await self._provider.fetch_ohlcv(
            pair.symbol, settings.timeframe, None, OHLCV_LOOKBACK
        )
        if not candles:
            return None

        analysis = analyzer.analyze(candles, pair.price)
        strongest = analysis.strongest_signal
        if strongest is None or strongest.strength < settings.signal_threshold:
            return None

        recommendation = None
        if self._recommender is not None:
            recommendation = self._recommender.recommend_local(
                pair.symbol, analysis, pair.price, settings.timeframe
            )

        logger.debug(
            "symbol_signal_found",
            symbol=pair.symbol,
            signal=strongest.type.value,
            strength=round(strongest.strength, 2),
            score=analysis.score,
        )
        return ScanResult(
            symbol=pair.symbol,
            price=pair.price,
            quote_volume=pair.quote_volume,
            change_24h=pair.change_24h,
            analysis=analysis,
            strongest_signal=strongest,
            recommendation=recommendation,
        )

    # ------------------------------------------------------------------
    # Auto-scan
    # ------------------------------------------------------------------

    async def start_auto_scan(self, settings: ScanSettings | None = None) -> None:
        """Scan now and then every ``refresh_interval_minutes`` until stopped."""
        if self.auto_scan_running:
            logger.warning("auto_scan_already_running")
            return
        scan_settings = settings or self._settings
        self._auto_task = asyncio.create_task(self._auto_scan_loop(scan_settings))
        logger.info(
            "auto_scan_started",
            interval_minutes=scan_settings.refresh_interval_minutes,
        )

    async def stop_auto_scan(self) -> None:
        """Stop the auto-scan task, cancelling any scan it is running."""
        if self._auto_task is not None:
            self._auto_task.cancel()
            try:
                await self._auto_task
            except asyncio.CancelledError:
                pass
            self._auto_task = None
            logger.info("auto_scan_stopped")

    async def _auto_scan_loop(self, settings: ScanSettings) -> None:
        interval = settings.refresh_interval_minutes * 60
        clock = self._clock or asyncio.get_running_loop().time
        next_at = clock()
        while True:
            if self._is_scanning:
                logger.info("auto_scan_trigger_dropped", reason="scan_in_progress")
            else:
                try:
                    await self.start_scan(settings)
                except asyncio.CancelledError:
                    raise
                except ScanInProgressError:
                    logger.info("auto_scan_trigger_dropped", reason="scan_in_progress")
                except Exception:
                    logger.warning("auto_scan_failed", exc_info=True)

            next_at += interval
            now = clock()
            # Deadlines that passed during the scan are skipped, not queued
            while next_at < now:
                logger.info("auto_scan_trigger_dropped", reason="scan_overran")
                next_at += interval
            await self._sleep(next_at - now)


def rank_results(results: list[ScanResult]) -> list[ScanResult]:
    """Sort by strongest signal strength descending, keeping scan order for ties."""
    return sorted(results, key=lambda r: r.strongest_signal.strength, reverse=True)
