"""Entry point for the technical analysis scanner.

Wires all components together, optionally embeds the FastAPI dashboard,
and starts the orchestrator. When the dashboard is enabled (default), the
scanner and dashboard share a single asyncio event loop via uvicorn's
programmatic API and FastAPI's lifespan context manager.

Component wiring order (in _build_components):
1. MarketDataProvider (ccxt exchange chosen by EXCHANGE_EXCHANGE_ID)
2. ReasoningService (only when REASONING_ENABLED)
3. Recommender (thresholds + optional reasoning)
4. MarketScanner
5. AlertMonitor
6. Orchestrator
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from ta_scanner.config import AppSettings
from ta_scanner.exchange.ccxt_client import CcxtMarketDataProvider
from ta_scanner.logging import get_logger, setup_logging
from ta_scanner.market_data.alerts import AlertMonitor
from ta_scanner.market_data.scanner import MarketScanner
from ta_scanner.orchestrator import Orchestrator
from ta_scanner.recommendation.reasoning import OpenAIReasoningService
from ta_scanner.recommendation.thresholder import Recommender


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Does NOT connect to the exchange; that happens in Orchestrator.start().

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("ta_scanner.main")

    provider = CcxtMarketDataProvider(settings.exchange)

    reasoning_service = None
    if settings.reasoning.enabled:
        if not settings.reasoning.api_key.get_secret_value():
            logger.warning(
                "reasoning_api_key_missing",
                note="External reasoning enabled without an API key; "
                "every request will fall back to local recommendations.",
            )
        reasoning_service = OpenAIReasoningService(settings.reasoning)

    recommender = Recommender(settings.thresholds, reasoning_service)
    scanner = MarketScanner(provider, settings.scan, recommender=recommender)
    alert_monitor = AlertMonitor(settings.alerts)

    orchestrator = Orchestrator(
        settings=settings,
        provider=provider,
        scanner=scanner,
        recommender=recommender,
        alert_monitor=alert_monitor,
    )

    return {
        "provider": provider,
        "reasoning_service": reasoning_service,
        "recommender": recommender,
        "scanner": scanner,
        "alert_monitor": alert_monitor,
        "orchestrator": orchestrator,
    }


async def _shutdown(components: dict[str, Any]) -> None:
    await components["orchestrator"].stop()
    reasoning_service = components["reasoning_service"]
    if reasoning_service is not None:
        await reasoning_service.close()


def _setup_signal_handlers(orchestrator: Orchestrator) -> None:
    """Register SIGINT/SIGTERM to stop the orchestrator gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("ta_scanner.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(orchestrator.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage component lifecycle within the FastAPI application.

    On startup: stores components on app.state, subscribes the WebSocket
    hub to scan events and starts the orchestrator.

    On shutdown: stops auto-scan, closes the provider and reasoning client.
    """
    logger = get_logger("ta_scanner.main")
    components = app.state.components

    app.state.orchestrator = components["orchestrator"]
    app.state.scanner = components["scanner"]
    components["scanner"].add_listener(app.state.hub.publish_scan_event)

    await components["orchestrator"].start()
    logger.info("lifespan_started", exchange=components["provider"].exchange_id)

    yield

    task = app.state.scan_task
    if task is not None and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await _shutdown(components)
    logger.info("ta_scanner_stopped")


async def run() -> None:
    """Run the scanner.

    When the dashboard is enabled (DASHBOARD_ENABLED=true, the default) the
    lifespan manages startup and shutdown under uvicorn. Otherwise the
    orchestrator runs headless until SIGINT/SIGTERM; auto-scan should be
    enabled (SCAN_AUTO_START=true) for it to do anything.
    """
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("ta_scanner.main")

    components = _build_components(settings)

    if settings.dashboard.enabled:
        from ta_scanner.dashboard.app import create_dashboard_app

        app = create_dashboard_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            exchange=settings.exchange.exchange_id,
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        orchestrator: Orchestrator = components["orchestrator"]
        _setup_signal_handlers(orchestrator)

        logger.info(
            "starting_without_dashboard",
            exchange=settings.exchange.exchange_id,
            auto_scan=settings.scan.auto_start,
            timeframe=settings.scan.timeframe,
        )

        try:
            await orchestrator.start()
            await orchestrator.wait_stopped()
        finally:
            await _shutdown(components)
            logger.info("ta_scanner_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
