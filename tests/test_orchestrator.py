"""Tests for the orchestrator and application wiring.

Tests verify:
- Orchestrator connects on start and closes the provider on stop
- Auto-scan starts only when configured
- A failed connect releases the provider and propagates
- Single-symbol analysis fetches, analyzes, recommends and alerts
- Provider failures during analysis reach the caller
- _build_components wires external reasoning only when enabled
- The dashboard lifespan starts and stops the orchestrator
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from ta_scanner.config import AlertSettings, AppSettings, ReasoningSettings, ScanSettings
from ta_scanner.dashboard.app import create_dashboard_app
from ta_scanner.exceptions import ProviderError
from ta_scanner.main import _build_components, lifespan
from ta_scanner.market_data.alerts import AlertMonitor
from ta_scanner.market_data.models import AlertKind
from ta_scanner.market_data.scanner import MarketScanner
from ta_scanner.orchestrator import Orchestrator
from ta_scanner.recommendation.models import RecommendationAction
from ta_scanner.recommendation.reasoning import OpenAIReasoningService, ReasoningService
from ta_scanner.recommendation.thresholder import Recommender


def _orchestrator(
    settings: AppSettings,
    provider: AsyncMock,
    scanner: MarketScanner | AsyncMock | None = None,
    reasoning_service: ReasoningService | None = None,
) -> Orchestrator:
    recommender = Recommender(settings.thresholds, reasoning_service)
    if scanner is None:
        scanner = MarketScanner(provider, settings.scan, recommender, sleep=AsyncMock())
    return Orchestrator(
        settings=settings,
        provider=provider,
        scanner=scanner,
        recommender=recommender,
        alert_monitor=AlertMonitor(settings.alerts),
    )


class TestOrchestratorLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, app_settings: AppSettings, mock_provider: AsyncMock) -> None:
        orchestrator = _orchestrator(app_settings, mock_provider)

        await orchestrator.start()
        assert orchestrator.is_running is True
        assert orchestrator.scanner.auto_scan_running is False
        mock_provider.connect.assert_awaited_once()

        await orchestrator.stop()
        await orchestrator.wait_stopped()
        assert orchestrator.is_running is False
        mock_provider.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_auto_start_scan(self, mock_provider: AsyncMock) -> None:
        settings = AppSettings(scan=ScanSettings(auto_start=True))
        scanner = AsyncMock(spec=MarketScanner)
        orchestrator = _orchestrator(settings, mock_provider, scanner=scanner)

        await orchestrator.start()
        scanner.start_auto_scan.assert_awaited_once()

        await orchestrator.stop()
        scanner.stop_auto_scan.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_failure_closes_provider(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        mock_provider.connect.side_effect = ProviderError("fetch_markets", reason="down")
        orchestrator = _orchestrator(app_settings, mock_provider)

        with pytest.raises(ProviderError):
            await orchestrator.start()

        assert orchestrator.is_running is False
        mock_provider.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop_when_not_running(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        orchestrator = _orchestrator(app_settings, mock_provider)
        await orchestrator.stop()
        mock_provider.close.assert_not_awaited()


class TestAnalyzeSymbol:
    """Tests for the single-symbol analysis flow."""

    @pytest.mark.asyncio
    async def test_defaults_from_analysis_settings(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        orchestrator = _orchestrator(app_settings, mock_provider)

        report = await orchestrator.analyze_symbol("BTC/USDT")

        mock_provider.fetch_ticker.assert_awaited_once_with("BTC/USDT")
        mock_provider.fetch_ohlcv.assert_awaited_once_with("BTC/USDT", "1h", None, 50)
        assert (report.timeframe, report.short_period, report.long_period) == ("1h", 5, 15)
        assert report.analysis.current_price == 100.0
        assert report.analysis.strongest_signal.strength == 80.0
        assert report.recommendation.action is RecommendationAction.STRONG_SELL
        assert report.recommendation.details.source == "local"
        assert report.alerts == ()
        assert orchestrator.recommender.last_recommendation is report.recommendation

    @pytest.mark.asyncio
    async def test_scoring_disabled(self, mock_provider: AsyncMock) -> None:
        settings = AppSettings(scan=ScanSettings(scoring_enabled=False))
        orchestrator = _orchestrator(settings, mock_provider)

        report = await orchestrator.analyze_symbol("BTC/USDT")

        assert report.analysis.score is None
        assert report.recommendation.action is RecommendationAction.HOLD
        assert report.recommendation.confidence == 50

    @pytest.mark.asyncio
    async def test_fires_alerts(self, mock_provider: AsyncMock) -> None:
        settings = AppSettings(
            alerts=AlertSettings(
                price_enabled=True,
                price_above=95.0,
                signals_enabled=True,
                signal_min_strength=70.0,
            )
        )
        orchestrator = _orchestrator(settings, mock_provider)

        report = await orchestrator.analyze_symbol("BTC/USDT")

        assert [a.kind for a in report.alerts] == [AlertKind.PRICE_ABOVE, AlertKind.SIGNAL_SELL]
        assert len(orchestrator.alert_monitor.get_history()) == 2

    @pytest.mark.asyncio
    async def test_external_reasoning_used(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        service = AsyncMock(spec=ReasoningService)
        service.complete.return_value = '{"action": "HOLD", "confidence": 55, "reasoning": "Wait"}'
        orchestrator = _orchestrator(app_settings, mock_provider, reasoning_service=service)

        report = await orchestrator.analyze_symbol("BTC/USDT", "4h", 7, 21)

        request = service.complete.call_args.args[0]
        assert (request.timeframe, request.short_period, request.long_period) == ("4h", 7, 21)
        assert report.recommendation.action is RecommendationAction.HOLD
        assert report.recommendation.details.source == "external"

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        mock_provider.fetch_ohlcv.side_effect = ProviderError("fetch_ohlcv", "BTC/USDT", "timeout")
        orchestrator = _orchestrator(app_settings, mock_provider)

        with pytest.raises(ProviderError):
            await orchestrator.analyze_symbol("BTC/USDT")

        assert orchestrator.recommender.get_history() == []


class TestWiring:
    """Tests for component construction and the dashboard lifespan."""

    def test_build_components_local_only(self, app_settings: AppSettings) -> None:
        components = _build_components(app_settings)

        assert components["reasoning_service"] is None
        assert components["recommender"].external_enabled is False
        assert components["orchestrator"].scanner is components["scanner"]

    def test_build_components_with_reasoning(self) -> None:
        settings = AppSettings(
            reasoning=ReasoningSettings(enabled=True, api_key=SecretStr("sk-test"))
        )
        components = _build_components(settings)

        assert isinstance(components["reasoning_service"], OpenAIReasoningService)
        assert components["recommender"].external_enabled is True

    def test_lifespan_starts_and_stops(
        self, app_settings: AppSettings, mock_provider: AsyncMock
    ) -> None:
        mock_provider.exchange_id = "binance"
        orchestrator = _orchestrator(app_settings, mock_provider)
        app = create_dashboard_app(lifespan=lifespan)
        app.state.components = {
            "provider": mock_provider,
            "reasoning_service": None,
            "recommender": orchestrator.recommender,
            "scanner": orchestrator.scanner,
            "alert_monitor": orchestrator.alert_monitor,
            "orchestrator": orchestrator,
        }

        with TestClient(app) as client:
            assert orchestrator.is_running is True
            assert client.get("/api/status").json()["running"] is True

        assert orchestrator.is_running is False
        mock_provider.close.assert_awaited_once()
