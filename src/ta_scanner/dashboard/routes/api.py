"""JSON API endpoints: scanner control, scan results, single-symbol analysis,
recommendation history and alerts."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ta_scanner.dashboard.serializers import to_jsonable
from ta_scanner.exceptions import ProviderError, ScanInProgressError
from ta_scanner.market_data.scanner import MarketScanner
from ta_scanner.orchestrator import Orchestrator

log = structlog.get_logger(__name__)

router = APIRouter()


def _scanner(request: Request) -> MarketScanner:
    return request.app.state.scanner


def _log_scan_task_result(task: asyncio.Task) -> None:  # type: ignore[type-arg]
    if task.cancelled():
        return
    exc = task.exception()
    if isinstance(exc, ScanInProgressError):
        log.info("scan_request_dropped", reason="scan_in_progress")
    elif exc is not None:
        log.warning("background_scan_failed", error=str(exc))


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Scanner and orchestrator status with live progress counters."""
    orchestrator: Orchestrator = request.app.state.orchestrator
    scanner = _scanner(request)
    return JSONResponse(content={
        "running": orchestrator.is_running,
        "is_scanning": scanner.is_scanning,
        "auto_scan_running": scanner.auto_scan_running,
        "last_scan_time": to_jsonable(scanner.last_scan_time),
        "progress": to_jsonable(scanner.progress),
        "external_reasoning": orchestrator.recommender.external_enabled,
    })


@router.get("/scan/results")
async def get_scan_results(request: Request) -> JSONResponse:
    """Results of the last completed scan, strongest signal first."""
    scanner = _scanner(request)
    return JSONResponse(content={
        "scanned_at": to_jsonable(scanner.last_scan_time),
        "results": to_jsonable(scanner.last_results),
    })


@router.post("/scan/start")
async def start_scan(request: Request) -> JSONResponse:
    """Start a scan in the background. 409 when a scan is already running."""
    scanner = _scanner(request)
    task = getattr(request.app.state, "scan_task", None)
    if scanner.is_scanning or (task is not None and not task.done()):
        return JSONResponse(status_code=409, content={"error": "scan already in progress"})

    task = asyncio.create_task(scanner.start_scan())
    task.add_done_callback(_log_scan_task_result)
    request.app.state.scan_task = task
    log.info("scan_requested")
    return JSONResponse(status_code=202, content={"status": "started"})


@router.post("/scan/cancel")
async def cancel_scan(request: Request) -> JSONResponse:
    """Ask the running scan to stop before its next symbol."""
    cancelled = _scanner(request).cancel_scan()
    return JSONResponse(content={"cancelled": cancelled})


@router.post("/scan/auto/start")
async def start_auto_scan(request: Request) -> JSONResponse:
    scanner = _scanner(request)
    await scanner.start_auto_scan()
    return JSONResponse(content={"auto_scan_running": scanner.auto_scan_running})


@router.post("/scan/auto/stop")
async def stop_auto_scan(request: Request) -> JSONResponse:
    scanner = _scanner(request)
    await scanner.stop_auto_scan()
    return JSONResponse(content={"auto_scan_running": scanner.auto_scan_running})


@router.get("/analysis/{symbol:path}")
async def get_analysis(
    request: Request,
    symbol: str,
    timeframe: str | None = None,
    short_period: int | None = None,
    long_period: int | None = None,
) -> JSONResponse:
    """Single-symbol analysis with recommendation. 502 when market data is unavailable."""
    orchestrator: Orchestrator = request.app.state.orchestrator
    try:
        report = await orchestrator.analyze_symbol(
            symbol,
            timeframe=timeframe,
            short_period=short_period,
            long_period=long_period,
        )
    except ProviderError as e:
        log.warning("analysis_request_failed", symbol=symbol, error=str(e))
        return JSONResponse(status_code=502, content={"error": str(e)})

    content = to_jsonable(report)
    strongest = report.analysis.strongest_signal
    content["strongest_signal"] = to_jsonable(strongest)
    return JSONResponse(content=content)


@router.get("/recommendations")
async def get_recommendations(request: Request, limit: int = 20) -> JSONResponse:
    """Most recent recommendations, oldest first."""
    orchestrator: Orchestrator = request.app.state.orchestrator
    history = orchestrator.recommender.get_history(limit=limit)
    return JSONResponse(content=to_jsonable(history))


@router.get("/alerts")
async def get_alerts(request: Request, limit: int = 50) -> JSONResponse:
    """Alert history, oldest first."""
    orchestrator: Orchestrator = request.app.state.orchestrator
    return JSONResponse(content=to_jsonable(orchestrator.alert_monitor.get_history(limit=limit)))
