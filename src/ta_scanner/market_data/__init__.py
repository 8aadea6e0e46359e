"""Market scanning pipeline, universe selection and alerts."""

from ta_scanner.market_data.alerts import AlertMonitor
from ta_scanner.market_data.models import (
    Alert,
    AlertKind,
    LiquidPair,
    ScanEvent,
    ScanEventKind,
    ScanProgress,
    ScanResult,
    ScanState,
)
from ta_scanner.market_data.scanner import MarketScanner, rank_results
from ta_scanner.market_data.universe import select_liquid_pairs

__all__ = [
    "Alert",
    "AlertKind",
    "AlertMonitor",
    "LiquidPair",
    "MarketScanner",
    "ScanEvent",
    "ScanEventKind",
    "ScanProgress",
    "ScanResult",
    "ScanState",
    "rank_results",
    "select_liquid_pairs",
]
