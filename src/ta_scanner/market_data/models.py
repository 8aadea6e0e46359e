"""Scanner and alert value objects."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ta_scanner.recommendation.models import Recommendation
from ta_scanner.signals.models import Analysis, Signal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanState(str, Enum):
    """Scanner pipeline state."""

    IDLE = "idle"
    FETCHING_UNIVERSE = "fetching_universe"
    FILTERING = "filtering"
    ANALYZING_SYMBOL = "analyzing_symbol"
    RANKING = "ranking"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


class ScanEventKind(str, Enum):
    STARTED = "started"
    PROGRESS = "progress"
    SIGNAL = "signal"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LiquidPair:
    """A symbol that passed the liquidity filter, with its ticker snapshot."""

    symbol: str
    quote_volume: float
    price: float | None
    change_24h: float | None


@dataclass(frozen=True)
class ScanResult:
    """A symbol whose strongest signal cleared the scan threshold."""

    symbol: str
    price: float | None
    quote_volume: float
    change_24h: float | None
    analysis: Analysis
    strongest_signal: Signal
    recommendation: Recommendation | None = None
    scanned_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ScanEvent:
    """Notification pushed to scan listeners."""

    kind: ScanEventKind
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ScanProgress:
    """Snapshot of the scanner's in-flight counters."""

    state: ScanState
    current: int = 0
    total: int = 0
    symbol: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    results_count: int = 0
    errors: int = 0


class AlertKind(str, Enum):
    PRICE_ABOVE = "price_above"
    PRICE_BELOW = "price_below"
    SIGNAL_BUY = "signal_buy"
    SIGNAL_SELL = "signal_sell"


@dataclass(frozen=True)
class Alert:
    """A fired alert. Delivery is up to the consumer."""

    kind: AlertKind
    symbol: str
    message: str
    price: float | None = None
    level: float | None = None
    signal: Signal | None = None
    timestamp: datetime = field(default_factory=_utcnow)
