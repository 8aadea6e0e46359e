"""Recommendation value objects."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from ta_scanner.signals.models import Signal


class RecommendationAction(str, Enum):
    """Five-level trade recommendation."""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


@dataclass(frozen=True)
class RecommendationDetails:
    """Context a recommendation was produced from."""

    symbol: str
    timeframe: str
    current_price: float | None
    score: float | None
    signals: tuple[Signal, ...] = ()
    source: Literal["local", "external"] = "local"
    raw_response: str | None = None


@dataclass(frozen=True)
class Recommendation:
    """Action, integer confidence in [0, 100] and a human-readable rationale."""

    action: RecommendationAction
    confidence: int
    reasoning: str
    details: RecommendationDetails
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ReasoningRequest:
    """Structured input for an external reasoning service."""

    symbol: str
    score: float | None
    signals: tuple[Signal, ...]
    current_price: float | None
    timeframe: str
    short_period: int | None = None
    long_period: int | None = None
