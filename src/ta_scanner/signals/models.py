"""Technical analysis data models.

All value objects are frozen: an Analysis is built fresh for every
evaluation and handed to the caller, never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum


class Trend(str, Enum):
    """Trend classification shared by the SMA, RSI and MACD readers."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"


class MacdSignal(str, Enum):
    """Directional MACD sub-signal derived from line/signal/histogram signs."""

    NONE = "none"
    BUY = "buy"
    SELL = "sell"
    STRONG_BUY = "strong_buy"
    STRONG_SELL = "strong_sell"


class SignalAction(str, Enum):
    """Trade direction suggested by a signal."""

    BUY = "buy"
    SELL = "sell"


class SignalSource(str, Enum):
    """Indicator that produced a signal."""

    SMA = "SMA"
    RSI = "RSI"
    MACD = "MACD"


class SignalType(str, Enum):
    """Kind of discrete signal."""

    SMA_GOLDEN_CROSS = "sma_golden_cross"
    SMA_DEATH_CROSS = "sma_death_cross"
    RSI_OVERSOLD = "rsi_oversold"
    RSI_OVERBOUGHT = "rsi_overbought"
    MACD_CROSSOVER = "macd_crossover"


@dataclass(frozen=True)
class MACDResult:
    """Last-point MACD reading."""

    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class IndicatorSet:
    """Indicator snapshot for one analysis. None marks insufficient history."""

    short_sma: float | None = None
    long_sma: float | None = None
    rsi: float | None = None
    macd: MACDResult | None = None


@dataclass(frozen=True)
class Signal:
    """A typed trade suggestion with a strength in [0, 100]."""

    type: SignalType
    action: SignalAction
    strength: float
    description: str
    source: SignalSource


@dataclass(frozen=True)
class Analysis:
    """Complete technical analysis of one candle sequence.

    Trend fields are None when the indicator they read from had
    insufficient data. ``score`` is None when scoring is disabled or
    there was too little history to analyze at all.
    """

    indicators: IndicatorSet = field(default_factory=IndicatorSet)
    sma_trend: Trend | None = None
    sma_strength: float | None = None
    rsi_trend: Trend | None = None
    macd_trend: Trend | None = None
    macd_signal: MacdSignal = MacdSignal.NONE
    signals: tuple[Signal, ...] = ()
    score: float | None = None
    current_price: float | None = None

    @property
    def short_sma(self) -> float | None:
        return self.indicators.short_sma

    @property
    def long_sma(self) -> float | None:
        return self.indicators.long_sma

    @property
    def rsi(self) -> float | None:
        return self.indicators.rsi

    @property
    def macd(self) -> MACDResult | None:
        return self.indicators.macd

    @property
    def strongest_signal(self) -> Signal | None:
        """First signal with the highest strength (insertion order breaks ties)."""
        return max(self.signals, key=lambda s: s.strength, default=None)
