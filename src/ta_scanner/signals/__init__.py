"""Technical analysis: indicators, trend classification, signals and scoring.

Everything in this package is synchronous and side-effect free apart
from logging.
"""

from ta_scanner.signals.analyzer import (
    SCAN_PROFILE,
    AnalysisProfile,
    TechnicalAnalyzer,
    single_symbol_profile,
)
from ta_scanner.signals.composite import ScoreFactors, compute_composite_score
from ta_scanner.signals.macd import compute_macd
from ta_scanner.signals.models import (
    Analysis,
    IndicatorSet,
    MACDResult,
    MacdSignal,
    Signal,
    SignalAction,
    SignalSource,
    SignalType,
    Trend,
)
from ta_scanner.signals.moving_average import RunningEMA, compute_ema_series, compute_sma
from ta_scanner.signals.rsi import compute_rsi
from ta_scanner.signals.rules import SmaStrengthMode, build_signals, pick_strongest_signal
from ta_scanner.signals.trend import classify_macd, classify_rsi_trend, classify_sma_trend
from ta_scanner.signals.volume import compute_average_volume

__all__ = [
    "SCAN_PROFILE",
    "Analysis",
    "AnalysisProfile",
    "IndicatorSet",
    "MACDResult",
    "MacdSignal",
    "RunningEMA",
    "ScoreFactors",
    "Signal",
    "SignalAction",
    "SignalSource",
    "SignalType",
    "SmaStrengthMode",
    "TechnicalAnalyzer",
    "Trend",
    "build_signals",
    "classify_macd",
    "classify_rsi_trend",
    "classify_sma_trend",
    "compute_average_volume",
    "compute_composite_score",
    "compute_ema_series",
    "compute_macd",
    "compute_rsi",
    "compute_sma",
    "pick_strongest_signal",
    "single_symbol_profile",
]
