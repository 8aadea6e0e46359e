"""Composite 0-100 score blending trend, momentum, volume and volatility.

The score starts neutral at 50 and each factor pushes it up or down by an
amount proportional to its weight. Factors whose inputs are unavailable
abstain. The result is clamped to [0, 100], and scoring is total: an
unexpected failure is logged and reported as the neutral 50.
"""

import math
from dataclasses import dataclass

from ta_scanner.config import ScoringWeights
from ta_scanner.logging import get_logger
from ta_scanner.signals.models import MacdSignal, Trend

logger = get_logger(__name__)

NEUTRAL_SCORE = 50.0

#: Volume ratios (current / trailing average) that trigger the volume factor.
_VOLUME_SURGE = 1.5
_VOLUME_ELEVATED = 1.2
_VOLUME_WEAK = 0.8

#: Percent candle range thresholds for the volatility factor.
_VOLATILITY_HIGH = 5.0
_VOLATILITY_MEDIUM = 2.0


@dataclass(frozen=True)
class ScoreFactors:
    """Inputs to the composite score, taken from the latest candle and indicators."""

    sma_trend: Trend | None = None
    sma_strength: float | None = None
    rsi: float | None = None
    macd_trend: Trend | None = None
    macd_signal: MacdSignal = MacdSignal.NONE
    has_macd: bool = False
    current_volume: float | None = None
    average_volume: float | None = None
    high: float | None = None
    low: float | None = None
    close: float | None = None


def _trend_term(factors: ScoreFactors, weights: ScoringWeights) -> float:
    if factors.sma_strength is None:
        return 0.0
    magnitude = weights.trend * 100 * min(factors.sma_strength / 10, 1)
    if factors.sma_trend is Trend.BULLISH:
        return magnitude
    if factors.sma_trend is Trend.BEARISH:
        return -magnitude
    return 0.0


def _rsi_term(rsi: float | None, weights: ScoringWeights) -> float:
    if rsi is None:
        return 0.0
    if rsi < 30:
        return weights.momentum * 100 * (1 - rsi / 30)
    if rsi > 70:
        return -weights.momentum * 100 * ((rsi - 70) / 30)
    return weights.momentum * 100 * ((rsi - 50) / 20)


def _macd_term(factors: ScoreFactors, weights: ScoringWeights) -> float:
    if not factors.has_macd:
        return 0.0
    if factors.macd_signal is MacdSignal.STRONG_BUY:
        return weights.momentum * 100
    if factors.macd_signal is MacdSignal.BUY:
        return weights.momentum * 70
    if factors.macd_signal is MacdSignal.STRONG_SELL:
        return -weights.momentum * 100
    if factors.macd_signal is MacdSignal.SELL:
        return -weights.momentum * 70
    if factors.macd_trend is Trend.BULLISH:
        return weights.momentum * 30
    if factors.macd_trend is Trend.BEARISH:
        return -weights.momentum * 30
    return 0.0


def _volume_term(factors: ScoreFactors, weights: ScoringWeights, direction: int) -> float:
    current = factors.current_volume
    average = factors.average_volume
    if current is None or average is None:
        return 0.0
    if current > average * _VOLUME_SURGE:
        return weights.volume * 100 * direction
    if current > average * _VOLUME_ELEVATED:
        return weights.volume * 70 * direction
    if current < average * _VOLUME_WEAK:
        return -weights.volume * 30 * direction
    return 0.0


def _volatility_term(factors: ScoreFactors, weights: ScoringWeights, direction: int) -> float:
    if factors.high is None or factors.low is None or not factors.close:
        return 0.0
    percent_range = (factors.high - factors.low) / factors.close * 100
    if percent_range > _VOLATILITY_HIGH:
        return weights.volatility * 100 * direction
    if percent_range > _VOLATILITY_MEDIUM:
        return weights.volatility * 60 * direction
    return weights.volatility * 20 * direction


def compute_composite_score(factors: ScoreFactors, weights: ScoringWeights) -> float:
    """Blend all factors into a single score clamped to [0, 100].

    Volume and volatility carry no direction of their own: they amplify the
    SMA trend (+1 when bullish, -1 for any other classified trend) and
    abstain when the SMA trend is unavailable.

    Args:
        factors: Latest indicator readings and candle values.
        weights: Per-factor weights. Not required to sum to one.

    Returns:
        Composite score in [0, 100]; 50.0 if scoring failed.
    """
    try:
        score = NEUTRAL_SCORE
        score += _trend_term(factors, weights)
        score += _rsi_term(factors.rsi, weights)
        score += _macd_term(factors, weights)

        if factors.sma_trend is not None:
            direction = 1 if factors.sma_trend is Trend.BULLISH else -1
            score += _volume_term(factors, weights, direction)
            score += _volatility_term(factors, weights, direction)

        if not math.isfinite(score):
            logger.warning("composite_score_not_finite", score=score)
            return NEUTRAL_SCORE

        return max(0.0, min(100.0, score))
    except Exception as e:
        logger.error("composite_score_failed", error=str(e), exc_info=True)
        return NEUTRAL_SCORE
