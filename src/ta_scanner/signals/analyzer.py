"""Technical analysis aggregator.

Turns a candle sequence into an Analysis: indicator snapshot, trend
classifications, typed signals and an optional composite score.

Two analysis profiles exist side by side. The single-symbol profile uses
caller-chosen SMA periods and divides the SMA spread by 5 to get a signal
strength. The scan profile uses fixed 5/21 periods, multiplies the spread
by 5 and refuses to analyze fewer than 30 candles. They are tuned
independently and are kept as two named configurations.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from ta_scanner.config import ScoringWeights
from ta_scanner.exchange.types import Candle
from ta_scanner.logging import get_logger
from ta_scanner.signals.composite import ScoreFactors, compute_composite_score
from ta_scanner.signals.macd import compute_macd
from ta_scanner.signals.models import Analysis, IndicatorSet
from ta_scanner.signals.moving_average import compute_sma
from ta_scanner.signals.rsi import compute_rsi
from ta_scanner.signals.rules import SmaStrengthMode, build_signals
from ta_scanner.signals.trend import classify_macd, classify_rsi_trend, classify_sma_trend
from ta_scanner.signals.volume import compute_average_volume

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisProfile:
    """Named analysis configuration.

    Args:
        name: Profile identifier, used in logs.
        short_period: Fast SMA period.
        long_period: Slow SMA period.
        sma_strength_mode: How the SMA spread becomes a signal strength.
        sma_strength_factor: Divisor or multiplier for the SMA spread.
        min_candles: Below this many candles the analysis is empty.
    """

    name: str
    short_period: int
    long_period: int
    sma_strength_mode: SmaStrengthMode
    sma_strength_factor: float = 5
    min_candles: int = 0


def single_symbol_profile(short_period: int = 5, long_period: int = 15) -> AnalysisProfile:
    """Profile for on-demand analysis of one symbol with user-chosen periods."""
    return AnalysisProfile(
        name="single_symbol",
        short_period=short_period,
        long_period=long_period,
        sma_strength_mode=SmaStrengthMode.DIVIDE,
        min_candles=0,
    )


#: Fixed profile used by the market scanner.
SCAN_PROFILE = AnalysisProfile(
    name="scan",
    short_period=5,
    long_period=21,
    sma_strength_mode=SmaStrengthMode.MULTIPLY,
    min_candles=30,
)


class TechnicalAnalyzer:
    """Computes an Analysis from candles under one profile.

    Args:
        profile: SMA periods, strength normalization and minimum history.
        weights: Composite score weights. None disables scoring.
        scoring_enabled: Switch scoring off even when weights are given.
    """

    def __init__(
        self,
        profile: AnalysisProfile,
        weights: ScoringWeights | None = None,
        scoring_enabled: bool = True,
    ) -> None:
        self._profile = profile
        self._weights = weights
        self._scoring_enabled = scoring_enabled

    @property
    def profile(self) -> AnalysisProfile:
        return self._profile

    def analyze(self, candles: Sequence[Candle], current_price: float | None = None) -> Analysis:
        """Analyze a candle sequence ordered oldest-first.

        Never raises for short history: indicators that cannot be computed
        are None and their factors abstain. Below the profile's minimum
        candle count an empty Analysis is returned.

        Args:
            candles: OHLCV candles, oldest first.
            current_price: Latest traded price. Defaults to the last close.

        Returns:
            A fresh Analysis.
        """
        if not candles or len(candles) < self._profile.min_candles:
            logger.debug(
                "analysis_insufficient_candles",
                profile=self._profile.name,
                candles=len(candles),
                required=self._profile.min_candles,
            )
            return Analysis(current_price=current_price)

        closes = [c.close for c in candles]
        volumes = [c.volume for c in candles]
        last = candles[-1]
        if current_price is None:
            current_price = last.close

        indicators = IndicatorSet(
            short_sma=compute_sma(closes, self._profile.short_period),
            long_sma=compute_sma(closes, self._profile.long_period),
            rsi=compute_rsi(closes),
            macd=compute_macd(closes),
        )

        sma_trend, sma_strength = classify_sma_trend(indicators.short_sma, indicators.long_sma)
        rsi_trend = classify_rsi_trend(indicators.rsi)
        macd_trend, macd_signal = classify_macd(indicators.macd)

        signals = build_signals(
            sma_trend=sma_trend,
            sma_strength=sma_strength,
            rsi_trend=rsi_trend,
            rsi=indicators.rsi,
            macd_signal=macd_signal,
            short_period=self._profile.short_period,
            long_period=self._profile.long_period,
            strength_mode=self._profile.sma_strength_mode,
            strength_factor=self._profile.sma_strength_factor,
        )

        score: float | None = None
        if self._scoring_enabled and self._weights is not None:
            score = compute_composite_score(
                ScoreFactors(
                    sma_trend=sma_trend,
                    sma_strength=sma_strength,
                    rsi=indicators.rsi,
                    macd_trend=macd_trend,
                    macd_signal=macd_signal,
                    has_macd=indicators.macd is not None,
                    current_volume=last.volume,
                    average_volume=compute_average_volume(volumes),
                    high=last.high,
                    low=last.low,
                    close=last.close,
                ),
                self._weights,
            )

        return Analysis(
            indicators=indicators,
            sma_trend=sma_trend,
            sma_strength=sma_strength,
            rsi_trend=rsi_trend,
            macd_trend=macd_trend,
            macd_signal=macd_signal,
            signals=tuple(signals),
            score=score,
            current_price=current_price,
        )
