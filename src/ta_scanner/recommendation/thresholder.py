"""Map a composite score and signals to a five-level recommendation.

Local thresholding is always available. When an external reasoning
service is configured it is asked first, and any failure on that path
(transport, missing JSON, bad fields, unknown action) falls back to the
local result without surfacing an error.
"""

from collections import deque
from decimal import ROUND_HALF_UP, Decimal

from ta_scanner.config import RecommendationThresholds
from ta_scanner.exceptions import ReasoningResponseError, ReasoningServiceError
from ta_scanner.logging import get_logger
from ta_scanner.recommendation.models import (
    ReasoningRequest,
    Recommendation,
    RecommendationAction,
    RecommendationDetails,
)
from ta_scanner.recommendation.reasoning import ReasoningService, parse_reasoning_response
from ta_scanner.signals.models import Analysis

logger = get_logger(__name__)

_TREND_LABELS: dict[RecommendationAction, str] = {
    RecommendationAction.STRONG_BUY: "Strong bullish",
    RecommendationAction.BUY: "Bullish",
    RecommendationAction.HOLD: "Neutral",
    RecommendationAction.SELL: "Bearish",
    RecommendationAction.STRONG_SELL: "Strong bearish",
}


def _round_confidence(value: float) -> int:
    """Round half-up to an int and clamp to [0, 100]."""
    rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return min(100, max(0, rounded))


def classify_score(
    score: float | None, thresholds: RecommendationThresholds
) -> tuple[RecommendationAction, int]:
    """Threshold a score into an action and confidence.

    Args:
        score: Composite score in [0, 100], or None when unavailable.
        thresholds: Cut points, strictly decreasing.

    Returns:
        (action, confidence). None scores are HOLD with confidence 50.
    """
    if score is None:
        return RecommendationAction.HOLD, 50

    if score >= thresholds.strong_bull:
        return RecommendationAction.STRONG_BUY, _round_confidence(score)
    if score >= thresholds.bull:
        return RecommendationAction.BUY, _round_confidence(score)
    if score <= thresholds.strong_bear:
        return RecommendationAction.STRONG_SELL, _round_confidence(100 - score)
    if score <= thresholds.bear:
        return RecommendationAction.SELL, _round_confidence(100 - score)
    return RecommendationAction.HOLD, 50


def build_reasoning(action: RecommendationAction, analysis: Analysis, symbol: str) -> str:
    """Templated rationale naming the trend and listing signal types."""
    score_text = f"{analysis.score:.1f}" if analysis.score is not None else "n/a"
    text = f"{_TREND_LABELS[action]} trend ({score_text}%) on {symbol}. "
    if analysis.signals:
        listed = ", ".join(f"{s.type.value} ({s.source.value})" for s in analysis.signals)
        return text + f"Signals: {listed}."
    return text + "No clear signals to act on."


class Recommender:
    """Produces recommendations and keeps a bounded history of them.

    History is per instance and appended from a single event loop.

    Args:
        thresholds: Score cut points.
        reasoning_service: Optional external advisor. None = local only.
    """

    def __init__(
        self,
        thresholds: RecommendationThresholds,
        reasoning_service: ReasoningService | None = None,
    ) -> None:
        self._thresholds = thresholds
        self._reasoning_service = reasoning_service
        self._history: deque[Recommendation] = deque(maxlen=thresholds.history_limit)

    @property
    def external_enabled(self) -> bool:
        return self._reasoning_service is not None

    @property
    def last_recommendation(self) -> Recommendation | None:
        return self._history[-1] if self._history else None

    def get_history(self, limit: int = 0) -> list[Recommendation]:
        """Recommendations oldest-first; ``limit > 0`` keeps only the newest ``limit``."""
        items = list(self._history)
        if limit > 0:
            return items[-limit:]
        return items

    def clear_history(self) -> None:
        self._history.clear()

    def recommend_local(
        self,
        symbol: str,
        analysis: Analysis,
        current_price: float | None = None,
        timeframe: str = "",
    ) -> Recommendation:
        """Threshold the analysis score locally and record the result."""
        action, confidence = classify_score(analysis.score, self._thresholds)
        recommendation = Recommendation(
            action=action,
            confidence=confidence,
            reasoning=build_reasoning(action, analysis, symbol),
            details=RecommendationDetails(
                symbol=symbol,
                timeframe=timeframe,
                current_price=current_price,
                score=analysis.score,
                signals=analysis.signals,
                source="local",
            ),
        )
        self._history.append(recommendation)
        logger.debug(
            "recommendation_created",
            symbol=symbol,
            action=action.value,
            confidence=confidence,
            source="local",
        )
        return recommendation

    async def recommend(
        self,
        symbol: str,
        analysis: Analysis,
        current_price: float | None = None,
        timeframe: str = "",
        short_period: int | None = None,
        long_period: int | None = None,
    ) -> Recommendation:
        """Ask the external service when configured, else threshold locally.

        Never raises for reasoning failures: they are logged at WARNING and
        the local recommendation is returned instead.
        """
        if self._reasoning_service is None:
            return self.recommend_local(symbol, analysis, current_price, timeframe)

        request = ReasoningRequest(
            symbol=symbol,
            score=analysis.score,
            signals=analysis.signals,
            current_price=current_price,
            timeframe=timeframe,
            short_period=short_period,
            long_period=long_period,
        )

        try:
            text = await self._reasoning_service.complete(request)
            parsed = parse_reasoning_response(text)
        except (ReasoningServiceError, ReasoningResponseError) as e:
            logger.warning("reasoning_fallback", symbol=symbol, error=str(e))
            return self.recommend_local(symbol, analysis, current_price, timeframe)
        except Exception as e:
            # unexpected client failures fall back the same way
            logger.warning(
                "reasoning_fallback",
                symbol=symbol,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self.recommend_local(symbol, analysis, current_price, timeframe)

        recommendation = Recommendation(
            action=parsed.action,
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
            details=RecommendationDetails(
                symbol=symbol,
                timeframe=timeframe,
                current_price=current_price,
                score=analysis.score,
                signals=analysis.signals,
                source="external",
                raw_response=text,
            ),
        )
        self._history.append(recommendation)
        logger.info(
            "recommendation_created",
            symbol=symbol,
            action=parsed.action.value,
            confidence=parsed.confidence,
            source="external",
        )
        return recommendation
