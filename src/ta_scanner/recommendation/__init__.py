"""Score thresholding and optional external reasoning."""

from ta_scanner.recommendation.models import (
    ReasoningRequest,
    Recommendation,
    RecommendationAction,
    RecommendationDetails,
)
from ta_scanner.recommendation.reasoning import (
    OpenAIReasoningService,
    ReasoningService,
    build_prompt,
    parse_reasoning_response,
)
from ta_scanner.recommendation.thresholder import Recommender, classify_score

__all__ = [
    "OpenAIReasoningService",
    "ReasoningRequest",
    "ReasoningService",
    "Recommendation",
    "RecommendationAction",
    "RecommendationDetails",
    "Recommender",
    "build_prompt",
    "classify_score",
    "parse_reasoning_response",
]
