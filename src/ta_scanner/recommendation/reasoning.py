"""External reasoning service: prompt building, response parsing and an
OpenAI-compatible client.

The service only returns raw model text. Parsing into an action lives
here too so the recommender can decide to fall back on any failure.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from ta_scanner.config import ReasoningSettings
from ta_scanner.exceptions import ReasoningResponseError, ReasoningServiceError
from ta_scanner.logging import get_logger
from ta_scanner.recommendation.models import ReasoningRequest, RecommendationAction

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an experienced trading analyst. Give precise trading "
    "recommendations based on technical analysis."
)

DEFAULT_CONFIDENCE = 50

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class ParsedReasoning:
    """Validated fields extracted from a reasoning service reply."""

    action: RecommendationAction
    confidence: int
    reasoning: str


def build_prompt(request: ReasoningRequest) -> str:
    """Render the user prompt sent to the reasoning model."""
    if request.signals:
        signals_text = ", ".join(f"{s.type.value} ({s.source.value})" for s in request.signals)
    else:
        signals_text = "none"
    score_text = f"{request.score:.1f}" if request.score is not None else "n/a"
    actions = " | ".join(f'"{a.value}"' for a in RecommendationAction)

    return (
        f"Analyze the following data for {request.symbol} on the {request.timeframe} timeframe:\n"
        "\n"
        f"1. Current price: {request.current_price}\n"
        f"2. Composite score: {score_text}%\n"
        f"3. Signals: {signals_text}\n"
        f"4. Indicator parameters: short period {request.short_period}, "
        f"long period {request.long_period}\n"
        "\n"
        "Reply with a trading recommendation as JSON:\n"
        "{\n"
        f'  "action": {actions},\n'
        '  "confidence": number from 0 to 100,\n'
        '  "reasoning": "detailed explanation"\n'
        "}\n"
    )


def _coerce_confidence(value: object) -> int:
    """Integer part of ``value`` clamped to [0, 100]; 50 when not numeric."""
    try:
        confidence = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_CONFIDENCE
    return min(100, max(0, confidence))


def parse_reasoning_response(text: str) -> ParsedReasoning:
    """Extract and validate the first JSON object embedded in ``text``.

    Args:
        text: Free-form model output.

    Returns:
        ParsedReasoning with an upper-cased, validated action.

    Raises:
        ReasoningResponseError: No JSON object, malformed JSON, missing
            ``action``/``reasoning``, or an action outside the enum.
    """
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        raise ReasoningResponseError("no JSON object in response")

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ReasoningResponseError(f"malformed JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ReasoningResponseError("response JSON is not an object")

    action_raw = payload.get("action")
    reasoning = payload.get("reasoning")
    if not action_raw or not reasoning:
        raise ReasoningResponseError("response is missing action or reasoning")

    try:
        action = RecommendationAction(str(action_raw).upper())
    except ValueError as e:
        raise ReasoningResponseError(f"invalid action: {action_raw}") from e

    return ParsedReasoning(
        action=action,
        confidence=_coerce_confidence(payload.get("confidence")),
        reasoning=str(reasoning),
    )


class ReasoningService(ABC):
    """Contract for an external advisor that turns a request into model text."""

    @abstractmethod
    async def complete(self, request: ReasoningRequest) -> str:
        """Return the raw response text for ``request``.

        Raises:
            ReasoningServiceError: The service could not produce a response.
        """
        ...


class OpenAIReasoningService(ReasoningService):
    """Reasoning service backed by any OpenAI-compatible chat completions endpoint.

    Args:
        settings: Endpoint, model and sampling configuration.
        client: Pre-built client, mainly for tests.
    """

    def __init__(self, settings: ReasoningSettings, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = self._settings.api_key.get_secret_value()
            if not api_key:
                raise ReasoningServiceError("reasoning service API key is not configured")
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
            )
        return self._client

    async def complete(self, request: ReasoningRequest) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._settings.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(request)},
                ],
                max_tokens=self._settings.max_tokens,
                temperature=self._settings.temperature,
            )
        except OpenAIError as e:
            raise ReasoningServiceError(f"reasoning request failed: {e}") from e

        if not response.choices:
            raise ReasoningServiceError("reasoning response has no choices")

        content = response.choices[0].message.content or ""
        logger.debug(
            "reasoning_response_received",
            symbol=request.symbol,
            model=self._settings.model,
            length=len(content),
        )
        return content.strip()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
