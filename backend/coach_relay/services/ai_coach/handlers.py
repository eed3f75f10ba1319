"""
Scenario handlers — the single code path behind every coach endpoint.

Dedicated routes and the legacy /fitness-coach route both call these, so
prompt text and normalization rules live in exactly one place.

Each handler: build prompt → one upstream call → normalize → CoachResult.
Only the upstream call sits inside the try; its failures become the
scenario's fallback response (500) and are logged, never re-raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel

from coach_relay.core.config import Settings, get_settings
from coach_relay.schemas.coach import (
    ErrorResponse,
    ImageEstimateRequest,
    NutritionReply,
    NutritionRequest,
    WorkoutPlan,
    WorkoutRequest,
)
from coach_relay.services.ai_coach.base import CompletionClient, Scenario, UpstreamError
from coach_relay.services.ai_coach.normalizer import (
    MealEstimateError,
    normalize,
)
from coach_relay.services.ai_coach.prompts import (
    GENERATION_PARAMS,
    Prompt,
    build_prompt,
)

logger = logging.getLogger(__name__)

WORKOUT_SERVER_ERROR = "The workout coach ran into a server error. Please try again in a little bit."
NUTRITION_SERVER_ERROR = "The nutrition coach ran into a server error. Please try again in a little bit."
NUTRITION_EMPTY_MESSAGE = "Please send a non-empty message."


@dataclass(frozen=True)
class CoachResult:
    """Status code plus the response body model for one coach request."""
    status_code: int
    body: BaseModel

    def content(self) -> Dict[str, Any]:
        # ErrorResponse only carries "raw" when there is one
        return self.body.model_dump(
            mode='json',
            by_alias=True,
            exclude_none=isinstance(self.body, ErrorResponse),
        )


def _error_info(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, UpstreamError):
        return exc.info()
    return {'message': str(exc), 'type': exc.__class__.__name__}


async def _complete(
    scenario: Scenario,
    prompt: Prompt,
    client: CompletionClient,
    config: Settings,
) -> str:
    params = GENERATION_PARAMS[scenario]
    model = config.GROQ_VISION_MODEL if params.vision else config.GROQ_MODEL

    logger.info(
        "%s — model=%s, client=%s, turns=%d",
        scenario.value,
        model,
        client.__class__.__name__,
        len(prompt.turns),
    )
    raw = await client.complete(
        model=model,
        messages=prompt.to_messages(),
        max_tokens=params.max_tokens,
        temperature=params.temperature,
    )
    logger.info("%s reply received — length=%d", scenario.value, len(raw))
    return raw


async def estimate_meal(
    request: ImageEstimateRequest,
    client: CompletionClient,
    config: Optional[Settings] = None,
) -> CoachResult:
    """Photo → macro totals for the requested servings."""
    config = config or get_settings()
    prompt = build_prompt(Scenario.MEAL_IMAGE, request)

    try:
        raw = await _complete(Scenario.MEAL_IMAGE, prompt, client, config)
    except Exception as exc:
        logger.error("nutrition-image upstream error: %s", _error_info(exc))
        return CoachResult(500, ErrorResponse(error='Server error'))

    try:
        estimate = normalize(raw, Scenario.MEAL_IMAGE)
    except MealEstimateError as exc:
        logger.error("Failed to parse nutrition-image JSON (%s): %r", exc.reason, exc.raw)
        return CoachResult(500, ErrorResponse(error='Failed to parse AI response', raw=exc.raw))

    return CoachResult(200, estimate)


async def coach_workout(
    request: WorkoutRequest,
    client: CompletionClient,
    config: Optional[Settings] = None,
) -> CoachResult:
    """Conversation history → workout reply plus an optional structured plan."""
    config = config or get_settings()
    prompt = build_prompt(Scenario.WORKOUT, request)

    try:
        raw = await _complete(Scenario.WORKOUT, prompt, client, config)
    except Exception as exc:
        logger.error("Workout coach error: %s", _error_info(exc))
        return CoachResult(500, WorkoutPlan(reply=WORKOUT_SERVER_ERROR, plan=None))

    return CoachResult(200, normalize(raw, Scenario.WORKOUT))


async def coach_nutrition(
    request: NutritionRequest,
    client: CompletionClient,
    config: Optional[Settings] = None,
) -> CoachResult:
    """Single message → nutrition reply plus optional daily macro targets."""
    if not request.message:
        return CoachResult(400, NutritionReply(reply=NUTRITION_EMPTY_MESSAGE, macros=None))

    config = config or get_settings()
    prompt = build_prompt(Scenario.NUTRITION, request)

    try:
        raw = await _complete(Scenario.NUTRITION, prompt, client, config)
    except Exception as exc:
        logger.error("Nutrition coach error: %s", _error_info(exc))
        return CoachResult(500, NutritionReply(reply=NUTRITION_SERVER_ERROR, macros=None))

    return CoachResult(200, normalize(raw, Scenario.NUTRITION))


Handler = Callable[..., Awaitable[CoachResult]]

HANDLERS: Dict[Scenario, Handler] = {
    Scenario.MEAL_IMAGE: estimate_meal,
    Scenario.WORKOUT: coach_workout,
    Scenario.NUTRITION: coach_nutrition,
}

REQUEST_MODELS: Dict[Scenario, type] = {
    Scenario.MEAL_IMAGE: ImageEstimateRequest,
    Scenario.WORKOUT: WorkoutRequest,
    Scenario.NUTRITION: NutritionRequest,
}


async def handle(
    scenario: Scenario,
    payload: Dict[str, Any],
    client: CompletionClient,
    config: Optional[Settings] = None,
) -> CoachResult:
    """Validate ``payload`` for ``scenario`` and run that scenario's handler."""
    request = REQUEST_MODELS[scenario].model_validate(payload)
    return await HANDLERS[scenario](request, client, config)
