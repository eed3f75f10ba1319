"""
Coach routers — photo macro estimate, workout coach, nutrition coach.

POST /nutrition-image   { imageBase64, ingredientsHint?, servings? }
POST /workout-coach     { messages, availableExercises? }
POST /nutrition-coach   { message }
POST /fitness-coach     legacy: either coach, chosen by payload shape

/api/workout-coach and /api/nutrition-coach are aliases used by current
iOS builds.
"""
from __future__ import annotations

import logging
from typing import Any, Union

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from coach_relay.api.deps import get_completion_client, get_config
from coach_relay.core.config import Settings
from coach_relay.schemas.coach import (
    ErrorResponse,
    ImageEstimateRequest,
    LegacyErrorResponse,
    MealEstimate,
    NutritionReply,
    NutritionRequest,
    WorkoutPlan,
    WorkoutRequest,
)
from coach_relay.services.ai_coach.base import CompletionClient
from coach_relay.services.ai_coach.dispatch import InvalidPayload, classify
from coach_relay.services.ai_coach.handlers import (
    CoachResult,
    coach_nutrition,
    coach_workout,
    estimate_meal,
    handle,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=['coach'])


def _respond(result: CoachResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.content())


@router.post(
    '/nutrition-image',
    response_model=MealEstimate,
    responses={400: {'model': ErrorResponse}, 500: {'model': ErrorResponse}},
)
async def nutrition_image(
    payload: ImageEstimateRequest,
    client: CompletionClient = Depends(get_completion_client),
    config: Settings = Depends(get_config),
):
    """Estimate total macros for a meal photo."""
    logger.info(
        "nutrition_image — servings=%s image_chars=%d hint=%s",
        payload.servings,
        len(payload.image_base64),
        bool(payload.ingredients_hint),
    )
    return _respond(await estimate_meal(payload, client, config))


@router.post('/workout-coach', response_model=WorkoutPlan)
@router.post('/api/workout-coach', response_model=WorkoutPlan, include_in_schema=False)
async def workout_coach(
    payload: WorkoutRequest,
    client: CompletionClient = Depends(get_completion_client),
    config: Settings = Depends(get_config),
):
    logger.info(
        "workout_coach — turns=%d exercises=%d",
        len(payload.messages),
        len(payload.available_exercises),
    )
    return _respond(await coach_workout(payload, client, config))


@router.post(
    '/nutrition-coach',
    response_model=NutritionReply,
    responses={400: {'model': NutritionReply}},
)
@router.post('/api/nutrition-coach', response_model=NutritionReply, include_in_schema=False)
async def nutrition_coach(
    payload: NutritionRequest,
    client: CompletionClient = Depends(get_completion_client),
    config: Settings = Depends(get_config),
):
    logger.info("nutrition_coach — msg_len=%d", len(payload.message))
    return _respond(await coach_nutrition(payload, client, config))


@router.post(
    '/fitness-coach',
    response_model=Union[WorkoutPlan, NutritionReply],
    responses={400: {'model': LegacyErrorResponse}},
)
async def fitness_coach(
    payload: Any = Body(None),
    client: CompletionClient = Depends(get_completion_client),
    config: Settings = Depends(get_config),
):
    """Legacy combined coach endpoint (keeps old iOS builds working)."""
    try:
        scenario = classify(payload)
    except InvalidPayload as exc:
        logger.info("fitness_coach — rejected payload of type %s", type(payload).__name__)
        return JSONResponse(
            status_code=400,
            content=LegacyErrorResponse(reply=exc.message).model_dump(),
        )

    logger.info("fitness_coach — forwarding to %s", scenario.value)
    return _respond(await handle(scenario, payload, client, config))
