"""Response normalization: untrusted model text → validated result models.

The model is told to emit pure JSON but nothing guarantees it. Past this
module every call site works with a typed result, never raw text.

- Meal image: unparseable text or non-finite macros is a hard failure
  (MealEstimateError). Wrong numbers are worse than no numbers.
- Workout / nutrition: soft failures only. The user always gets a reply,
  falling back to the raw text and a null plan/macros.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional, Union

from pydantic import ValidationError

from coach_relay.schemas.coach import (
    NOTE_MAX_CHARS,
    Macros,
    MealEstimate,
    NutritionReply,
    TrainingPlan,
    WorkoutPlan,
)
from coach_relay.services.ai_coach.base import Scenario

logger = logging.getLogger(__name__)

DEFAULT_MEAL_NAME = 'Meal estimate'
WORKOUT_EMPTY_REPLY = "I couldn't generate a structured workout right now. Try again in a moment."
NUTRITION_EMPTY_REPLY = "I wasn't able to come up with a response. Try again in a moment."

_MACRO_FIELDS = ('calories', 'protein', 'carbs', 'fats')
_PREVIEW_CHARS = 200

Normalized = Union[MealEstimate, WorkoutPlan, NutritionReply]


class MealEstimateError(Exception):
    """Model output cannot be turned into trustworthy macro numbers."""

    def __init__(self, reason: str, raw: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_object(raw: str) -> Optional[dict]:
    """Parse ``raw`` as one JSON value; None unless it is a JSON object."""
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def to_number(value: Any) -> float:
    """Numeric coercion for model-supplied fields.

    JSON numbers and numeric strings convert; anything else (null, bools,
    missing, junk text) becomes NaN so callers can reject it.
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def _integral(value: float) -> Union[int, float]:
    return int(value) if value.is_integer() else value


def _preview(raw: str) -> str:
    return raw[:_PREVIEW_CHARS]


# ---------------------------------------------------------------------------
# Scenario normalizers
# ---------------------------------------------------------------------------

def normalize_meal_estimate(raw: str) -> MealEstimate:
    """Build a MealEstimate or raise MealEstimateError carrying ``raw``."""
    parsed = _parse_object(raw)
    if parsed is None:
        raise MealEstimateError('response is not a JSON object', raw)

    numbers = {field: to_number(parsed.get(field)) for field in _MACRO_FIELDS}
    bad = [field for field, value in numbers.items() if not math.isfinite(value)]
    if bad:
        raise MealEstimateError(f"invalid macro numbers: {', '.join(bad)}", raw)

    name = parsed.get('name')
    note = parsed.get('note')
    # round() is half-to-even
    return MealEstimate(
        name=name if isinstance(name, str) else DEFAULT_MEAL_NAME,
        note=note[:NOTE_MAX_CHARS] if isinstance(note, str) else '',
        **{field: int(round(value)) for field, value in numbers.items()},
    )


def _plan_or_none(value: Any) -> Optional[TrainingPlan]:
    if not isinstance(value, dict):
        return None
    try:
        return TrainingPlan.model_validate(value)
    except ValidationError as exc:
        logger.warning("Dropping malformed workout plan: %d error(s)", exc.error_count())
        return None


def normalize_workout(raw: str) -> WorkoutPlan:
    raw = raw.strip()
    parsed = _parse_object(raw)
    if parsed is None:
        logger.warning("Workout reply is not a JSON object, using raw text: %r", _preview(raw))
        return WorkoutPlan(reply=raw or WORKOUT_EMPTY_REPLY, plan=None)

    reply = parsed.get('reply')
    return WorkoutPlan(
        reply=reply if isinstance(reply, str) else raw,
        plan=_plan_or_none(parsed.get('plan')),
    )


def _macros_or_none(value: Any) -> Optional[Macros]:
    if not isinstance(value, dict):
        return None
    numbers = {field: to_number(value.get(field)) for field in _MACRO_FIELDS}
    if not all(math.isfinite(v) for v in numbers.values()):
        logger.warning("Dropping macros with non-numeric fields: %r", value)
        return None
    return Macros(**{field: _integral(v) for field, v in numbers.items()})


def normalize_nutrition(raw: str) -> NutritionReply:
    raw = raw.strip()
    parsed = _parse_object(raw)
    if parsed is None:
        logger.warning("Nutrition reply is not a JSON object, using raw text: %r", _preview(raw))
        return NutritionReply(reply=raw or NUTRITION_EMPTY_REPLY, macros=None)

    reply = parsed.get('reply')
    return NutritionReply(
        reply=reply if isinstance(reply, str) else raw,
        macros=_macros_or_none(parsed.get('macros')),
    )


_NORMALIZERS = {
    Scenario.MEAL_IMAGE: normalize_meal_estimate,
    Scenario.WORKOUT: normalize_workout,
    Scenario.NUTRITION: normalize_nutrition,
}


def normalize(raw: str, scenario: Scenario) -> Normalized:
    """Convert raw model text into the result shape for ``scenario``.

    Only the meal image scenario can raise (MealEstimateError).
    """
    return _NORMALIZERS[scenario](raw)
