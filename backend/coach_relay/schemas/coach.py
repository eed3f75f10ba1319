"""Request and result shapes for the three coach scenarios.

Wire names stay camelCase (the iOS client's contract) through aliases.
Request models are lenient: they coerce what older clients send instead of
rejecting it, except where a field is genuinely required.
"""
from __future__ import annotations

import base64
import math
import re
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NOTE_MAX_CHARS = 160

# Numeric plan fields, or free-text ranges
PlanValue = Union[int, float, str]

_WHITESPACE_RE = re.compile(r'\s+')


def _turn_text(content: Any) -> str:
    """Plain text of a chat turn; content-part lists keep only their text parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return '\n'.join(
            part['text'] for part in content
            if isinstance(part, dict) and isinstance(part.get('text'), str)
        )
    if isinstance(content, (int, float)) and not isinstance(content, bool):
        return str(content)
    return ''


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal['user', 'assistant']
    content: str = ''

    @model_validator(mode='before')
    @classmethod
    def _coerce_turn(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            data = {}
        return {
            'role': 'user' if data.get('role') == 'user' else 'assistant',
            'content': _turn_text(data.get('content') or data.get('text') or ''),
        }


class WorkoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    messages: List[ChatTurn] = Field(default_factory=list)
    available_exercises: List[str] = Field(default_factory=list, alias='availableExercises')

    @field_validator('messages', mode='before')
    @classmethod
    def _messages_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator('available_exercises', mode='before')
    @classmethod
    def _exercise_names(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        names = [v.strip() for v in value if isinstance(v, str) and v.strip()]
        return list(dict.fromkeys(names))


class NutritionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = ''

    @field_validator('message', mode='before')
    @classmethod
    def _trimmed(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ''


class ImageEstimateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    image_base64: str = Field(..., alias='imageBase64')
    ingredients_hint: str = Field('', alias='ingredientsHint')
    servings: float = 1

    @field_validator('image_base64')
    @classmethod
    def _raw_base64(cls, value: str) -> str:
        # Accept both raw base64 and data URLs; keep only the payload
        if 'base64,' in value:
            value = value.split('base64,', 1)[1]
        value = _WHITESPACE_RE.sub('', value)
        if not value:
            raise ValueError('image is empty')
        try:
            base64.b64decode(value, validate=True)
        except ValueError:
            raise ValueError('image is not valid base64')
        return value

    @field_validator('ingredients_hint', mode='before')
    @classmethod
    def _hint_text(cls, value: Any) -> str:
        if value is None:
            return ''
        return str(value).strip()

    @field_validator('servings')
    @classmethod
    def _positive_servings(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError('servings must be a finite number greater than 0')
        return value

    @property
    def data_url(self) -> str:
        return f'data:image/jpeg;base64,{self.image_base64}'


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class MealEstimate(BaseModel):
    """Macro totals for the requested number of servings."""
    name: str
    calories: int
    protein: int
    carbs: int
    fats: int
    note: str = Field('', max_length=NOTE_MAX_CHARS)


class Exercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    name: str
    # Models often answer with ranges ("3-4", "8-12", "60-90") or fractions
    sets: Optional[PlanValue] = None
    reps: Optional[PlanValue] = None
    rest_seconds: Optional[PlanValue] = Field(None, alias='restSeconds')


class TrainingPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    rest_seconds: Optional[PlanValue] = Field(None, alias='restSeconds')
    exercises: List[Exercise] = Field(default_factory=list)


class WorkoutPlan(BaseModel):
    reply: str
    plan: Optional[TrainingPlan] = None


class Macros(BaseModel):
    calories: Union[int, float]
    protein: Union[int, float]
    carbs: Union[int, float]
    fats: Union[int, float]


class NutritionReply(BaseModel):
    reply: str
    macros: Optional[Macros] = None


class ErrorResponse(BaseModel):
    error: str
    raw: Optional[str] = None


class LegacyErrorResponse(BaseModel):
    reply: str
