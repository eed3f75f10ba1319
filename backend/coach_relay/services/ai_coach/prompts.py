"""
Prompt builders for the three coach scenarios.

Every builder is a pure function of its request: same request, same
Prompt. No I/O happens here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from coach_relay.schemas.coach import (
    NOTE_MAX_CHARS,
    ImageEstimateRequest,
    NutritionRequest,
    WorkoutRequest,
)
from coach_relay.services.ai_coach.base import Scenario

WARMUP_EXERCISE = 'Treadmill walk'
NO_EXERCISES_FALLBACK = 'basic bodyweight moves'


@dataclass(frozen=True)
class Prompt:
    """System instruction plus the ordered non-system turns that follow it."""
    system_instruction: str
    # User content is text, or text+image parts for the meal photo
    turns: Tuple[Dict[str, Any], ...]

    def to_messages(self) -> List[Dict[str, Any]]:
        return [{'role': 'system', 'content': self.system_instruction}, *self.turns]


@dataclass(frozen=True)
class GenerationParams:
    vision: bool
    max_tokens: int
    temperature: float


GENERATION_PARAMS: Dict[Scenario, GenerationParams] = {
    Scenario.MEAL_IMAGE: GenerationParams(vision=True, max_tokens=350, temperature=0.4),
    Scenario.WORKOUT: GenerationParams(vision=False, max_tokens=700, temperature=0.7),
    Scenario.NUTRITION: GenerationParams(vision=False, max_tokens=500, temperature=0.7),
}


def _format_number(value: float) -> str:
    return f'{value:g}'


# ───────────────────────────────────────────────────────────────────
# Photo → macro estimate
# ───────────────────────────────────────────────────────────────────

MEAL_IMAGE_PROMPT = """\
You are the LVLD Nutrition Coach.

Task:
- Estimate TOTAL macros for the meal in the image for the given servings.
- Use the optional user ingredients hints to improve accuracy.
- If the image is unclear, still provide a best-effort estimate and mention uncertainty in "note".

Return STRICT JSON ONLY (no markdown, no backticks):

{{
  "name": "short meal name",
  "calories": number,
  "protein": number,
  "carbs": number,
  "fats": number,
  "note": "short note about assumptions/ingredients/uncertainty"
}}

Rules:
- calories/protein/carbs/fats MUST be integers.
- Values should be TOTALS for servings = {servings}.
- Keep note under {note_max} characters.
"""


def build_meal_image_prompt(request: ImageEstimateRequest) -> Prompt:
    servings = _format_number(request.servings)
    system_instruction = MEAL_IMAGE_PROMPT.format(
        servings=servings, note_max=NOTE_MAX_CHARS,
    ).strip()
    user_text = (
        f"Servings: {servings}\n"
        f"Ingredients hint: {request.ingredients_hint or 'none'}\n"
        "Estimate macros for this meal photo."
    )
    content = [
        {'type': 'text', 'text': user_text},
        {'type': 'image_url', 'image_url': {'url': request.data_url}},
    ]
    return Prompt(system_instruction, ({'role': 'user', 'content': content},))


# ───────────────────────────────────────────────────────────────────
# Workout coach
# ───────────────────────────────────────────────────────────────────

WORKOUT_PROMPT = """\
You are the LVLD Workout Coach.

Your job:
- Design practical strength workouts based on the conversation.
- Always include a short treadmill warm-up as the FIRST exercise.
- Use ONLY these exercise names when possible: {exercises}.
- Keep things realistic for a normal gym.
- Describe the exercises in "reply" in the SAME order as plan.exercises.

You MUST respond as STRICT JSON, no markdown, no backticks.

JSON format:

{{
  "reply": "short multi-line description of the workout",
  "plan": {{
    "restSeconds": number | null,
    "exercises": [
      {{ "name": "Exercise name", "sets": 3, "reps": 10, "restSeconds": 60 }}
    ]
  }}
}}

Rules:
1) The FIRST exercise in plan.exercises MUST be a treadmill walk warm-up:
   - name: "{warmup}"
   - sets: 1
2) Return ONLY this JSON object.
"""


def build_workout_prompt(request: WorkoutRequest) -> Prompt:
    exercises = ', '.join(request.available_exercises) or NO_EXERCISES_FALLBACK
    system_instruction = WORKOUT_PROMPT.format(
        exercises=exercises, warmup=WARMUP_EXERCISE,
    ).strip()
    history = tuple(
        {'role': turn.role, 'content': turn.content} for turn in request.messages
    )
    return Prompt(system_instruction, history)


# ───────────────────────────────────────────────────────────────────
# Nutrition coach
# ───────────────────────────────────────────────────────────────────

NUTRITION_PROMPT = """\
You are the LVLD Nutrition & Fitness Coach.
- Help with macros, weight gain, fat loss, and performance.
- When the user is clearly asking for daily macro targets, respond as JSON:

{
  "reply": "Short explanation of the targets in plain text.",
  "macros": { "calories": 2500, "protein": 180, "carbs": 230, "fats": 70 }
}

- If they are NOT asking for specific targets, respond as:

{ "reply": "Normal helpful answer...", "macros": null }

Return ONLY JSON. No markdown, no backticks.
""".strip()


def build_nutrition_prompt(request: NutritionRequest) -> Prompt:
    if not request.message:
        raise ValueError('nutrition prompt needs a non-empty message')
    return Prompt(NUTRITION_PROMPT, ({'role': 'user', 'content': request.message},))


_BUILDERS = {
    Scenario.MEAL_IMAGE: build_meal_image_prompt,
    Scenario.WORKOUT: build_workout_prompt,
    Scenario.NUTRITION: build_nutrition_prompt,
}


def build_prompt(scenario: Scenario, request: Any) -> Prompt:
    """Build the prompt for ``scenario`` from its validated request model."""
    return _BUILDERS[scenario](request)
