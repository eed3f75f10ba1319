"""Payload classification for the legacy combined /fitness-coach endpoint."""
from __future__ import annotations

from typing import Any

from coach_relay.services.ai_coach.base import Scenario

INVALID_PAYLOAD_MESSAGE = (
    "Invalid request format for LVLD coach. "
    "Send either { message } or { messages, availableExercises }."
)


class InvalidPayload(ValueError):
    """The payload matches none of the accepted coach shapes."""

    def __init__(self, message: str = INVALID_PAYLOAD_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def classify(payload: Any) -> Scenario:
    """Pick the coach scenario from the payload's shape.

    An array ``messages`` wins over a string ``message``, so a payload
    carrying both is a workout request.
    """
    if not isinstance(payload, dict):
        raise InvalidPayload()
    if isinstance(payload.get('messages'), list):
        return Scenario.WORKOUT
    if isinstance(payload.get('message'), str):
        return Scenario.NUTRITION
    raise InvalidPayload()
