"""
CompletionClient abstract base class, the Scenario enum and shared errors.

Any upstream (Groq, Stub, test fakes) must implement CompletionClient.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional


class Scenario(str, Enum):
    """The three coaching interactions the relay supports."""
    MEAL_IMAGE = 'nutrition-image'
    WORKOUT = 'workout-coach'
    NUTRITION = 'nutrition-coach'


class UpstreamError(Exception):
    """The completion API call failed (transport, auth, rate limit, ...)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        error_type: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.error_type = error_type

    def info(self) -> Dict[str, Any]:
        """Diagnostic detail for logs. Never sent to the caller."""
        return {
            'status': self.status_code,
            'message': self.message,
            'code': self.code,
            'type': self.error_type,
        }


class CompletionClient(ABC):
    """
    Abstract interface for the upstream completion API.

    Takes a model id, role-tagged messages (text or text+image content)
    and generation parameters; returns the completion text.
    """

    @abstractmethod
    async def complete(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Return the (stripped) completion text or raise UpstreamError."""
        ...
