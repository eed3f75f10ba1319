"""
StubCompletionClient — deterministic fallback when no GROQ_API_KEY is set.

Never touches the network. It answers every call with the same plain-text
notice, so the conversational coaches still reply (the normalizer treats it
as unparseable text) and the meal estimate fails visibly.
"""
from __future__ import annotations

from typing import Any, Dict, List

from coach_relay.services.ai_coach.base import CompletionClient

STUB_REPLY = (
    "The LVLD coach isn't connected to its AI service yet. "
    "Ask the server operator to set GROQ_API_KEY, then try again."
)


class StubCompletionClient(CompletionClient):
    """Deterministic fallback client, no API key required."""

    async def complete(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        max_tokens: int,
        temperature: float,
    ) -> str:
        return STUB_REPLY
