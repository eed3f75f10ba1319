"""
Client factory — auto-selects the appropriate CompletionClient.

- If GROQ_API_KEY is set → GroqCompletionClient
- Otherwise            → StubCompletionClient (deterministic fallback)
"""
from __future__ import annotations

import logging
from typing import Optional

from coach_relay.core.config import Settings, get_settings
from coach_relay.services.ai_coach.base import CompletionClient

logger = logging.getLogger(__name__)


def build_completion_client(config: Optional[Settings] = None) -> CompletionClient:
    """Return the appropriate completion client based on environment config."""
    config = config or get_settings()

    if config.GROQ_API_KEY:
        from coach_relay.services.ai_coach.groq_provider import GroqCompletionClient
        logger.info(
            "✅ GROQ_API_KEY found — Using GroqCompletionClient (model=%s, vision=%s)",
            config.GROQ_MODEL,
            config.GROQ_VISION_MODEL,
        )
        return GroqCompletionClient(api_key=config.GROQ_API_KEY)

    from coach_relay.services.ai_coach.stub_provider import StubCompletionClient
    logger.warning(
        "⚠️ GROQ_API_KEY is empty or missing — Using StubCompletionClient (deterministic fallback)"
    )
    return StubCompletionClient()

