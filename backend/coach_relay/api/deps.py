"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from functools import lru_cache

from coach_relay.core.config import Settings, get_settings
from coach_relay.services.ai_coach.base import CompletionClient
from coach_relay.services.ai_coach.factory import build_completion_client


@lru_cache(maxsize=1)
def get_completion_client() -> CompletionClient:
    """Process-wide upstream client, built once and injected per request."""
    return build_completion_client()


def get_config() -> Settings:
    return get_settings()
