"""GET /health — liveness plus upstream configuration, for the operator."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from coach_relay.api.deps import get_completion_client, get_config
from coach_relay.core.config import Settings
from coach_relay.services.ai_coach.base import CompletionClient

router = APIRouter(tags=['health'])


@router.get('/health')
def health(
    client: CompletionClient = Depends(get_completion_client),
    config: Settings = Depends(get_config),
):
    return {
        'ok': True,
        'groq_key_present': bool(config.GROQ_API_KEY),
        'provider': client.__class__.__name__,
        'default_model': config.GROQ_MODEL,
        'vision_model': config.GROQ_VISION_MODEL,
    }
