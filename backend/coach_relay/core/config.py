"""Runtime configuration, read once from the environment (and backend/.env)."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# backend/.env, resolved from this file so it works regardless of CWD
ENV_FILE = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path=ENV_FILE)


class Settings(BaseModel):
    """Centralised runtime configuration for the coach relay."""

    APP_NAME: str = 'LVLD Coach Relay'

    # Upstream completion API
    GROQ_API_KEY: str = ''
    GROQ_MODEL: str = 'llama-3.3-70b-versatile'
    GROQ_VISION_MODEL: str = 'meta-llama/llama-4-scout-17b-16e-instruct'

    # HTTP boundary
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ['*'])
    MAX_BODY_BYTES: int = 20 * 1024 * 1024  # base64 photos are large
    HOST: str = '0.0.0.0'
    PORT: int = 3000


def _env(*names: str) -> str | None:
    """Return the first non-empty environment variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables and sensible defaults."""
    values = {
        'APP_NAME': _env('APP_NAME'),
        'GROQ_API_KEY': _env('GROQ_API_KEY', 'API_KEY'),
        'GROQ_MODEL': _env('GROQ_MODEL', 'MODEL'),
        'GROQ_VISION_MODEL': _env('GROQ_VISION_MODEL', 'VISION_MODEL'),
        'MAX_BODY_BYTES': _env('MAX_BODY_BYTES'),
        'HOST': _env('HOST'),
        'PORT': _env('PORT'),
    }
    origins = _env('CORS_ORIGINS')
    if origins:
        values['CORS_ORIGINS'] = [o.strip() for o in origins.split(',') if o.strip()]

    return Settings(**{k: v for k, v in values.items() if v is not None})


settings = get_settings()

__all__ = ['ENV_FILE', 'Settings', 'get_settings', 'settings']
