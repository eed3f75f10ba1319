"""Shared pytest fixtures for coach relay tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from coach_relay.api.deps import get_completion_client, get_config
from coach_relay.core.config import Settings
from coach_relay.main import app
from coach_relay.services.ai_coach.base import CompletionClient

TEXT_MODEL = 'text-model'
VISION_MODEL = 'vision-model'

# "hello", base64-encoded
IMAGE_B64 = 'aGVsbG8='


class FakeCompletionClient(CompletionClient):
    """Records every call; answers with ``reply`` or raises ``error``."""

    def __init__(self, reply: str = '', error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, model, messages, max_tokens, temperature) -> str:
        self.calls.append({
            'model': model,
            'messages': messages,
            'max_tokens': max_tokens,
            'temperature': temperature,
        })
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def test_settings() -> Settings:
    return Settings(GROQ_MODEL=TEXT_MODEL, GROQ_VISION_MODEL=VISION_MODEL)


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def client(fake_client, test_settings):
    app.dependency_overrides[get_completion_client] = lambda: fake_client
    app.dependency_overrides[get_config] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.pop(get_completion_client, None)
    app.dependency_overrides.pop(get_config, None)
