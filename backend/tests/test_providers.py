import asyncio
from types import SimpleNamespace

import groq
import httpx
import pytest

from coach_relay.core import config as config_module
from coach_relay.core.config import Settings
from coach_relay.services.ai_coach.base import UpstreamError
from coach_relay.services.ai_coach.factory import build_completion_client
from coach_relay.services.ai_coach.groq_provider import GroqCompletionClient
from coach_relay.services.ai_coach.stub_provider import STUB_REPLY, StubCompletionClient

GROQ_URL = 'https://api.groq.com/openai/v1/chat/completions'


def _sdk_with(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_groq_client_disables_sdk_retries():
    client = GroqCompletionClient(api_key='gsk_test')
    assert client._client.max_retries == 0


def test_groq_client_passes_parameters_and_strips_text():
    calls = []

    async def create(**kwargs):
        calls.append(kwargs)
        return _completion('  {"reply": "ok"}\n')

    client = GroqCompletionClient(api_key='gsk_test')
    client._client = _sdk_with(create)
    messages = [{'role': 'system', 'content': 'sys'}, {'role': 'user', 'content': 'hi'}]

    raw = asyncio.run(client.complete(model='m-1', messages=messages, max_tokens=42, temperature=0.3))

    assert raw == '{"reply": "ok"}'
    assert calls == [{'model': 'm-1', 'messages': messages, 'max_tokens': 42, 'temperature': 0.3}]


def test_groq_client_handles_empty_content():
    async def create(**kwargs):
        return _completion(None)

    client = GroqCompletionClient(api_key='gsk_test')
    client._client = _sdk_with(create)

    assert asyncio.run(client.complete('m', [], 10, 0.1)) == ''


def test_groq_client_wraps_connection_errors():
    async def create(**kwargs):
        raise groq.APIConnectionError(request=httpx.Request('POST', GROQ_URL))

    client = GroqCompletionClient(api_key='gsk_test')
    client._client = _sdk_with(create)

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(client.complete('m', [], 10, 0.1))
    assert excinfo.value.status_code is None
    assert excinfo.value.info()['type'] == 'APIConnectionError'


def test_groq_client_wraps_status_errors_with_diagnostics():
    request = httpx.Request('POST', GROQ_URL)
    body = {'error': {'message': 'slow down', 'type': 'tokens', 'code': 'rate_limit_exceeded'}}

    async def create(**kwargs):
        raise groq.RateLimitError(
            'slow down',
            response=httpx.Response(429, request=request, json=body),
            body=body,
        )

    client = GroqCompletionClient(api_key='gsk_test')
    client._client = _sdk_with(create)

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(client.complete('m', [], 10, 0.1))
    info = excinfo.value.info()
    assert info['status'] == 429
    assert info['code'] == 'rate_limit_exceeded'
    assert info['type'] == 'tokens'


def test_stub_client_is_deterministic():
    stub = StubCompletionClient()
    assert asyncio.run(stub.complete('m', [], 10, 0.1)) == STUB_REPLY


def test_factory_picks_stub_without_key():
    assert isinstance(build_completion_client(Settings()), StubCompletionClient)


def test_factory_picks_groq_with_key():
    assert isinstance(build_completion_client(Settings(GROQ_API_KEY='gsk_test')), GroqCompletionClient)


def test_settings_read_environment_with_fallback_names(monkeypatch):
    monkeypatch.delenv('GROQ_API_KEY', raising=False)
    monkeypatch.delenv('GROQ_MODEL', raising=False)
    monkeypatch.setenv('API_KEY', 'legacy-key')
    monkeypatch.setenv('MODEL', 'legacy-model')
    monkeypatch.setenv('CORS_ORIGINS', 'https://a.example, https://b.example')
    monkeypatch.setenv('PORT', '8080')
    config_module.get_settings.cache_clear()
    try:
        loaded = config_module.get_settings()
    finally:
        config_module.get_settings.cache_clear()

    assert loaded.GROQ_API_KEY == 'legacy-key'
    assert loaded.GROQ_MODEL == 'legacy-model'
    assert loaded.CORS_ORIGINS == ['https://a.example', 'https://b.example']
    assert loaded.PORT == 8080
