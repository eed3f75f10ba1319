from fastapi.testclient import TestClient

from coach_relay.api.deps import get_completion_client, get_config
from coach_relay.core.config import Settings
from coach_relay.main import create_app, describe_validation_error
from coach_relay.services.ai_coach.stub_provider import STUB_REPLY, StubCompletionClient

from tests.conftest import FakeCompletionClient, TEXT_MODEL, VISION_MODEL


def test_health_reports_configuration(client):
    r = client.get('/health')

    assert r.status_code == 200
    assert r.json() == {
        'ok': True,
        'groq_key_present': False,
        'provider': 'FakeCompletionClient',
        'default_model': TEXT_MODEL,
        'vision_model': VISION_MODEL,
    }


def test_health_with_key_present(client, test_settings):
    client.app.dependency_overrides[get_config] = lambda: Settings(GROQ_API_KEY='gsk_test')
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json()['groq_key_present'] is True


def test_oversized_body_is_rejected_before_routing():
    fake = FakeCompletionClient(reply='ok')
    app = create_app(Settings(MAX_BODY_BYTES=64))
    app.dependency_overrides[get_completion_client] = lambda: fake
    test_client = TestClient(app)

    r = test_client.post('/nutrition-coach', json={'message': 'x' * 500})

    assert r.status_code == 413
    assert r.json() == {'error': 'Request body too large'}
    assert fake.calls == []

    assert test_client.post('/nutrition-coach', json={'message': 'hi'}).status_code == 200


def test_chunked_body_without_content_length_is_counted():
    fake = FakeCompletionClient(reply='{"reply": "ok", "macros": null}')
    app = create_app(Settings(MAX_BODY_BYTES=64))
    app.dependency_overrides[get_completion_client] = lambda: fake
    test_client = TestClient(app)

    # A generator body is streamed with Transfer-Encoding: chunked
    r = test_client.post(
        '/nutrition-coach',
        content=(b'x' * 40 for _ in range(5)),
        headers={'content-type': 'application/json'},
    )

    assert r.status_code == 413
    assert r.json() == {'error': 'Request body too large'}
    assert fake.calls == []

    r = test_client.post(
        '/nutrition-coach',
        content=(chunk for chunk in (b'{"message": ', b'"hi"}')),
        headers={'content-type': 'application/json'},
    )
    assert r.status_code == 200
    assert r.json() == {'reply': 'ok', 'macros': None}
    assert len(fake.calls) == 1


def test_stub_client_keeps_coaches_answering():
    app = create_app(Settings())
    app.dependency_overrides[get_completion_client] = lambda: StubCompletionClient()
    test_client = TestClient(app)

    r = test_client.post('/workout-coach', json={'messages': []})

    assert r.status_code == 200
    assert r.json() == {'reply': STUB_REPLY, 'plan': None}


def test_cors_headers_are_sent(client):
    r = client.get('/health', headers={'Origin': 'https://app.example.com'})
    assert r.headers.get('access-control-allow-origin') in ('*', 'https://app.example.com')


def test_describe_validation_error_messages():
    assert describe_validation_error([]) == 'Invalid request'
    assert describe_validation_error([{'loc': ('body',), 'type': 'missing'}]) == 'Missing request body'
    assert describe_validation_error([{'loc': ('body',), 'type': 'model_type'}]) == 'Request body must be a JSON object'
    assert describe_validation_error(
        [{'loc': ('body', 'imageBase64'), 'type': 'missing'}]
    ) == 'Missing imageBase64'
    assert describe_validation_error(
        [{'loc': ('body', 'messages', 0, 'role'), 'type': 'literal_error'}]
    ) == 'Invalid messages.0.role'
