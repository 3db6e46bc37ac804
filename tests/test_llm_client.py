import json

import httpx
import pytest

from quiznova.config import Settings
from quiznova.errors import CountMismatch, MalformedResponse, UpstreamUnavailable
from quiznova.llm_client import CompletionClient, generate_questions
from quiznova.prompts import SYSTEM_PROMPT
from quiznova.schemas import QuizRequest
from tests.conftest import FakeCompletionAPI, completion_body, make_items


def _client(settings, handler):
    return CompletionClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_complete_sends_system_and_user_messages(settings, fake_api):
    content = await _client(settings, fake_api).complete(SYSTEM_PROMPT, "make a quiz")
    assert json.loads(content) == make_items(5)

    request = fake_api.requests[0]
    assert str(request.url) == settings.completion_url
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["X-Title"] == "QuizNova"
    body = fake_api.last_json
    assert body["model"] == settings.model
    assert body["temperature"] == settings.temperature
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"] == "make a quiz"


@pytest.mark.anyio
async def test_missing_key_fails_without_calling_out(fake_api):
    client = _client(Settings(openrouter_api_key=None), fake_api)
    with pytest.raises(UpstreamUnavailable) as exc:
        await client.complete("s", "u")
    assert "Missing OpenRouter API key" in exc.value.message
    assert fake_api.requests == []


@pytest.mark.anyio
async def test_non_2xx_is_upstream_unavailable(settings):
    api = FakeCompletionAPI(status_code=503)
    with pytest.raises(UpstreamUnavailable) as exc:
        await _client(settings, api).complete("s", "u")
    assert exc.value.detail == {"status": 503}
    assert len(api.requests) == 1


@pytest.mark.anyio
async def test_transport_error_is_upstream_unavailable(settings):
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailable):
        await _client(settings, boom).complete("s", "u")


@pytest.mark.anyio
async def test_timeout_is_upstream_unavailable(settings):
    def slow(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamUnavailable) as exc:
        await _client(settings, slow).complete("s", "u")
    assert "timed out" in exc.value.message


@pytest.mark.anyio
@pytest.mark.parametrize("body", [{"choices": []}, {"nope": 1}, completion_body("   ")])
async def test_empty_or_odd_payload_is_malformed(settings, body):
    with pytest.raises(MalformedResponse):
        await _client(settings, FakeCompletionAPI(body=body)).complete("s", "u")


@pytest.mark.anyio
async def test_generate_questions_prompts_and_normalizes(settings):
    items = make_items(3)
    for item in items:
        item["correctAnswer"] = "B"
    api = FakeCompletionAPI(content="```json\n" + json.dumps(items) + "\n```")
    request = QuizRequest(topic="Oceans", count=3, difficulty="easy")

    questions = await generate_questions(request, _client(settings, api))

    assert [q.correct_answer for q in questions] == ["B) Atlantic"] * 3
    user_prompt = api.last_json["messages"][1]["content"]
    assert '"Oceans"' in user_prompt
    assert "exactly 3" in user_prompt
    assert "easy difficulty" in user_prompt


@pytest.mark.anyio
async def test_generate_questions_does_not_retry_on_count_mismatch(settings):
    api = FakeCompletionAPI(content=json.dumps(make_items(4)))
    with pytest.raises(CountMismatch):
        await generate_questions(QuizRequest(topic="Oceans", count=5), _client(settings, api))
    assert len(api.requests) == 1
