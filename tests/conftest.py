import json

import httpx
import pytest
from fastapi.testclient import TestClient

from quiznova.config import Settings
from quiznova.llm_client import CompletionClient
from quiznova.main import create_app


def make_items(n):
    return [
        {
            "text": f"Ocean question {i + 1}?",
            "options": [f"A) Pacific {i}", "B) Atlantic", "C) Indian", "D) Arctic"],
            "correctAnswer": "B) Atlantic",
        }
        for i in range(n)
    ]


def completion_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeCompletionAPI:
    """httpx MockTransport handler that records requests and replays a canned reply."""

    def __init__(self, content=None, status_code=200, body=None):
        self.content = content
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, json=self.body)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="provider exploded")
        return httpx.Response(200, json=completion_body(self.content))

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings():
    return Settings(
        openrouter_api_key="test-key",
        allowed_origins=("https://quiz-nova-zeta.vercel.app", "http://localhost:3000"),
    )


@pytest.fixture
def fake_api():
    return FakeCompletionAPI(content=json.dumps(make_items(5)))


@pytest.fixture
def app(settings, fake_api):
    client = CompletionClient(settings, transport=httpx.MockTransport(fake_api))
    return create_app(settings, completion_client=client)


@pytest.fixture
def client(app):
    return TestClient(app)
