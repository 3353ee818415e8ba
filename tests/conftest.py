# tests/conftest.py
import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure the repo root is in sys.path for imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings  # noqa: E402
from main import app, get_http_client, get_settings  # noqa: E402

TEST_KEY = "test-key-123"


class FakeGemini:
    """Stands in for the generateContent endpoint and records what it was sent."""

    def __init__(self):
        self.requests = []
        self.responder = lambda request: httpx.Response(500, text="no responder set")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def reply_with(self, status_code=200, **kwargs):
        self.responder = lambda request: httpx.Response(status_code, **kwargs)

    def sent_json(self, index=-1):
        return json.loads(self.requests[index].content)


def make_reply(verdict) -> dict:
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": json.dumps(verdict)}], "role": "model"},
                "finishReason": "STOP",
            }
        ]
    }


@pytest.fixture
def gemini_reply():
    return make_reply


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def settings():
    return Settings(gemini_api_key=TEST_KEY, gemini_api_base="https://gemini.test/v1beta")


@pytest.fixture
def upstream(fake_gemini):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_gemini))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def api(upstream, settings):
    app.dependency_overrides[get_http_client] = lambda: upstream
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
