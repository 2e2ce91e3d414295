import asyncio
import json

import httpx
import pytest

from ocrmux.types import ConversationTurn, Role

ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "DEEPSEEK_API_KEY",
    "OCRMUX_TIMEOUT",
    "OCRMUX_MAX_TOKENS",
    "OCRMUX_LOG_LEVEL",
    "OCRMUX_OPENAI_BASE_URL",
    "OCRMUX_ANTHROPIC_BASE_URL",
    "OCRMUX_GEMINI_BASE_URL",
    "OCRMUX_DEEPSEEK_BASE_URL",
)


class RecordingTransport:
    """
    Fake HTTP transport that records every request and replies with a canned response.
    """

    def __init__(self):
        self.requests = []
        self.status = 200
        self.json_body = None
        self.text_body = ""
        self.delay = None
        self.exc = None
        self.client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def reply(self, status=200, json=None, text=""):
        self.status = status
        self.json_body = json
        self.text_body = text
        return self

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        if self.json_body is not None:
            return httpx.Response(self.status, json=self.json_body)
        return httpx.Response(self.status, text=self.text_body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove API keys and OCRMUX_* settings, and run from an empty directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_env(clean_env, monkeypatch):
    """Mock environment variables for API keys."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-openai")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test-anthropic")
    monkeypatch.setenv("GOOGLE_API_KEY", "AIza-test-google")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test-deepseek")
    return clean_env


def make_history(n):
    """Alternating user/assistant turns ending with a user turn."""
    turns = []
    for i in range(n):
        role = Role.USER if (n - i) % 2 == 1 else Role.ASSISTANT
        turns.append(ConversationTurn(role, f"turn {i}"))
    return turns


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
