"""Tests for the bearer-token chat completions backend."""

from __future__ import annotations

import json
from typing import List

import pytest

from testgen.backends import HttpRequest, HttpResponse, OpenAIBackend
from testgen.config import API_KEY_PLACEHOLDER


class _RecordingTransport:
    def __init__(self, *responses: HttpResponse) -> None:
        self.responses = list(responses)
        self.requests: List[HttpRequest] = []

    def __call__(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        return self.responses.pop(0)


def _chat_response(content: str) -> HttpResponse:
    return HttpResponse(200, json.dumps({"choices": [{"message": {"content": content}}]}))


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in OpenAIBackend.ENV_API_KEY_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_generate_posts_chat_request_and_returns_code() -> None:
    transport = _RecordingTransport(_chat_response("```java\nclass FooTest {}\n```"))
    backend = OpenAIBackend("sk-test", model="gpt-4o", transport=transport)

    assert backend.generate("write a test") == "class FooTest {}"

    [request] = transport.requests
    assert request.url == "https://api.openai.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.headers["Content-Type"] == "application/json"
    payload = json.loads(request.body)
    assert payload["model"] == "gpt-4o"
    assert payload["messages"] == [{"role": "user", "content": "write a test"}]


def test_custom_base_url_is_used() -> None:
    transport = _RecordingTransport(_chat_response("class A {}"))
    backend = OpenAIBackend("sk-test", base_url="http://localhost:8080/v1/", transport=transport)

    assert backend.generate("p") == "class A {}"
    assert transport.requests[0].url == "http://localhost:8080/v1/chat/completions"


def test_error_status_returns_none() -> None:
    transport = _RecordingTransport(HttpResponse(500, '{"error": "boom"}'))
    backend = OpenAIBackend("sk-test", transport=transport)

    assert backend.generate("p") is None
    assert len(transport.requests) == 1


def test_missing_content_returns_none() -> None:
    transport = _RecordingTransport(HttpResponse(200, json.dumps({"choices": []})))
    assert OpenAIBackend("sk-test", transport=transport).generate("p") is None


def test_invalid_json_returns_none() -> None:
    transport = _RecordingTransport(HttpResponse(200, "not json"))
    assert OpenAIBackend("sk-test", transport=transport).generate("p") is None


def test_empty_content_returns_none() -> None:
    transport = _RecordingTransport(_chat_response("   "))
    assert OpenAIBackend("sk-test", transport=transport).generate("p") is None


def test_missing_key_skips_request() -> None:
    transport = _RecordingTransport()
    backend = OpenAIBackend(API_KEY_PLACEHOLDER, transport=transport)

    assert backend.api_key is None
    assert backend.generate("p") is None
    assert transport.requests == []


def test_key_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert OpenAIBackend(None).api_key == "sk-env"
    assert OpenAIBackend("  ").api_key == "sk-env"
    assert OpenAIBackend("sk-explicit").api_key == "sk-explicit"
