"""Tests for the chat-completions client retry behavior."""

from __future__ import annotations

import json

import httpx
import pytest

from participation_dashboard.config import ProviderConfig
from participation_dashboard.llm.client import (
    ChatClient,
    ChatCompletionError,
    compute_backoff_ms,
    is_retryable_status,
    parse_retry_after,
)


def _ok(content: str = "Summary text", model: str = "gpt-4o-mini-2024") -> httpx.Response:
    return httpx.Response(
        200,
        json={"model": model, "choices": [{"message": {"role": "assistant", "content": content}}]},
    )


def _client(responses: list[httpx.Response], max_attempts: int = 5):
    requests: list[httpx.Request] = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responses[len(requests) - 1]

    client = ChatClient(
        ProviderConfig(base_url="https://api.test/v1/"),
        "sk-test",
        max_attempts=max_attempts,
        transport=httpx.MockTransport(handler),
        sleep=sleeps.append,
        jitter=lambda: 0.0,
    )
    return client, requests, sleeps


def test_successful_request_returns_content_and_model():
    client, requests, sleeps = _client([_ok()])

    result = client.complete([{"role": "user", "content": "hi"}], temperature=0.4)

    assert result.content == "Summary text"
    assert result.model_used == "gpt-4o-mini-2024"
    assert sleeps == []
    request = requests[0]
    assert str(request.url) == "https://api.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-4o-mini"
    assert body["temperature"] == 0.4


def test_retries_on_429_and_5xx_with_backoff():
    client, requests, sleeps = _client(
        [httpx.Response(429), httpx.Response(503), _ok()]
    )

    result = client.complete([], temperature=0.2)

    assert result.content == "Summary text"
    assert len(requests) == 3
    assert sleeps == [0.6, 1.2]


def test_retry_after_header_takes_precedence():
    client, _, sleeps = _client([httpx.Response(429, headers={"retry-after": "3"}), _ok()])

    client.complete([], temperature=0.2)

    assert sleeps == [3.0]


def test_non_retryable_status_fails_immediately():
    client, requests, sleeps = _client([httpx.Response(400, text="bad request body")])

    with pytest.raises(ChatCompletionError, match="OpenAI responded with 400: bad request body"):
        client.complete([], temperature=0.2)

    assert len(requests) == 1
    assert sleeps == []


def test_retries_exhausted_after_max_attempts():
    client, requests, sleeps = _client([httpx.Response(500)] * 3, max_attempts=3)

    with pytest.raises(ChatCompletionError, match="retries exhausted"):
        client.complete([], temperature=0.2)

    assert len(requests) == 3
    assert len(sleeps) == 2


def test_missing_content_is_terminal():
    client, requests, _ = _client([httpx.Response(200, json={"choices": []})])

    with pytest.raises(ChatCompletionError, match="missing content"):
        client.complete([], temperature=0.2)

    assert len(requests) == 1


def test_model_used_falls_back_to_configured_model():
    client, _, _ = _client(
        [httpx.Response(200, json={"choices": [{"message": {"content": "x"}}]})]
    )

    assert client.complete([], temperature=0.2).model_used == "gpt-4o-mini"


def test_network_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ChatClient(
        ProviderConfig(),
        "sk-test",
        transport=httpx.MockTransport(handler),
        sleep=lambda _: None,
    )

    with pytest.raises(ChatCompletionError, match="ConnectError"):
        client.complete([], temperature=0.2)


def test_missing_api_key_rejected():
    with pytest.raises(ValueError):
        ChatClient(ProviderConfig(), "")


def test_backoff_schedule_and_cap():
    assert compute_backoff_ms(1) == 600
    assert compute_backoff_ms(2) == 1200
    assert compute_backoff_ms(3, jitter_ms=100) == 2500
    assert compute_backoff_ms(10) == 30_000
    assert compute_backoff_ms(1, retry_after_seconds=5) == 5000


def test_retry_after_parsing():
    assert parse_retry_after("2") == 2.0
    assert parse_retry_after(None) == 0.0
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0


def test_retryable_statuses():
    assert is_retryable_status(429)
    assert is_retryable_status(502)
    assert not is_retryable_status(400)
    assert not is_retryable_status(404)


def test_retry_after_rejects_non_finite_and_caps_large_values():
    assert parse_retry_after("inf") == 0.0
    assert parse_retry_after("nan") == 0.0
    assert parse_retry_after("1e400") == 0.0
    assert parse_retry_after("-5") == 0.0
    assert parse_retry_after("86400") == 120.0


def test_jitter_only_lengthens_backoff():
    assert compute_backoff_ms(1, jitter_ms=250) == 850
    assert compute_backoff_ms(1, jitter_ms=0) == 600


def test_infinite_retry_after_degrades_to_heuristic_overview():
    from participation_dashboard.analyzers.summarizer import Summarizer
    from participation_dashboard.config import AppConfig
    from participation_dashboard.core.types import Post
    from participation_dashboard.llm.cache import LRUSummaryCache

    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, headers={"retry-after": "inf"})

    cfg = AppConfig()
    client = ChatClient(
        cfg.provider,
        "sk-test",
        max_attempts=2,
        transport=httpx.MockTransport(handler),
        sleep=sleeps.append,
        jitter=lambda: 0.0,
    )

    perspective = Summarizer(cfg, client, LRUSummaryCache()).build_ai_perspective(
        [Post(id="1", title="HW1 question", tags=["hw:1"])]
    )

    assert perspective.mode == "heuristic"
    assert "OpenAI failed: OpenAI retries exhausted" in perspective.summary
    assert sleeps == [0.6]
