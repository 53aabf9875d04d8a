"""OpenAI-compatible chat-completions client with retry and backoff."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import random
import time
from typing import Any, Callable

import httpx

from ..config import ProviderConfig
from ..utils.logging import log_event, truncate_text
from .tracing import record_span_error, set_span_output, start_span

logger = logging.getLogger(__name__)

BACKOFF_BASE_MS = 600
BACKOFF_CAP_MS = 30_000
JITTER_MAX_MS = 250
RETRY_AFTER_CAP_SECONDS = 120.0


class ChatCompletionError(RuntimeError):
    """Terminal failure of a chat-completion request."""


@dataclass
class ChatCompletion:
    content: str
    model_used: str


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


def parse_retry_after(value: str | None) -> float:
    """Return the ``retry-after`` header in seconds, or 0 when absent/invalid.

    Non-finite values count as invalid and large values are capped at
    ``RETRY_AFTER_CAP_SECONDS``.
    """
    if not value:
        return 0.0
    try:
        seconds = float(value.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(seconds):
        return 0.0
    return min(RETRY_AFTER_CAP_SECONDS, max(0.0, seconds))


def compute_backoff_ms(attempt: int, retry_after_seconds: float = 0.0, jitter_ms: float = 0.0) -> float:
    """Delay before the next attempt.

    Exponential backoff starting at 600ms and doubling per attempt, capped at
    30s, with jitter added; a larger ``retry-after`` value takes precedence.
    Jitter is drawn from 0..250ms, so it only ever lengthens the delay.
    """
    backoff = min(BACKOFF_CAP_MS, BACKOFF_BASE_MS * 2 ** (attempt - 1) + jitter_ms)
    return max(retry_after_seconds * 1000, backoff)


class ChatClient:
    """Sends chat-completion requests, retrying on 429 and 5xx responses.

    Any other non-success status, a network error, or a success response
    without message content is a terminal ``ChatCompletionError``.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str,
        max_attempts: int = 5,
        llm_logger: logging.Logger | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] | None = None,
    ):
        if not api_key:
            raise ValueError("Missing OpenAI API key")
        self.cfg = cfg
        self.api_key = api_key
        self.max_attempts = max(1, int(max_attempts))
        self.llm_logger = llm_logger
        self._transport = transport
        self._sleep = sleep
        self._jitter = jitter or (lambda: random.uniform(0, JITTER_MAX_MS))

    @property
    def model(self) -> str:
        return self.cfg.model

    def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float,
        purpose: str = "chat",
    ) -> ChatCompletion:
        payload = {
            "model": self.cfg.model,
            "messages": messages,
            "temperature": temperature,
        }
        with start_span(
            f"openai.{purpose}",
            input_value=messages,
            attributes={"llm.model": self.cfg.model, "llm.provider": "openai"},
        ) as span:
            try:
                result = self._complete_with_retries(payload, purpose)
            except ChatCompletionError as exc:
                record_span_error(span, exc)
                log_event(
                    self.llm_logger,
                    "LLM response",
                    event=f"llm_{purpose}",
                    status="error",
                    model=self.cfg.model,
                    error=str(exc),
                )
                raise
            set_span_output(span, result.content)

        log_event(
            self.llm_logger,
            "LLM response",
            event=f"llm_{purpose}",
            status="ok",
            model=result.model_used,
            raw_response=truncate_text(result.content),
        )
        return result

    def _complete_with_retries(self, payload: dict[str, Any], purpose: str) -> ChatCompletion:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    resp = client.post(url, json=payload, headers=headers)
                except httpx.HTTPError as exc:
                    raise ChatCompletionError(f"{type(exc).__name__}: {exc}") from exc

                if resp.is_success:
                    return self._parse_success(resp)

                if is_retryable_status(resp.status_code):
                    if attempt == self.max_attempts:
                        break
                    delay_ms = compute_backoff_ms(
                        attempt,
                        parse_retry_after(resp.headers.get("retry-after")),
                        self._jitter(),
                    )
                    logger.warning(
                        "OpenAI %s returned %s on attempt %s/%s; retrying in %.0fms",
                        purpose,
                        resp.status_code,
                        attempt,
                        self.max_attempts,
                        delay_ms,
                    )
                    self._sleep(delay_ms / 1000)
                    continue

                body = resp.text
                suffix = f": {body[:140]}" if body else ""
                raise ChatCompletionError(f"OpenAI responded with {resp.status_code}{suffix}")

        raise ChatCompletionError("OpenAI retries exhausted (429/5xx).")

    def _parse_success(self, resp: httpx.Response) -> ChatCompletion:
        try:
            data = resp.json()
        except ValueError as exc:
            raise ChatCompletionError("OpenAI response was not valid JSON") from exc
        content = _extract_content(data)
        if not content:
            raise ChatCompletionError("OpenAI response missing content")
        model_used = data.get("model") if isinstance(data, dict) else None
        return ChatCompletion(content=content, model_used=str(model_used or self.cfg.model))


def _extract_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""
