"""
Langfuse tracing helpers for chat-completion calls.

Spans are only emitted when tracing is enabled in config and both Langfuse
keys are available; otherwise every helper is a no-op.
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import os
from typing import Any, Iterator

from ..config import LangfuseConfig, get_langfuse_host
from ..utils.logging import redact_text, truncate_text

_TRACER = None
_CFG: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Initialize Langfuse tracing if enabled and configured."""
    global _TRACER, _CFG  # noqa: PLW0603
    _CFG = cfg
    _TRACER = None
    if not cfg.enabled:
        return

    public_key = cfg.public_key or os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = cfg.secret_key or os.getenv("LANGFUSE_SECRET_KEY")
    if not public_key or not secret_key:
        return

    from langfuse import Langfuse

    _TRACER = Langfuse(
        public_key=public_key,
        secret_key=secret_key,
        host=get_langfuse_host(cfg),
    )


def get_tracer():
    return _TRACER


@contextmanager
def start_span(
    name: str,
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    """Start a Langfuse span if tracing is enabled."""
    tracer = _TRACER
    if tracer is None:
        yield None
        return

    with tracer.start_as_current_span(
        name=name,
        input=_normalize_text(input_value),
        metadata=_clean_attributes(attributes or {}),
    ) as span:
        yield span


def set_span_output(span: Any | None, output_value: Any) -> None:
    if span is None:
        return
    payload = _normalize_text(output_value)
    if payload is None:
        return
    span.update(output=payload)


def record_span_error(span: Any | None, exc: Exception) -> None:
    if span is None:
        return
    span.update(level="ERROR", status_message=str(exc))


def flush() -> None:
    """Flush any pending traces to Langfuse.

    Langfuse uses async ingestion by default. Call this before program
    exit to ensure all traces are sent.
    """
    tracer = _TRACER
    if tracer is None:
        return
    tracer.flush()


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    cfg = _CFG
    mode = cfg.redaction if cfg is not None else "none"
    if isinstance(value, str):
        text = redact_text(value, mode)
    elif mode == "redact_content":
        text = ""
    else:
        # Redact string leaves first: prompt content embeds post JSON that
        # would be escaped once the whole payload is encoded.
        text = json.dumps(_redact_leaves(value, mode), ensure_ascii=True, default=str)
    if cfg is None:
        return text
    return truncate_text(text, cfg.max_text_chars)


def _redact_leaves(value: Any, mode: str) -> Any:
    if isinstance(value, str):
        return redact_text(value, mode)
    if isinstance(value, dict):
        return {key: _redact_leaves(item, mode) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_leaves(item, mode) for item in value]
    return value


def _clean_attributes(attrs: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in attrs.items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            cleaned[key] = value
        else:
            cleaned[key] = str(value)
    return cleaned
