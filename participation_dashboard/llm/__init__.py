"""LLM client, caching, prompts and observability."""

from .cache import LRUSummaryCache, SummaryCache, cache_key
from .client import ChatClient, ChatCompletion, ChatCompletionError
from .concurrency import map_with_concurrency
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "ChatClient",
    "ChatCompletion",
    "ChatCompletionError",
    "SummaryCache",
    "LRUSummaryCache",
    "cache_key",
    "map_with_concurrency",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
