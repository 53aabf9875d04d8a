"""
Homework and model grouping of posts.

Each post is assigned to at most one homework bucket (``hw:<n>``) and to
zero or more model buckets (``model:<name>``). Explicit CSV tags win over
text detection; text detection uses ordered regular expressions so the
first matching phrasing decides the homework number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from .types import Post


MIN_MODEL_GROUP_SIZE = 2

_HOMEWORK_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bhw\s*([0-9]{1,2})\b", re.IGNORECASE),
    re.compile(r"\bhw[:\s_\-]*([0-9]{1,2})\b", re.IGNORECASE),
    re.compile(r"\bhomework\s*([0-9]{1,2})\b", re.IGNORECASE),
    re.compile(r"\bassignment\s*([0-9]{1,2})\b", re.IGNORECASE),
    re.compile(r"\bproj(?:ect)?\s*([0-9]{1,2})\b", re.IGNORECASE),
]

_MODEL_DICTIONARY: list[tuple[str, list[re.Pattern[str]]]] = [
    ("gpt-4o", [re.compile(r"\bgpt[-\s]?4o\b", re.IGNORECASE)]),
    ("gpt-4o-mini", [re.compile(r"\bgpt[-\s]?4o[-\s]?mini\b", re.IGNORECASE)]),
    (
        "o1",
        [
            re.compile(r"\bo1\b", re.IGNORECASE),
            re.compile(r"\bo1[-\s]preview\b", re.IGNORECASE),
            re.compile(r"\bo1[-\s]mini\b", re.IGNORECASE),
        ],
    ),
    ("claude", [re.compile(r"\bclaude\b", re.IGNORECASE), re.compile(r"\banthropic\b", re.IGNORECASE)]),
    ("gemini", [re.compile(r"\bgemini\b", re.IGNORECASE)]),
    ("llama", [re.compile(r"\bllama\b", re.IGNORECASE), re.compile(r"\bmeta[-\s]?llama\b", re.IGNORECASE)]),
    ("mistral", [re.compile(r"\bmistral\b", re.IGNORECASE)]),
    ("deepseek", [re.compile(r"\bdeepseek\b", re.IGNORECASE)]),
    ("qwen", [re.compile(r"\bqwen\b", re.IGNORECASE)]),
    ("grok", [re.compile(r"\bgrok\b", re.IGNORECASE)]),
]

# Best-effort "model: xyz" capture.
_GENERIC_MODEL_RE = re.compile(r"\bmodel\s*[:=]\s*([a-z0-9.\-_]+)\b", re.IGNORECASE)


@dataclass
class PostGroups:
    """Buckets keyed by ``hw:<n>`` and ``model:<name>``, in first-seen order."""
    homework_groups: dict[str, list[Post]] = field(default_factory=dict)
    model_groups: dict[str, list[Post]] = field(default_factory=dict)


def group_posts(posts: list[Post]) -> PostGroups:
    """Group posts by homework number and by model name.

    Model buckets with fewer than ``MIN_MODEL_GROUP_SIZE`` posts are dropped
    after all posts are scanned; homework buckets are always kept. A post
    whose text mentions several models lands in every matching bucket.
    """
    groups = PostGroups()

    for post in posts:
        text = _combined_text(post)

        hw = post.tag_value("hw") or detect_homework(text)
        if hw:
            _append_unique(groups.homework_groups, f"hw:{hw}", post)

        base_model = post.tag_value("base_model")
        if base_model:
            _append_unique(groups.model_groups, f"model:{base_model}", post)
        else:
            for model in detect_models(text):
                _append_unique(groups.model_groups, f"model:{model}", post)

    groups.model_groups = {
        key: items
        for key, items in groups.model_groups.items()
        if len(items) >= MIN_MODEL_GROUP_SIZE
    }
    return groups


def detect_homework(text: str) -> str | None:
    """Return the homework number of the first matching pattern, if any."""
    lowered = text.lower()
    for pattern in _HOMEWORK_PATTERNS:
        match = pattern.search(lowered)
        if match and match.group(1):
            return match.group(1)
    return None


def detect_models(text: str) -> list[str]:
    """Return every known model mentioned in the text, in dictionary order."""
    lowered = text.lower()
    hits: list[str] = []

    for key, patterns in _MODEL_DICTIONARY:
        if any(pattern.search(lowered) for pattern in patterns):
            hits.append(key)

    match = _GENERIC_MODEL_RE.search(lowered)
    if match and match.group(1) not in hits:
        hits.append(match.group(1))

    return hits


def _combined_text(post: Post) -> str:
    return f"{post.title}\n{post.body or ''}\n{' '.join(post.tags)}"


def _append_unique(groups: dict[str, list[Post]], key: str, post: Post) -> None:
    items = groups.setdefault(key, [])
    post_id = str(post.id)
    if any(str(item.id) == post_id for item in items):
        return
    items.append(post)
