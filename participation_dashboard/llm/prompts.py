"""Prompt loading and rendering helpers for summarization calls."""

from __future__ import annotations

from functools import lru_cache
import json
from pathlib import Path
from typing import Any


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

OVERVIEW_SYSTEM_PROMPT = "You generate dashboards that summarize discussions."
GROUP_SYSTEM_PROMPT = "You produce precise, structured summaries."


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def _dump_sample(sample: list[dict[str, Any]]) -> str:
    return json.dumps(sample, indent=2, ensure_ascii=False)


def build_overview_messages(sample: list[dict[str, Any]]) -> list[dict[str, str]]:
    prompt = _render_template("overview", threads=_dump_sample(sample))
    return [
        {"role": "system", "content": OVERVIEW_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def build_group_messages(label: str, sample: list[dict[str, Any]]) -> list[dict[str, str]]:
    prompt = _render_template("group", label=label, threads=_dump_sample(sample))
    return [
        {"role": "system", "content": GROUP_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
