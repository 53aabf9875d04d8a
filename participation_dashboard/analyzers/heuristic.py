"""Local, dependency-free summaries built from tag counts and grouping."""

from __future__ import annotations

from collections import Counter
import re

from ..core.grouping import group_posts
from ..core.types import (
    AIPerspective,
    Cluster,
    GroupedAIPerspective,
    GroupPostSummary,
    GroupSummary,
    Post,
)


FALLBACK_SUMMARY = (
    "Waiting for posts. Once the CSV is available, the AI reader will summarize "
    "entries and cluster them by theme."
)
UNTAGGED = "untagged"
MAX_HEURISTIC_CLUSTERS = 4
MAX_GROUP_POSTS = 40
TAKEAWAY_CHARS = 120
NO_PREVIEW = "No preview content available."

_KEY_PREFIX_RE = re.compile(r"^(hw:|model:)")


def heuristic_takeaway(body: str | None, placeholder: str = NO_PREVIEW) -> str:
    return (body or "")[:TAKEAWAY_CHARS] or placeholder


def group_label(key: str) -> str:
    """``hw:3`` -> ``Homework 3``; ``model:claude`` -> ``Model claude``."""
    prefix = "Homework" if key.startswith("hw:") else "Model"
    return f"{prefix} {_KEY_PREFIX_RE.sub('', key)}"


def build_heuristic_perspective(posts: list[Post], note: str) -> AIPerspective:
    tag_counts: Counter[str] = Counter()
    for post in posts:
        for tag in post.tags or [UNTAGGED]:
            tag_counts[tag or UNTAGGED] += 1

    # most_common keeps first-seen order among equal counts
    top = tag_counts.most_common(MAX_HEURISTIC_CLUSTERS)
    top_tags = ", ".join(f"{tag}: {count}" for tag, count in top)
    clusters = [
        Cluster(
            title=tag,
            description=f"AI bucketed {count} threads under “{tag}”.",
            tags=[tag],
            size=count,
        )
        for tag, count in top
    ]

    if posts:
        summary = (
            f"AI heuristic summary: {len(posts)} threads detected. "
            f"Top tags — {top_tags or 'no tags yet'}. {note}"
        )
    else:
        summary = FALLBACK_SUMMARY

    return AIPerspective(summary=summary, clusters=clusters, model_used="heuristic", mode="heuristic")


def build_heuristic_grouped_perspective(posts: list[Post], note: str) -> GroupedAIPerspective:
    groups = group_posts(posts)

    homeworks = [
        _to_summary(key, items, note)
        for key, items in sorted(groups.homework_groups.items(), key=lambda item: _natural_key(item[0]))
    ]
    models = [
        _to_summary(key, items, note)
        for key, items in sorted(groups.model_groups.items(), key=lambda item: -len(item[1]))
    ]

    return GroupedAIPerspective(
        homeworks=homeworks,
        models=models,
        model_used="heuristic",
        mode="heuristic",
        note=note,
    )


def _to_summary(key: str, items: list[Post], note: str) -> GroupSummary:
    return GroupSummary(
        key=key,
        label=group_label(key),
        count=len(items),
        overview=f"Heuristic overview: {len(items)} posts. {note}",
        posts=[
            GroupPostSummary(id=post.id, title=post.title, takeaway=heuristic_takeaway(post.body))
            for post in items[:MAX_GROUP_POSTS]
        ],
    )


def _natural_key(value: str) -> list[tuple[int, int | str]]:
    """Sort key comparing digit runs numerically, so ``hw:2`` < ``hw:10``."""
    parts = re.split(r"(\d+)", value.lower())
    return [(0, int(part)) if part.isdigit() else (1, part) for part in parts if part]
