"""Summarizer producing overview and grouped perspectives of posts.

Remote summaries are best-effort: every failure degrades to the heuristic
perspective with the failure reason recorded in the note, so callers always
receive a complete result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import re
from typing import Any, Union

from ..config import AppConfig
from ..core.grouping import group_posts
from ..core.types import (
    AIPerspective,
    Cluster,
    GroupedAIPerspective,
    GroupPostSummary,
    GroupSummary,
    Post,
)
from ..llm.cache import SummaryCache, cache_key
from ..llm.client import ChatClient, ChatCompletionError
from ..llm.concurrency import map_with_concurrency
from ..llm.prompts import build_group_messages, build_overview_messages
from ..utils.logging import log_event
from .heuristic import (
    build_heuristic_grouped_perspective,
    build_heuristic_perspective,
    group_label,
    heuristic_takeaway,
)


NO_POSTS_SUMMARY = "No posts found — check the CSV path and search filters."
NO_KEY_NOTE = "OPENAI_API_KEY not provided."
BASELINE_NOTE = "Heuristic baseline."
MAX_CLUSTERS = 5

_LIST_MARKER_RE = re.compile(r"^\d+[.)]\s*")
_SIZE_RE = re.compile(r"(\d+)\s*(posts|threads|items)?", re.IGNORECASE)


@dataclass
class ParsedClusters:
    clusters: list[Cluster] = field(default_factory=list)


@dataclass
class FallbackCluster:
    cluster: Cluster

    @property
    def clusters(self) -> list[Cluster]:
        return [self.cluster]


ClusterParse = Union[ParsedClusters, FallbackCluster]


class Summarizer:
    """Build AI perspectives over a list of posts.

    Args:
        cfg: Application config (summary section is used)
        client: Chat client, or None when no API key is configured
        cache: Summary cache shared across calls
        logger: Optional logger for structured events
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: ChatClient | None,
        cache: SummaryCache,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.client = client
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)

    def build_ai_perspective(self, posts: list[Post]) -> AIPerspective:
        if not posts:
            return AIPerspective(summary=NO_POSTS_SUMMARY, clusters=[], model_used="none", mode="heuristic")

        if self.client is None:
            return build_heuristic_perspective(posts, NO_KEY_NOTE)

        try:
            return self._summarize_overview(posts)
        except ChatCompletionError as exc:
            log_event(self.logger, "Overview summary failed", event="overview_failed", error=str(exc))
            return build_heuristic_perspective(posts, f"OpenAI failed: {exc}")

    def build_grouped_ai_perspective(self, posts: list[Post]) -> GroupedAIPerspective:
        baseline = build_heuristic_grouped_perspective(posts, BASELINE_NOTE)

        if self.client is None:
            return build_heuristic_grouped_perspective(posts, NO_KEY_NOTE)

        try:
            enhanced = self._summarize_groups(posts)
        except ChatCompletionError as exc:
            log_event(self.logger, "Group summaries failed", event="groups_failed", error=str(exc))
            return build_heuristic_grouped_perspective(posts, f"OpenAI failed: {exc}")

        return merge_group_perspectives(baseline, enhanced)

    def _summarize_overview(self, posts: list[Post]) -> AIPerspective:
        summary_cfg = self.cfg.summary
        sample = [
            {
                "id": post.id,
                "title": post.title,
                "body": (post.body or "")[: summary_cfg.overview_body_chars],
                "tags": list(post.tags),
                "type": post.type,
            }
            for post in posts[: summary_cfg.overview_sample_size]
        ]
        model = self.client.model
        key = cache_key({"kind": "overview", "model": model, "sample": sample})
        cached = self.cache.get(key)
        if cached is not None:
            log_event(self.logger, "Overview cache hit", event="overview_cache_hit")
            return cached

        completion = self.client.complete(
            build_overview_messages(sample), temperature=0.4, purpose="overview"
        )
        content = completion.content
        result = AIPerspective(
            summary=" ".join(content.split("\n")[:3]).strip(),
            clusters=extract_clusters(content).clusters,
            model_used=completion.model_used,
            mode="llm",
        )
        self.cache.set(key, result)
        return result

    def _summarize_groups(self, posts: list[Post]) -> GroupedAIPerspective:
        model = self.client.model
        max_groups = self.cfg.summary.max_groups
        if max_groups <= 0:
            return GroupedAIPerspective(homeworks=[], models=[], model_used=model, mode="llm")

        concurrency = max(1, self.cfg.summary.concurrency)
        groups = group_posts(posts)

        homework_entries = _largest(groups.homework_groups, max_groups)
        model_entries = _largest(groups.model_groups, max_groups)
        log_event(
            self.logger,
            "Summarizing groups",
            event="groups_selected",
            homework_groups=len(homework_entries),
            model_groups=len(model_entries),
            concurrency=concurrency,
        )

        homeworks = map_with_concurrency(
            homework_entries, concurrency, lambda entry: self._summarize_group(entry[0], entry[1])
        )
        models = map_with_concurrency(
            model_entries, concurrency, lambda entry: self._summarize_group(entry[0], entry[1])
        )
        return GroupedAIPerspective(homeworks=homeworks, models=models, model_used=model, mode="llm")

    def _summarize_group(self, key: str, items: list[Post]) -> GroupSummary:
        summary_cfg = self.cfg.summary
        label = group_label(key)
        sample = [
            {
                "id": post.id,
                "title": post.title,
                "body": (post.body or "")[: summary_cfg.group_body_chars],
                "tags": list(post.tags),
                "author": post.author or "",
                "type": post.type or "",
            }
            for post in items[: summary_cfg.group_sample_size]
        ]
        ckey = cache_key({"kind": "group", "model": self.client.model, "key": key, "sample": sample})
        cached = self.cache.get(ckey)
        if cached is not None:
            log_event(self.logger, "Group cache hit", event="group_cache_hit", group=key)
            return cached

        completion = self.client.complete(
            build_group_messages(label, sample), temperature=0.25, purpose="group"
        )
        result = build_group_summary(key, label, len(items), sample, completion.content)
        self.cache.set(ckey, result)
        return result


def build_group_summary(
    key: str,
    label: str,
    count: int,
    sample: list[dict[str, Any]],
    content: str,
) -> GroupSummary:
    """Turn a model's JSON reply into a GroupSummary covering every sampled post.

    Posts the model left out are patched in with a heuristic takeaway, and
    the list is capped at the sample size.
    """
    parsed = parse_json_object(content) or {}
    overview = parsed.get("overview")
    overview = overview if isinstance(overview, str) else ""

    raw_posts = parsed.get("posts")
    posts: list[GroupPostSummary] = []
    for raw in raw_posts if isinstance(raw_posts, list) else []:
        record = raw if isinstance(raw, dict) else {}
        post = GroupPostSummary(
            id=str(record.get("id") or ""),
            title=record.get("title") if isinstance(record.get("title"), str) else "",
            takeaway=record.get("takeaway") if isinstance(record.get("takeaway"), str) else "",
        )
        if post.id and post.title and post.takeaway:
            posts.append(post)

    seen = {post.id for post in posts}
    for item in sample:
        item_id = str(item["id"])
        if item_id in seen:
            continue
        posts.append(
            GroupPostSummary(
                id=item_id,
                title=item["title"],
                takeaway=heuristic_takeaway(item.get("body"), placeholder="No body."),
            )
        )

    return GroupSummary(
        key=key,
        label=label,
        count=count,
        overview=overview or f"AI summary unavailable for {label}.",
        posts=posts[: len(sample)],
    )


def parse_json_object(content: str) -> dict[str, Any] | None:
    """Decode the span from the first ``{`` to the last ``}``; None on failure."""
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    try:
        obj = json.loads(content[start : end + 1])
    except (ValueError, RecursionError):
        return None
    return obj if isinstance(obj, dict) else None


def extract_clusters(content: str) -> ClusterParse:
    """Parse ``<title> - <description> (<n> posts)`` lines into clusters.

    Never raises; when no line parses a single generic cluster is returned.
    """
    clusters: list[Cluster] = []
    for line in (raw.strip() for raw in content.split("\n")):
        if not line:
            continue
        parts = _LIST_MARKER_RE.sub("", line).split(" - ")
        if len(parts) < 2:
            continue
        title, rest = parts[0], parts[1]
        size_match = _SIZE_RE.search(rest)
        size = int(size_match.group(1)) if size_match else 0
        description = rest.replace(size_match.group(0), "", 1) if size_match else rest
        clusters.append(Cluster(title=title.strip(), description=description.strip(), tags=[], size=size))

    if not clusters:
        return FallbackCluster(
            Cluster(
                title="General activity",
                description="Threads span questions, announcements, and project chatter.",
                tags=[],
                size=max(1, len(content) % 7),
            )
        )
    return ParsedClusters(clusters[:MAX_CLUSTERS])


def merge_group_perspectives(
    baseline: GroupedAIPerspective,
    enhanced: GroupedAIPerspective,
) -> GroupedAIPerspective:
    """Overlay enhanced groups onto the baseline by key, keeping baseline order."""
    by_key = {group.key: group for group in [*enhanced.homeworks, *enhanced.models]}
    return GroupedAIPerspective(
        homeworks=[by_key.get(group.key, group) for group in baseline.homeworks],
        models=[by_key.get(group.key, group) for group in baseline.models],
        model_used=enhanced.model_used,
        mode=enhanced.mode,
        note=baseline.note,
    )


def _largest(groups: dict[str, list[Post]], limit: int) -> list[tuple[str, list[Post]]]:
    return sorted(groups.items(), key=lambda item: -len(item[1]))[:limit]
