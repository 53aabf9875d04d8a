"""
Core data types for the participation dashboard.

This module defines the data structures passed between pipeline stages:
- Post: One normalized discussion thread parsed from a CSV row
- LoadResult / PostLookup: Ingestion results carrying a non-fatal warning
- PostPage: One page of a filtered post list
- Cluster / AIPerspective: Ungrouped overview of a set of posts
- GroupSummary / GroupedAIPerspective: Per-homework and per-model rollups
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


POST_TYPE = "special_participation"


@dataclass
class Post:
    """Represents one normalized discussion thread.

    Attributes:
        id: Identifier unique within a load (thread_id or a random UUID)
        title: Display title, never empty
        body: Raw post text, may be empty
        author: Author name, "Unknown author" when absent
        url: Optional permalink to the original thread
        tags: Ordered ``key:value`` labels such as ``hw:3`` or ``model:gpt-4o``
        type: Provenance classification
        model: Model column as written by the author
        base_model: Normalized model family column
        version: Model version column
        hw_number: Homework number column
        name: Raw author column
        title_raw: Raw (uncleaned) title column
        thread_id: Raw thread id column
    """
    id: str
    title: str
    body: str = ""
    author: str = "Unknown author"
    url: str | None = None
    tags: list[str] = field(default_factory=list)
    type: str = POST_TYPE
    model: str = ""
    base_model: str = ""
    version: str = ""
    hw_number: str = ""
    name: str = ""
    title_raw: str = ""
    thread_id: str = ""

    def tag_value(self, prefix: str) -> str | None:
        """Return the value of the first tag starting with ``prefix:``."""
        wanted = f"{prefix.lower()}:"
        for tag in self.tags:
            if tag.lower().startswith(wanted):
                value = tag.split(":", 1)[1].strip()
                return value or None
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LoadResult:
    """All posts read from the CSV source plus an optional warning."""
    posts: list[Post] = field(default_factory=list)
    warning: str | None = None
    source: str = "csv"


@dataclass
class PostLookup:
    """Single post lookup result; post is None when the id is unknown."""
    post: Post | None = None
    warning: str | None = None
    source: str = "csv"


@dataclass
class PostPage:
    """One page of posts.

    Attributes:
        posts: Posts on this page
        page: 1-based page number after clamping
        total_pages: Number of pages (at least 1)
        limit: Page size after clamping
        total: Number of posts across all pages
    """
    posts: list[Post]
    page: int
    total_pages: int
    limit: int
    total: int


@dataclass
class Cluster:
    title: str
    description: str
    tags: list[str] = field(default_factory=list)
    size: int = 0


@dataclass
class AIPerspective:
    """Ungrouped overview of a post set.

    Attributes:
        summary: Short natural-language summary
        clusters: Up to five thematic clusters
        model_used: Remote model name, "heuristic", or "none"
        mode: "llm" or "heuristic"
    """
    summary: str
    clusters: list[Cluster] = field(default_factory=list)
    model_used: str = "heuristic"
    mode: str = "heuristic"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class GroupPostSummary:
    id: str
    title: str
    takeaway: str


@dataclass
class GroupSummary:
    """Summary of one homework or model bucket.

    Attributes:
        key: Stable bucket identifier, ``hw:<n>`` or ``model:<name>``
        label: Human-readable bucket name
        count: Number of posts in the bucket
        overview: Two to four sentence description
        posts: One takeaway per post, capped to a display limit
    """
    key: str
    label: str
    count: int
    overview: str
    posts: list[GroupPostSummary] = field(default_factory=list)


@dataclass
class GroupedAIPerspective:
    homeworks: list[GroupSummary] = field(default_factory=list)
    models: list[GroupSummary] = field(default_factory=list)
    model_used: str = "heuristic"
    mode: str = "heuristic"
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
