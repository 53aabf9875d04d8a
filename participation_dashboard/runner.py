"""
Dashboard orchestration.

This module wires the stages together for one dashboard request:
1. Load and normalize posts from the CSV file
2. Filter by search query and paginate
3. Build the ungrouped overview
4. Build homework/model group summaries
5. Optionally render HTML or Markdown output

The summary cache is passed in by the caller so its lifetime spans as many
requests as the caller wants (the CLI keeps one per process).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

import httpx

from .analyzers.summarizer import Summarizer
from .config import AppConfig, get_api_key
from .core.query import DEFAULT_PAGE_SIZE, filter_posts, paginate
from .core.types import AIPerspective, GroupedAIPerspective, LoadResult, Post, PostPage
from .input.csv_loader import load_posts
from .llm.cache import LRUSummaryCache, SummaryCache
from .llm.client import ChatClient
from .llm.tracing import set_span_output, start_span
from .output.renderer import render_dashboard_html, render_dashboard_markdown
from .utils.logging import log_event

logger = logging.getLogger(__name__)

VIEWS = ("hw", "model", "posts")


@dataclass
class DashboardView:
    """Everything the presentation layer needs for one page.

    Attributes:
        warning: Non-fatal ingestion warning, if any
        query: Trimmed search query
        view: "hw", "model" or "posts"
        filtered: All posts matching the query
        page: Current page of filtered posts
        overview: Ungrouped AI perspective over the filtered posts
        grouped: Grouped AI perspective over the filtered posts
    """
    warning: str | None
    query: str
    view: str
    filtered: list[Post]
    page: PostPage
    overview: AIPerspective
    grouped: GroupedAIPerspective


def build_summarizer(
    cfg: AppConfig,
    cache: SummaryCache | None = None,
    llm_logger: logging.Logger | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Summarizer:
    """Create a Summarizer; without an API key it stays purely heuristic."""
    api_key = get_api_key(cfg.provider)
    client = None
    if api_key:
        client = ChatClient(
            cfg.provider,
            api_key,
            max_attempts=cfg.summary.max_attempts,
            llm_logger=llm_logger,
            transport=transport,
        )
    if cache is None:
        cache = LRUSummaryCache(cfg.cache.max_entries)
    return Summarizer(cfg, client, cache, logger)


def build_dashboard(
    cfg: AppConfig,
    summarizer: Summarizer,
    query: str = "",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    view: str = "hw",
    loaded: LoadResult | None = None,
) -> DashboardView:
    view = view if view in VIEWS else "hw"
    query = (query or "").strip()

    with start_span("dashboard.build", input_value={"query": query, "view": view}) as span:
        loaded = loaded or load_posts(cfg)
        filtered = filter_posts(loaded.posts, query)
        post_page = paginate(filtered, page, limit)

        overview = summarizer.build_ai_perspective(filtered)
        grouped = summarizer.build_grouped_ai_perspective(filtered)

        log_event(
            logger,
            "Dashboard built",
            event="dashboard_built",
            total=len(loaded.posts),
            filtered=len(filtered),
            overview_mode=overview.mode,
            grouped_mode=grouped.mode,
        )
        set_span_output(span, {"filtered": len(filtered), "mode": grouped.mode})

    return DashboardView(
        warning=loaded.warning,
        query=query,
        view=view,
        filtered=filtered,
        page=post_page,
        overview=overview,
        grouped=grouped,
    )


def render_dashboard(dashboard: DashboardView, output_path: Path, fmt: str = "html", title: str = "Special Participation A") -> Path:
    """Write the dashboard to ``output_path`` as HTML or Markdown."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "markdown":
        render_dashboard_markdown(dashboard, output_path, title)
    else:
        render_dashboard_html(dashboard, output_path, title)
    log_event(logger, "Dashboard rendered", event="dashboard_rendered", output=str(output_path), format=fmt)
    return output_path
