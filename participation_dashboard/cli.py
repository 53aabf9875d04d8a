"""
Command-line interface for the participation dashboard.

Uses Typer to expose the dashboard views (post list, single post, AI
overview, grouped summaries) and static rendering. Supports loading .env
files for API key configuration.
"""

from __future__ import annotations

from dataclasses import asdict
import json
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, load_config
from .core.query import DEFAULT_PAGE_SIZE, filter_posts, paginate
from .core.types import GroupSummary
from .input.csv_loader import load_post_by_id, load_posts
from .llm.cache import LRUSummaryCache
from .llm.tracing import flush, setup_langfuse
from .runner import build_dashboard, build_summarizer, render_dashboard
from .utils.logging import LLM_LOGGER, setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False, help="CSV-backed discussion dashboard with AI summaries.")
console = Console()

# One summary cache per process; every command in this process shares it.
_CACHE: LRUSummaryCache | None = None

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
ApiKeyOption = typer.Option(
    None,
    "--api-key",
    envvar="OPENAI_API_KEY",
    help="Override provider API key (or set OPENAI_API_KEY / .env).",
)
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
QueryOption = typer.Option("", "--query", "-q", help="Search title, author, text and tags.")
JsonOption = typer.Option(False, "--json", help="Emit JSON instead of tables.")


def _prepare(config: Path | None, api_key: str | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if api_key:
        cfg.provider.api_key = api_key
    if log_level:
        cfg.logging.level = log_level

    log_dir = Path(cfg.logging.log_dir) if cfg.logging.file else None
    setup_logging(cfg.logging, log_dir)
    setup_llm_logger(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)
    return cfg


def _summarizer(cfg: AppConfig):
    global _CACHE  # noqa: PLW0603
    if _CACHE is None:
        _CACHE = LRUSummaryCache(cfg.cache.max_entries)
    return build_summarizer(cfg, _CACHE, llm_logger=logging.getLogger(LLM_LOGGER))


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _warn(warning: str | None) -> None:
    if warning:
        console.print(f"[yellow]{warning}[/yellow]")


@app.command()
def posts(
    query: str = QueryOption,
    page: int = typer.Option(1, "--page", help="1-based page number."),
    limit: int = typer.Option(DEFAULT_PAGE_SIZE, "--limit", help="Posts per page (10-100)."),
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """List posts, optionally filtered by a search query."""
    cfg = _prepare(config, None, log_level)
    loaded = load_posts(cfg)
    post_page = paginate(filter_posts(loaded.posts, query), page, limit)

    if as_json:
        _echo_json(
            {
                "warning": loaded.warning,
                "page": post_page.page,
                "total_pages": post_page.total_pages,
                "limit": post_page.limit,
                "total": post_page.total,
                "posts": [post.to_dict() for post in post_page.posts],
            }
        )
        return

    _warn(loaded.warning)
    table = Table(title=f"Posts ({post_page.total})")
    table.add_column("ID", overflow="fold")
    table.add_column("Title")
    table.add_column("HW")
    table.add_column("Model")
    table.add_column("Author")
    for post in post_page.posts:
        table.add_row(
            post.id,
            post.title,
            post.tag_value("hw") or "",
            post.tag_value("base_model") or "",
            post.author,
        )
    console.print(table)
    console.print(f"Page {post_page.page} / {post_page.total_pages}")


@app.command()
def post(
    post_id: str = typer.Argument(..., help="Post id (thread_id)."),
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Show a single post."""
    cfg = _prepare(config, None, log_level)
    lookup = load_post_by_id(post_id, cfg)

    if as_json:
        _echo_json(
            {
                "warning": lookup.warning,
                "post": lookup.post.to_dict() if lookup.post else None,
            }
        )
        return

    _warn(lookup.warning)
    if lookup.post is None:
        console.print("Post not found")
        raise typer.Exit(code=1)

    item = lookup.post
    console.print(f"[bold]{item.title}[/bold]")
    console.print(f"By {item.author}")
    if item.url:
        console.print(item.url)
    if item.tags:
        console.print("Tags: " + ", ".join(item.tags))
    console.print(item.body or "No content available.", markup=False)


@app.command()
def overview(
    query: str = QueryOption,
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    log_level: str | None = LogLevelOption,
):
    """Summarize the (filtered) posts with clusters."""
    cfg = _prepare(config, api_key, log_level)
    loaded = load_posts(cfg)
    perspective = _summarizer(cfg).build_ai_perspective(filter_posts(loaded.posts, query))
    flush()

    if as_json:
        _echo_json({"warning": loaded.warning, **perspective.to_dict()})
        return

    _warn(loaded.warning)
    console.print(f"AI: [bold]{perspective.mode}[/bold] ({perspective.model_used})")
    console.print(perspective.summary, markup=False)
    for cluster in perspective.clusters[:5]:
        console.print(f"- {cluster.title}: {cluster.description}", markup=False)


@app.command()
def groups(
    view: str = typer.Option("hw", "--view", help="Grouping to show: hw or model."),
    query: str = QueryOption,
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    log_level: str | None = LogLevelOption,
):
    """Show homework or model group summaries."""
    cfg = _prepare(config, api_key, log_level)
    loaded = load_posts(cfg)
    grouped = _summarizer(cfg).build_grouped_ai_perspective(filter_posts(loaded.posts, query))
    flush()

    if as_json:
        _echo_json({"warning": loaded.warning, **grouped.to_dict()})
        return

    _warn(loaded.warning)
    console.print(f"Group AI: [bold]{grouped.mode}[/bold] ({grouped.model_used})")
    selected: list[GroupSummary] = grouped.models if view == "model" else grouped.homeworks
    if not selected:
        console.print("No groups detected.")
        return
    for group in selected:
        console.rule(f"{group.label} ({group.count})")
        console.print(group.overview, markup=False)
        for item in group.posts[:20]:
            console.print(f"  - {item.title} — {item.takeaway}", markup=False)


@app.command()
def render(
    output: Path = typer.Option(Path("out/dashboard.html"), "--output", "-o"),
    fmt: str = typer.Option("html", "--format", help="html or markdown."),
    view: str = typer.Option("hw", "--view", help="hw, model or posts."),
    query: str = QueryOption,
    page: int = typer.Option(1, "--page"),
    limit: int = typer.Option(DEFAULT_PAGE_SIZE, "--limit"),
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    log_level: str | None = LogLevelOption,
):
    """Render a static dashboard page."""
    cfg = _prepare(config, api_key, log_level)
    dashboard = build_dashboard(
        cfg,
        _summarizer(cfg),
        query=query,
        page=page,
        limit=limit,
        view=view,
    )
    path = render_dashboard(dashboard, output, fmt=fmt)
    flush()
    console.print(f"Dashboard generated: {path}")


@app.command(name="config")
def show_config(config: Path | None = ConfigOption):
    """Print the effective configuration (API key masked)."""
    cfg = load_config(str(config) if config else None)
    data = asdict(cfg)
    if data["provider"].get("api_key"):
        data["provider"]["api_key"] = "***"
    for key in ("public_key", "secret_key"):
        if data["langfuse"].get(key):
            data["langfuse"][key] = "***"
    _echo_json(data)


if __name__ == "__main__":
    app()
