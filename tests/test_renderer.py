from pathlib import Path

from participation_dashboard.analyzers.summarizer import Summarizer
from participation_dashboard.config import AppConfig
from participation_dashboard.core.types import LoadResult, Post
from participation_dashboard.llm.cache import LRUSummaryCache
from participation_dashboard.runner import build_dashboard, render_dashboard


def _dashboard(posts: list[Post], view: str = "hw", warning: str | None = None):
    cfg = AppConfig()
    summarizer = Summarizer(cfg, None, LRUSummaryCache())
    return build_dashboard(cfg, summarizer, view=view, loaded=LoadResult(posts=posts, warning=warning))


def _posts() -> list[Post]:
    return [
        Post(id="1", title="HW3 <script>alert(1)</script>", body="b" * 300, tags=["hw:3", "base_model:claude"]),
        Post(id="2", title="Second", body="short", tags=["hw:3", "base_model:claude"]),
    ]


def test_render_html_escapes_and_lists_groups(tmp_path: Path) -> None:
    output_path = tmp_path / "nested" / "dashboard.html"

    render_dashboard(_dashboard(_posts()), output_path, fmt="html", title="Dashboard")
    html = output_path.read_text(encoding="utf-8")

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html
    assert "By homework" in html
    assert "Homework 3" in html
    assert "b" * 180 + "…" in html
    assert "Page 1 / 1" in html


def test_render_html_posts_view_hides_groups(tmp_path: Path) -> None:
    output_path = tmp_path / "dashboard.html"

    render_dashboard(_dashboard(_posts(), view="posts"), output_path)
    html = output_path.read_text(encoding="utf-8")

    assert "By homework" not in html
    assert "<h2>Posts</h2>" in html


def test_render_markdown_sections(tmp_path: Path) -> None:
    output_path = tmp_path / "dashboard.md"

    render_dashboard(
        _dashboard(_posts(), view="model", warning="CSV file is empty."),
        output_path,
        fmt="markdown",
        title="Special Participation A",
    )
    text = output_path.read_text(encoding="utf-8")

    assert "# Special Participation A" in text
    assert "> CSV file is empty." in text
    assert "## AI overview" in text
    assert "## By model type" in text
    assert "### Model claude (2)" in text
    assert "## Posts" in text


def test_render_markdown_without_groups(tmp_path: Path) -> None:
    output_path = tmp_path / "dashboard.md"

    render_dashboard(_dashboard([Post(id="1", title="Lonely")]), output_path, fmt="markdown")
    text = output_path.read_text(encoding="utf-8")

    assert "No groups detected." in text
    assert "- **Lonely** (Unknown author)" in text


def test_unknown_view_defaults_to_homework() -> None:
    assert _dashboard(_posts(), view="bogus").view == "hw"
