from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import GroupSummary, Post

if TYPE_CHECKING:
    from ..runner import DashboardView


GROUP_POST_DISPLAY_LIMIT = 20
PREVIEW_CHARS = 180


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["preview"] = _preview
    return env


def _preview(body: str | None, limit: int = PREVIEW_CHARS) -> str:
    text = body or ""
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def _visible_groups(dashboard: DashboardView) -> tuple[str, list[GroupSummary]]:
    if dashboard.view == "model":
        return "By model type", dashboard.grouped.models
    return "By homework", dashboard.grouped.homeworks


def _post_row(post: Post) -> dict:
    return {
        "post": post,
        "hw": post.tag_value("hw"),
        "base_model": post.tag_value("base_model"),
    }


def render_dashboard_html(dashboard: DashboardView, output_path: Path, title: str) -> None:
    template = _environment().get_template("dashboard.html")
    group_title, groups = _visible_groups(dashboard)

    html = template.render(
        title=title,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        dashboard=dashboard,
        show_groups=dashboard.view != "posts",
        group_title=group_title,
        groups=groups,
        group_post_limit=GROUP_POST_DISPLAY_LIMIT,
        rows=[_post_row(post) for post in dashboard.page.posts],
    )
    output_path.write_text(html, encoding="utf-8")


def render_dashboard_markdown(dashboard: DashboardView, output_path: Path, title: str) -> None:
    overview = dashboard.overview
    grouped = dashboard.grouped
    lines = [f"# {title}", ""]
    if dashboard.warning:
        lines.extend([f"> {dashboard.warning}", ""])
    lines.append(
        f"Posts: {len(dashboard.filtered)} | AI: {overview.mode} ({overview.model_used})"
        f" | Group AI: {grouped.mode} ({grouped.model_used})"
    )
    lines.extend(["", "## AI overview", "", overview.summary, ""])
    for cluster in overview.clusters[:5]:
        lines.append(f"- **{cluster.title}:** {cluster.description}")
    if overview.clusters:
        lines.append("")

    if dashboard.view != "posts":
        group_title, groups = _visible_groups(dashboard)
        lines.extend([f"## {group_title}", ""])
        if not groups:
            lines.extend(["No groups detected.", ""])
        for group in groups:
            lines.extend([f"### {group.label} ({group.count})", "", group.overview, ""])
            for item in group.posts[:GROUP_POST_DISPLAY_LIMIT]:
                lines.append(f"- {item.title} — {item.takeaway}")
            lines.append("")

    page = dashboard.page
    lines.extend(["## Posts", "", f"Page {page.page} / {page.total_pages}", ""])
    for post in page.posts:
        meta = [value for value in (post.tag_value("hw"), post.tag_value("base_model"), post.author) if value]
        lines.append(f"- **{post.title}** ({', '.join(meta)})" if meta else f"- **{post.title}**")
        if post.url:
            lines.append(f"  - Link: {post.url}")
        if post.body:
            lines.append(f"  - {_preview(post.body)}")
    lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")
