"""Static HTML and Markdown rendering of the dashboard."""

from .renderer import render_dashboard_html, render_dashboard_markdown

__all__ = ["render_dashboard_html", "render_dashboard_markdown"]
