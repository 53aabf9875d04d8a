"""
Participation Dashboard - CSV-backed discussion board digest.

This package reads a CSV export of course discussion threads, groups them
by homework and model, and summarizes them with heuristics or an
OpenAI-compatible chat-completions API.

Main entry point is the CLI via the `participation-dashboard` command.

Example:
    $ participation-dashboard groups --view model
"""

__all__ = ["__version__", "load_posts", "load_post_by_id", "parse_csv", "group_posts", "Summarizer"]
__version__ = "0.1.0"

from .analyzers.summarizer import Summarizer
from .core.csv_parser import parse_csv
from .core.grouping import group_posts
from .input.csv_loader import load_post_by_id, load_posts
