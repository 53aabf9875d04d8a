"""CSV loader for the special participation export.

The export has one row per discussion thread. Expected columns:
- thread_id, title_clean, title_raw, hw_number, model, base_model,
  version, name, text, url

Unknown extra columns are ignored and missing columns degrade to empty
values. Loading never raises: read failures are reported as a warning
string next to an empty post list.
"""

from __future__ import annotations

import logging
from pathlib import Path
import uuid

from ..config import AppConfig, DEFAULT_CSV_FILENAME
from ..core.csv_parser import parse_csv
from ..core.dedup import dedup_posts
from ..core.types import POST_TYPE, LoadResult, Post, PostLookup
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

_TAG_COLUMNS = [
    ("hw", "hw_number"),
    ("model", "model"),
    ("base_model", "base_model"),
    ("version", "version"),
]


def resolve_csv_path(cfg: AppConfig | None) -> Path:
    raw = cfg.data.csv_path if cfg is not None else ""
    return Path(raw or DEFAULT_CSV_FILENAME).expanduser().resolve()


def load_posts(cfg: AppConfig | None = None) -> LoadResult:
    """Load and normalize all posts from the configured CSV file.

    Args:
        cfg: Application config; only ``cfg.data.csv_path`` is used

    Returns:
        LoadResult with deduplicated posts in file order. On any read or
        decode failure the post list is empty and ``warning`` explains why.
    """
    csv_path = resolve_csv_path(cfg)

    try:
        text = csv_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        log_event(logger, "CSV load failed", event="csv_load_failed", path=str(csv_path), error=reason)
        return LoadResult(posts=[], warning=f"Failed to read CSV ({reason}).")

    rows = parse_csv(text)
    if not rows:
        log_event(logger, "CSV file is empty", event="csv_empty", path=str(csv_path))
        return LoadResult(posts=[], warning="CSV file is empty.")

    header = rows[0]
    records = [build_record(header, row) for row in rows[1:]]
    posts = dedup_posts([record_to_post(record) for record in records if record is not None])

    log_event(
        logger,
        "CSV loaded",
        event="csv_loaded",
        path=str(csv_path),
        rows=len(rows) - 1,
        posts=len(posts),
    )
    return LoadResult(posts=posts)


def load_post_by_id(post_id: str, cfg: AppConfig | None = None) -> PostLookup:
    """Load all posts and return the one whose id equals ``post_id``."""
    result = load_posts(cfg)
    match = next((post for post in result.posts if str(post.id) == post_id), None)
    if match is None:
        return PostLookup(post=None, warning=result.warning or "Not found.")
    return PostLookup(post=match, warning=result.warning)


def build_record(header: list[str], row: list[str]) -> dict[str, str] | None:
    """Map a row onto header names positionally.

    Fields beyond the header are ignored; columns beyond the end of a short
    row are left out of the record entirely.
    """
    if not row:
        return None
    record: dict[str, str] = {}
    for idx, key in enumerate(header):
        if not key or idx >= len(row):
            continue
        record[key] = row[idx]
    return record


def record_to_post(record: dict[str, str]) -> Post:
    """Normalize a CSV record into a Post."""
    title_clean = (record.get("title_clean") or "").strip()
    title_raw = (record.get("title_raw") or "").strip()
    hw_number = (record.get("hw_number") or "").strip()
    model = (record.get("model") or "").strip()
    base_model = (record.get("base_model") or "").strip()
    version = (record.get("version") or "").strip()
    name = (record.get("name") or "").strip()
    body = record.get("text") or ""
    url = (record.get("url") or "").strip()
    thread_id = (record.get("thread_id") or "").strip()

    values = {
        "hw_number": hw_number,
        "model": model,
        "base_model": base_model,
        "version": version,
    }
    tags: list[str] = []
    for prefix, column in _TAG_COLUMNS:
        value = values[column]
        if not value:
            continue
        tag = f"{prefix}:{value}"
        if tag not in tags:
            tags.append(tag)

    return Post(
        id=thread_id or str(uuid.uuid4()),
        title=title_clean or title_raw or "Untitled",
        body=body,
        author=name or "Unknown author",
        url=url or None,
        tags=tags,
        type=POST_TYPE,
        model=model,
        base_model=base_model,
        version=version,
        hw_number=hw_number,
        name=name,
        title_raw=title_raw,
        thread_id=thread_id,
    )
