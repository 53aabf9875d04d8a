"""Search filtering and pagination over loaded posts."""

from __future__ import annotations

import math

from .types import Post, PostPage


DEFAULT_PAGE_SIZE = 25
MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def matches_query(post: Post, query: str) -> bool:
    """Case-insensitive substring match against title, body, author and tags."""
    needle = query.lower()
    haystack = "\n".join(
        [post.title or "", post.body or "", post.author or "", " ".join(post.tags)]
    ).lower()
    return needle in haystack


def filter_posts(posts: list[Post], query: str | None) -> list[Post]:
    q = (query or "").strip()
    if not q:
        return posts
    return [post for post in posts if matches_query(post, q)]


def paginate(posts: list[Post], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> PostPage:
    """Slice posts into a page.

    ``limit`` is clamped to [10, 100] and ``page`` to [1, total_pages], so an
    out-of-range page number lands on the nearest valid page.
    """
    limit = min(MAX_PAGE_SIZE, max(MIN_PAGE_SIZE, int(limit)))
    total_pages = max(1, math.ceil(len(posts) / limit))
    page = min(max(1, int(page)), total_pages)
    start = (page - 1) * limit
    return PostPage(
        posts=posts[start : start + limit],
        page=page,
        total_pages=total_pages,
        limit=limit,
        total=len(posts),
    )
