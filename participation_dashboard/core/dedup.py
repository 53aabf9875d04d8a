"""
Post deduplication by identifier.

Threads exported more than once share a ``thread_id``; only the first
occurrence is kept so every id is unique within a load.
"""

from __future__ import annotations

from .types import Post


def dedup_posts(posts: list[Post]) -> list[Post]:
    """Remove posts whose id was already seen.

    Args:
        posts: Posts in source order

    Returns:
        Deduplicated list of posts, preserving first-seen order
    """
    seen_ids: set[str] = set()
    kept: list[Post] = []

    for post in posts:
        key = str(post.id)
        if key in seen_ids:
            continue
        seen_ids.add(key)
        kept.append(post)

    return kept
