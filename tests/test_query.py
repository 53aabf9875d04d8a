"""Tests for search filtering and pagination."""

from participation_dashboard.core.query import filter_posts, paginate
from participation_dashboard.core.types import Post


def _posts(count: int) -> list[Post]:
    return [Post(id=str(i), title=f"Post {i}") for i in range(count)]


def test_filter_matches_title_body_author_and_tags_case_insensitively():
    posts = [
        Post(id="1", title="Gradient descent", body=""),
        Post(id="2", title="Other", body="talks about GRADIENTS"),
        Post(id="3", title="Other", author="Grace Gradient"),
        Post(id="4", title="Other", tags=["model:gradient-net"]),
        Post(id="5", title="Unrelated"),
    ]

    matched = filter_posts(posts, "  gradient ")

    assert [post.id for post in matched] == ["1", "2", "3", "4"]


def test_empty_query_returns_all_posts():
    posts = _posts(3)

    assert filter_posts(posts, "") == posts
    assert filter_posts(posts, None) == posts


def test_paginate_slices_requested_page():
    page = paginate(_posts(30), page=2, limit=10)

    assert [post.id for post in page.posts] == [str(i) for i in range(10, 20)]
    assert page.total_pages == 3
    assert page.total == 30


def test_paginate_clamps_limit_and_page():
    page = paginate(_posts(30), page=99, limit=5)

    assert page.limit == 10
    assert page.page == 3
    assert len(page.posts) == 10

    capped = paginate(_posts(5), page=0, limit=500)
    assert capped.limit == 100
    assert capped.page == 1


def test_paginate_empty_list_has_one_page():
    page = paginate([], page=3)

    assert page.total_pages == 1
    assert page.page == 1
    assert page.posts == []
