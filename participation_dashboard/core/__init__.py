"""
Core domain models and business logic.

This package contains data types, CSV parsing, grouping and query
helpers that are independent of any specific presentation layer.
"""

from .types import (
    AIPerspective,
    Cluster,
    GroupedAIPerspective,
    GroupPostSummary,
    GroupSummary,
    LoadResult,
    Post,
    PostLookup,
    PostPage,
)
from .csv_parser import parse_csv
from .dedup import dedup_posts
from .grouping import PostGroups, detect_homework, detect_models, group_posts
from .query import filter_posts, paginate

__all__ = [
    "Post",
    "LoadResult",
    "PostLookup",
    "PostPage",
    "Cluster",
    "AIPerspective",
    "GroupPostSummary",
    "GroupSummary",
    "GroupedAIPerspective",
    "parse_csv",
    "dedup_posts",
    "PostGroups",
    "group_posts",
    "detect_homework",
    "detect_models",
    "filter_posts",
    "paginate",
]
