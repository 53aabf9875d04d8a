"""
Input loading utilities.

This package contains code for reading the posts CSV export.
"""

from .csv_loader import build_record, load_post_by_id, load_posts, record_to_post

__all__ = ["load_posts", "load_post_by_id", "build_record", "record_to_post"]
