"""Heuristic and LLM-backed summarization of posts."""

from .heuristic import build_heuristic_grouped_perspective, build_heuristic_perspective
from .summarizer import (
    FallbackCluster,
    ParsedClusters,
    Summarizer,
    extract_clusters,
    merge_group_perspectives,
    parse_json_object,
)

__all__ = [
    "Summarizer",
    "build_heuristic_perspective",
    "build_heuristic_grouped_perspective",
    "extract_clusters",
    "parse_json_object",
    "merge_group_perspectives",
    "ParsedClusters",
    "FallbackCluster",
]
