"""Tests for CSV loading and post normalization."""

from __future__ import annotations

from pathlib import Path

from participation_dashboard.config import AppConfig
from participation_dashboard.input.csv_loader import (
    build_record,
    load_post_by_id,
    load_posts,
    record_to_post,
)


HEADER = "thread_id,title_clean,title_raw,hw_number,model,base_model,version,name,text,url"


def _cfg(path: Path) -> AppConfig:
    cfg = AppConfig()
    cfg.data.csv_path = str(path)
    return cfg


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "posts.csv"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_posts_builds_tags_in_fixed_order(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        HEADER
        + "\n"
        + "t1,Clean title,Raw title,3,GPT-4o,gpt-4o,2024-08,Ada,\"Body, with comma\",https://ed.example/t1\n"
        + "t2,,Only raw,3,Claude 3.5,claude,sonnet,Bob,Second body,\n",
    )

    result = load_posts(_cfg(path))

    assert result.warning is None
    assert [post.id for post in result.posts] == ["t1", "t2"]
    first, second = result.posts
    assert first.tags == ["hw:3", "model:GPT-4o", "base_model:gpt-4o", "version:2024-08"]
    assert first.title == "Clean title"
    assert first.body == "Body, with comma"
    assert first.author == "Ada"
    assert first.url == "https://ed.example/t1"
    assert first.type == "special_participation"
    assert second.title == "Only raw"
    assert second.url is None
    assert second.base_model == "claude"


def test_duplicate_thread_ids_keep_first_occurrence(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        HEADER + "\n" + "dup,First,,,,,,,one,\n" + "dup,Second,,,,,,,two,\n" + "other,Third,,,,,,,three,\n",
    )

    result = load_posts(_cfg(path))

    assert [post.title for post in result.posts] == ["First", "Third"]


def test_missing_file_returns_warning_not_exception(tmp_path: Path) -> None:
    result = load_posts(_cfg(tmp_path / "missing.csv"))

    assert result.posts == []
    assert result.warning is not None
    assert result.warning.startswith("Failed to read CSV (")


def test_invalid_encoding_returns_warning(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_bytes(b"thread_id,title_clean\n1,\xff\xfe\xfa\n")

    result = load_posts(_cfg(path))

    assert result.posts == []
    assert "Failed to read CSV" in (result.warning or "")


def test_empty_file_warns(tmp_path: Path) -> None:
    path = _write(tmp_path, "\n\n")

    result = load_posts(_cfg(path))

    assert result.posts == []
    assert result.warning == "CSV file is empty."


def test_short_rows_and_extra_fields(tmp_path: Path) -> None:
    path = _write(tmp_path, "thread_id,title_clean,text\nabc,Short\nxyz,Long,body,extra,fields\n")

    result = load_posts(_cfg(path))

    short, long = result.posts
    assert short.body == ""
    assert short.author == "Unknown author"
    assert long.body == "body"


def test_missing_id_and_title_get_placeholders() -> None:
    post = record_to_post({"text": "hello"})

    assert post.id
    assert post.title == "Untitled"
    assert post.tags == []


def test_generated_ids_are_unique() -> None:
    assert record_to_post({}).id != record_to_post({}).id


def test_build_record_maps_positionally() -> None:
    record = build_record(["a", "", "c"], ["1", "2"])

    assert record == {"a": "1"}


def test_load_post_by_id(tmp_path: Path) -> None:
    path = _write(tmp_path, HEADER + "\n" + "42,Answer,,,,,,,body,\n")

    found = load_post_by_id("42", _cfg(path))
    missing = load_post_by_id("nope", _cfg(path))

    assert found.post is not None and found.post.title == "Answer"
    assert found.warning is None
    assert missing.post is None
    assert missing.warning == "Not found."


def test_load_post_by_id_propagates_load_warning(tmp_path: Path) -> None:
    lookup = load_post_by_id("1", _cfg(tmp_path / "missing.csv"))

    assert lookup.post is None
    assert lookup.warning.startswith("Failed to read CSV")
