"""Tests for homework/model grouping."""

from participation_dashboard.core.grouping import detect_homework, detect_models, group_posts
from participation_dashboard.core.types import Post


def _post(post_id: str, title: str = "Post", body: str = "", tags: list[str] | None = None) -> Post:
    return Post(id=post_id, title=title, body=body, tags=tags or [])


def test_hw_tag_takes_precedence_over_text():
    post = _post("1", title="Assignment 5 notes", tags=["hw:3"])

    groups = group_posts([post])

    assert list(groups.homework_groups) == ["hw:3"]


def test_homework_detected_from_text_patterns():
    assert detect_homework("Thoughts on HW4 problem 2") == "4"
    assert detect_homework("hw-7 results") == "7"
    assert detect_homework("Homework 12 was hard") == "12"
    assert detect_homework("assignment 3 writeup") == "3"
    assert detect_homework("Final project 2 demo") == "2"
    assert detect_homework("proj1 draft") == "1"
    assert detect_homework("no numbers here") is None


def test_homework_pattern_priority_decides_number():
    # "hw 2" is tried before "assignment 9"
    assert detect_homework("assignment 9 reuses hw 2") == "2"


def test_homework_three_digit_numbers_do_not_match():
    assert detect_homework("hw 123") is None


def test_post_without_homework_is_not_grouped():
    groups = group_posts([_post("1", title="General question")])

    assert groups.homework_groups == {}


def test_homework_groups_kept_even_with_one_member():
    groups = group_posts([_post("1", tags=["hw:1"])])

    assert [p.id for p in groups.homework_groups["hw:1"]] == ["1"]


def test_base_model_tag_is_single_model_key():
    posts = [
        _post("1", body="compared against claude and gemini", tags=["base_model:gpt-4o"]),
        _post("2", tags=["base_model:gpt-4o"]),
    ]

    groups = group_posts(posts)

    assert list(groups.model_groups) == ["model:gpt-4o"]
    assert [p.id for p in groups.model_groups["model:gpt-4o"]] == ["1", "2"]


def test_single_member_model_bucket_is_dropped():
    posts = [
        _post("1", tags=["base_model:claude"]),
        _post("2", tags=["base_model:claude"]),
        _post("3", tags=["base_model:gemini"]),
    ]

    groups = group_posts(posts)

    assert "model:claude" in groups.model_groups
    assert "model:gemini" not in groups.model_groups


def test_text_detection_fans_out_to_every_matching_model():
    posts = [
        _post("1", body="Tried Claude and Gemini side by side"),
        _post("2", body="Gemini vs Anthropic models"),
    ]

    groups = group_posts(posts)

    assert [p.id for p in groups.model_groups["model:claude"]] == ["1", "2"]
    assert [p.id for p in groups.model_groups["model:gemini"]] == ["1", "2"]


def test_detect_models_dictionary_and_generic_capture():
    assert detect_models("Using GPT-4o mini today") == ["gpt-4o", "gpt-4o-mini"]
    assert detect_models("o1-preview did well") == ["o1"]
    assert detect_models("model: phi-3") == ["phi-3"]
    assert detect_models("model=deepseek") == ["deepseek"]
    assert detect_models("nothing relevant") == []


def test_duplicate_posts_not_added_twice_to_bucket():
    post = _post("1", tags=["hw:2"])

    groups = group_posts([post, post])

    assert len(groups.homework_groups["hw:2"]) == 1
