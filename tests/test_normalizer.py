"""Tests for the local note normalizer."""

import dataclasses
import datetime

import pytest

from ideainbox.errors import ValidationError
from ideainbox.normalizer import (
    NormalizerOptions,
    derive_tags,
    fallback_note,
    frequent_words,
    normalize,
    validate_raw_text,
)

OCT = datetime.date(2026, 10, 17)


def test_three_line_example():
    note = normalize("Buy milk\nCall mom\nFinish report", today=OCT)

    assert note.title == "Buy milk"
    assert note.body == "# Buy milk\n\nBuy milk\n\nCall mom\n\nFinish report"
    assert note.tags == ("milk", "call", "finish", "report", "note", "idea", "quick-note", "oct")


def test_single_line_is_wrapped_under_heading():
    note = normalize("Remember to water the plants", today=OCT)

    assert note.title == "Remember to water the plants"
    assert note.body == "# Remember to water the plants\n\nRemember to water the plants"


def test_raw_text_is_kept_verbatim():
    raw = "  Buy milk\n\nCall mom  \n"
    note = normalize(raw, today=OCT)
    assert note.raw_text == raw


@pytest.mark.parametrize("bad", ["", "   \n\t", None, "ab", " ab ", 42, ["text"]])
def test_invalid_input_raises_validation_error(bad):
    with pytest.raises(ValidationError):
        normalize(bad)


def test_too_long_input_rejected_unless_cap_disabled():
    text = "word " * 1200  # 6000 chars

    with pytest.raises(ValidationError, match="too long"):
        normalize(text)

    note = normalize(text, max_length=None, today=OCT)
    assert note.title


def test_validate_returns_trimmed_text():
    assert validate_raw_text("  hello there \r\n") == "hello there"


def test_title_strips_unsafe_chars_and_list_markers():
    note = normalize("- [ ] Fix: the <build>?\nmore details", today=OCT)
    assert note.title == "Fix the build"


def test_numbered_lines_are_preserved():
    note = normalize("1. First step\n2. Second step", today=OCT)

    assert note.title == "First step"
    assert note.body == "# First step\n\n1. First step\n\n2. Second step"


def test_colon_lines_become_subheadings():
    note = normalize("Groceries:\n- eggs\n\n- bread", today=OCT)

    assert note.title == "Groceries"
    assert note.body == "# Groceries\n\n## Groceries:\n\n- eggs\n\n- bread"


def test_long_colon_line_stays_paragraph():
    line = "This line is far too long to be treated as a heading at all:"
    note = normalize(f"{line}\nsecond line", today=OCT)
    assert f"## {line}" not in note.body
    assert line in note.body


def test_existing_heading_is_not_duplicated():
    note = normalize("# Weekly review\nShip the release", today=OCT)
    assert note.title == "Weekly review"
    assert note.body == "# Weekly review\n\nShip the release"


def test_title_is_truncated_to_sixty_chars():
    note = normalize("a" * 40 + " " + "b" * 40, today=OCT)
    assert 1 <= len(note.title) <= 60


def test_title_falls_back_to_significant_words():
    note = normalize("???\nSome meaningful words here", today=OCT)
    assert note.title == "Some meaningful words here"


def test_title_falls_back_to_default():
    note = normalize("???", today=OCT)
    assert note.title == "Quick Note"
    assert note.body == "# Quick Note\n\n???"


def test_tags_follow_frequency_order():
    note = normalize("python python python rust rust golang", today=OCT)
    assert note.tags[:3] == ("python", "rust", "golang")


def test_tags_skip_stop_words_numbers_and_short_tokens():
    words = frequent_words("the 2024 budget and the 12345 forecast for you")
    assert words == ["budget", "forecast"]


def test_length_tags():
    short = derive_tags("tiny thought", today=OCT)
    medium = derive_tags("x" * 150, today=OCT)
    long = derive_tags("y" * 350, today=OCT)

    assert "quick-note" in short
    assert "quick-note" not in medium and "detailed" not in medium
    assert "detailed" in long


def test_month_tag_uses_given_date():
    note = normalize("Plan the garden beds", today=datetime.date(2026, 1, 5))
    assert note.tags[-1] == "jan"


def test_tag_cap_keeps_default_and_derived_tags():
    text = " ".join(f"alpha{i} beta{i} gamma{i}" for i in range(20)) + " " + "z" * 300
    note = normalize(text, today=OCT)

    assert len(note.tags) <= 8
    for tag in ("note", "idea", "detailed", "oct"):
        assert tag in note.tags


def test_options_override_thresholds():
    options = NormalizerOptions(top_words=1)
    note = normalize("python python rust golang", options=options, today=OCT)
    assert note.tags == ("python", "note", "idea", "quick-note", "oct")


@pytest.mark.parametrize(
    "text",
    [
        "abc",
        "Buy milk\nCall mom\nFinish report",
        "!!!???***",
        "- one\n- two\n- three",
        "Meeting notes from Monday: Discussed new project timeline and resource "
        "allocation. Need to follow up with design team.",
        "x" * 5000,
        "Ünïcödé títle ñote\nwith a body",
    ],
)
def test_note_shape_invariants(text):
    note = normalize(text, today=OCT)

    assert 1 <= len(note.title) <= 60
    assert note.body
    assert note.body.startswith("# ")
    assert 3 <= len(note.tags) <= 8
    assert len(set(note.tags)) == len(note.tags)


def test_note_is_immutable():
    note = normalize("Buy milk", today=OCT)
    with pytest.raises(dataclasses.FrozenInstanceError):
        note.title = "changed"  # type: ignore[misc]


def test_fallback_note_keeps_text_verbatim():
    note = fallback_note("  just keep this  ")

    assert note.title == "My Note"
    assert note.body == "# My Note\n\njust keep this"
    assert note.tags == ("note", "idea", "fallback")


def test_frequent_default_word_keeps_frequency_slot():
    note = normalize("idea idea idea budget budget forecast", today=OCT)
    assert note.tags == ("idea", "budget", "forecast", "note", "quick-note", "oct")
