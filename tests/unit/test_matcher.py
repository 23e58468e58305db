from __future__ import annotations

import pytest

from timecard_sync.services.matcher import combo_key, equivalent, exact, normalize_text


def test_normalize_text_lowercases_collapses_and_trims():
    assert normalize_text("  Alpha \t  Project\n") == "alpha project"
    assert normalize_text(None) == ""
    assert normalize_text(42) == "42"


@pytest.mark.parametrize(
    "a,b",
    [
        ("Alpha", "alpha"),
        ("Alpha  Project", "alpha project"),
        ("Straight", "DICTU Uren - (Straight Time)"),
        ("build", "  BUILD "),
    ],
)
def test_equivalent_equal_or_substring(a: str, b: str):
    assert equivalent(a, b)
    assert equivalent(b, a)  # symmetric


@pytest.mark.parametrize("a,b", [("", ""), ("", "alpha"), ("   ", "alpha"), (None, "alpha"), ("alpha", None)])
def test_blank_never_equates(a, b):
    assert not equivalent(a, b)


def test_equivalent_is_not_transitive():
    assert equivalent("Development", "dev")
    assert equivalent("dev", "DevOps")
    assert not equivalent("Development", "DevOps")


def test_exact_matcher_rejects_substrings():
    assert exact("Alpha", " alpha ")
    assert not exact("Alpha", "Alpha Project")
    assert not exact("", "")


def test_combo_key_normalizes_each_part():
    assert combo_key(" Alpha ", "BUILD", "Straight  Time") == ("alpha", "build", "straight time")
