"""Unit tests for compute_theme_stats."""
from __future__ import annotations

import random

from survey_insight.analysis.themes import compute_theme_stats, normalize_theme
from survey_insight.reporting.models import AnswerEntry


def _entries(themes):
    return [AnswerEntry(text=f"answer {i}", theme=t) for i, t in enumerate(themes)]


def test_counts_and_percentages():
    summary = compute_theme_stats(_entries(["pay", "pay", "office", "", "pay", "team"]))

    assert summary.total_answers == 6
    assert summary.has_themes is True
    assert [(s.theme, s.count) for s in summary.theme_stats] == [
        ("pay", 3),
        ("office", 1),
        ("team", 1),
    ]
    assert summary.theme_stats[0].percentage == 50.0
    assert summary.theme_stats[1].percentage == round(100 / 6, 1)


def test_untagged_answers_count_towards_total_only():
    summary = compute_theme_stats(["plain string", "another"] + _entries(["pay"]))

    assert summary.total_answers == 3
    assert [s.theme for s in summary.theme_stats] == ["pay"]
    assert summary.theme_stats[0].percentage == 33.3


def test_ties_keep_first_seen_order():
    summary = compute_theme_stats(_entries(["b", "a", "a", "b", "c"]))
    assert [s.theme for s in summary.theme_stats] == ["b", "a", "c"]


def test_grouping_is_order_independent():
    themes = ["x"] * 4 + ["y"] * 2 + ["z"] * 7 + [""] * 3
    expected = {("z", 7), ("x", 4), ("y", 2)}
    for seed in range(5):
        shuffled = themes[:]
        random.Random(seed).shuffle(shuffled)
        summary = compute_theme_stats(_entries(shuffled))
        assert {(s.theme, s.count) for s in summary.theme_stats} == expected
        assert [s.count for s in summary.theme_stats] == [7, 4, 2]


def test_labels_are_normalized():
    summary = compute_theme_stats(
        [{"text": "a", "theme": "  work  load "}, {"text": "b", "tema": "work load"}]
    )
    assert [(s.theme, s.count) for s in summary.theme_stats] == [("work load", 2)]
    assert normalize_theme(None) == ""


def test_empty_input():
    summary = compute_theme_stats([])
    assert summary.total_answers == 0
    assert summary.theme_stats == []
    assert summary.has_themes is False


def test_percentage_halves_round_up():
    summary = compute_theme_stats(_entries(["pay"] + [""] * 15))

    assert summary.total_answers == 16
    assert summary.theme_stats[0].percentage == 6.3
