"""Unit tests for reporting.classifier."""
from __future__ import annotations

import pytest

from survey_insight.exceptions import ParseWarning
from survey_insight.reporting.classifier import (
    Dropped,
    Engagement,
    EngagementNote,
    EngagementTarget,
    OpenAnswer,
    ScoredMetric,
    classify_row,
    is_aggregate_team,
    normalize_text,
    parse_value,
)
from survey_insight.reporting.models import RawRow


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("4,5", 4.5),
        ("4.5", 4.5),
        (" 5 ", 5.0),
        (3, 3.0),
        (2.25, 2.25),
        ("", None),
        (None, None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        (True, None),
    ],
)
def test_parse_value(raw, expected):
    assert parse_value(raw) == expected


def test_normalize_text_strips_diacritics():
    assert normalize_text("  Účasť Zapojenie ") == "ucast zapojenie"


def test_aggregate_team_marker():
    assert is_aggregate_team("Total")
    assert is_aggregate_team("Celkom")
    assert not is_aggregate_team("Total Sales")


def test_company_totals():
    sent = classify_row(RawRow(team="Total", question="Questionnaires sent", value="120", area="Engagement"))
    rate = classify_row(RawRow(team="Total", question="Return rate", value="85,5", area="Engagement"))
    received = classify_row(RawRow(team="Total", question="Participation", value="102"))

    assert sent == Engagement(EngagementTarget.TOTAL_SENT, 120.0)
    assert rate == Engagement(EngagementTarget.SUCCESS_RATE, 85.5)
    assert received == Engagement(EngagementTarget.TOTAL_RECEIVED, 102.0)


def test_team_engagement_rows():
    responses = classify_row(
        RawRow(team="Sales", question="Questionnaires filled", value="14", area="Engagement")
    )
    sent = classify_row(RawRow(team="Sales", question="Invited", value="20"))
    other = classify_row(RawRow(team="Sales", question="Comment", value="1", area="Engagement"))

    assert responses == Engagement(EngagementTarget.TEAM_RESPONSES, 14.0, team="Sales")
    assert sent == Engagement(EngagementTarget.TEAM_SENT, 20.0, team="Sales")
    assert isinstance(other, Dropped)


def test_slovak_engagement_row():
    result = classify_row(
        RawRow(team="Výroba", question="Počet vyplnených dotazníkov", value="8", area="Zapojenie")
    )
    assert result == Engagement(EngagementTarget.TEAM_RESPONSES, 8.0, team="Výroba")


def test_engagement_note():
    result = classify_row(
        RawRow(team="Sales", question="Engagement interpretation", free_text=" Good turnout ")
    )
    assert result == EngagementNote(team="Sales", text="Good turnout")


def test_open_answer():
    result = classify_row(
        RawRow(team="Sales", question="What to improve?", free_text="More training", row_kind="free", theme="training")
    )
    assert result == OpenAnswer(team="Sales", question="What to improve?", text="More training", theme="training")


def test_open_answer_for_aggregate_team_is_dropped():
    result = classify_row(RawRow(team="Total", question="Q", free_text="x", row_kind="free"))
    assert isinstance(result, Dropped)


def test_scored_metric_with_specific_category():
    result = classify_row(
        RawRow(
            team="A",
            question="I like my desk",
            value="4,5",
            row_kind="score",
            area="Workplace",
            question_category="Specifická",
        )
    )
    assert result == ScoredMetric(
        area="Workplace", team="A", question="I like my desk", score=4.5, question_type="Specific"
    )


def test_scored_metric_defaults_to_cross_cutting():
    result = classify_row(RawRow(team="A", question="Q1", value=5, row_kind="Skóre"))
    assert isinstance(result, ScoredMetric)
    assert result.question_type == "Cross-cutting"
    assert result.area == "Unclassified"


def test_aggregate_metric_row_is_dropped():
    result = classify_row(RawRow(team="Total", question="Q1", value="5", row_kind="score"))
    assert isinstance(result, Dropped)
    assert result.warning is None


def test_unparseable_value_carries_warning():
    result = classify_row(RawRow(team="A", question="Q1", value="n/a", row_kind="score"))
    assert isinstance(result, Dropped)
    assert isinstance(result.warning, ParseWarning)


def test_missing_value_is_dropped_quietly():
    result = classify_row(RawRow(team="A", question="Q1", row_kind="score"))
    assert isinstance(result, Dropped)
    assert result.warning is None
