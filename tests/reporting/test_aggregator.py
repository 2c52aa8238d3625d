"""Unit tests for reporting.aggregator."""

from __future__ import annotations

from survey_insight.reporting.aggregator import aggregate_rows, format_number
from survey_insight.reporting.models import RawRow


def _score(team, question, value, area="Workplace", category="Cross-cutting"):
    return RawRow(
        team=team,
        question=question,
        value=value,
        row_kind="score",
        area=area,
        question_category=category,
    )


def _scores(area):
    return {
        t.team_name: {m.category: (m.score, m.has_data) for m in t.metrics}
        for t in area.teams
    }


def test_workplace_scenario():
    """Comma decimals parse and each team gets its own score."""

    report = aggregate_rows([_score("A", "Q1", "4,5"), _score("B", "Q1", "5")])

    assert len(report.areas) == 1
    area = report.areas[0]
    assert area.area_id == "area_1"
    assert area.title == "Workplace"
    assert _scores(area) == {"A": {"Q1": (4.5, True)}, "B": {"Q1": (5.0, True)}}


def test_missing_scores_are_zero_filled():
    rows = [
        _score("A", "Q1", "4,5"),
        _score("B", "Q1", "5"),
        _score("B", "Q2", "3"),
        _score("A", "Q3", "0"),
    ]
    report = aggregate_rows(rows)
    area = report.areas[0]

    assert _scores(area) == {
        "A": {"Q1": (4.5, True), "Q2": (0, False), "Q3": (0.0, True)},
        "B": {"Q1": (5.0, True), "Q2": (3.0, True), "Q3": (0, False)},
    }
    a_q2 = area.teams[0].metrics[1].to_dict()
    assert a_q2["noData"] is True
    assert "noData" not in area.teams[0].metrics[2].to_dict()


def test_fixed_shape_across_areas():
    rows = [
        _score("A", "Desk", "4", area="Workplace"),
        _score("B", "Boss listens", "5", area="Supervisor", category="Specific"),
        _score("C", "Chair", "2", area="Workplace"),
        _score("A", "Feedback", "3", area="Supervisor"),
    ]
    report = aggregate_rows(rows)

    assert [a.title for a in report.areas] == ["Workplace", "Supervisor"]
    for area in report.areas:
        assert [t.team_name for t in area.teams] == ["A", "B", "C"]
        shapes = {tuple(m.category for m in t.metrics) for t in area.teams}
        assert len(shapes) == 1
    supervisor = report.areas[1]
    assert supervisor.categories() == ["Boss listens", "Feedback"]
    assert supervisor.teams[0].metrics[0].question_type == "Specific"


def test_duplicate_engagement_rows_last_value_wins():
    rows = [
        RawRow(team="Sales", question="Questionnaires filled", value="10", area="Engagement"),
        RawRow(team="Sales", question="Questionnaires filled", value="12", area="Engagement"),
        RawRow(team="Sales", question="Questionnaires filled", value="7", area="Engagement"),
    ]
    report = aggregate_rows(rows)

    assert len(report.team_engagement) == 1
    assert report.team_engagement[0].response_count == 7.0


def test_company_totals_and_engagement_table():
    rows = [
        RawRow(team="Total", question="Questionnaires sent", value="120", area="Engagement"),
        RawRow(team="Total", question="Questionnaires filled", value="102", area="Engagement"),
        RawRow(team="Total", question="Return rate", value="85", area="Engagement"),
        RawRow(team="Sales", question="Invited", value="20", area="Engagement"),
        RawRow(team="Sales", question="Questionnaires filled", value="14", area="Engagement"),
        RawRow(team="Support", question="Engagement interpretation", free_text="Low turnout"),
        _score("Ops", "Q1", "4"),
    ]
    report = aggregate_rows(rows, report_date="2025")

    assert report.total_sent == 120.0
    assert report.total_received == 102.0
    assert report.success_rate == "85%"
    assert [e.team_name for e in report.team_engagement] == ["Sales", "Support", "Ops"]
    sales = report.engagement_for("Sales")
    assert sales.response_count == 14.0
    assert sales.sent_count == 20.0
    assert report.engagement_for("Support").summary == "Low turnout"
    assert report.engagement_for("Ops").response_count == 0
    assert report.engagement_for("Total") is None
    assert report.metadata.date == "2025"


def test_open_answers_accumulate_in_order():
    rows = [
        RawRow(team="A", question="Improve?", free_text="More pay", row_kind="free", theme="pay"),
        RawRow(team="B", question="Improve?", free_text="Less noise", row_kind="free"),
        RawRow(team="A", question="Improve?", free_text="Better pay", row_kind="free", theme="pay"),
        RawRow(team="A", question="Improve?", free_text="More pay", row_kind="free", theme="pay"),
        RawRow(team="A", question="Praise?", free_text="Nice team", row_kind="free", theme="team"),
    ]
    report = aggregate_rows(rows)

    assert [g.team_name for g in report.open_questions] == ["A", "B"]
    team_a = report.open_questions[0]
    assert [q.question_text for q in team_a.questions] == ["Improve?", "Praise?"]
    improve = team_a.questions[0]
    assert improve.answer_texts() == ["More pay", "Better pay", "More pay"]
    assert [(t.theme, t.count, t.percentage) for t in improve.theme_stats] == [
        ("pay", 3, 100.0)
    ]
    assert report.open_questions[1].questions[0].theme_stats == []
    assert report.has_open_answers()


def test_malformed_rows_are_counted_not_fatal():
    rows = [
        _score("A", "Q1", "n/a"),
        _score("A", "Q2", None),
        _score("Total", "Q1", "5"),
        _score("A", "Q3", "4"),
    ]
    report = aggregate_rows(rows)

    assert report.dropped_rows == 3
    assert report.areas[0].categories() == ["Q3"]


def test_metadata_from_first_row_carrying_it():
    rows = [
        _score("A", "Q1", "4"),
        RawRow(team="A", question="Q2", value="3", row_kind="score", company="Acme", survey="Pulse 2025"),
        RawRow(team="A", question="Q3", value="3", row_kind="score", company="Other"),
    ]
    report = aggregate_rows(rows, scale_max=5)

    assert report.client_name == "Acme"
    assert report.survey_name == "Pulse 2025"
    assert report.metadata.company == "Acme"
    assert report.metadata.scale_max == 5


def test_empty_input_yields_empty_report():
    report = aggregate_rows([])

    assert report.areas == []
    assert report.open_questions == []
    assert report.team_engagement == []
    assert report.success_rate == "0%"
    assert report.client_name == "Unknown company"


def test_format_number():
    assert format_number(85.0) == "85"
    assert format_number(85.5) == "85.5"
