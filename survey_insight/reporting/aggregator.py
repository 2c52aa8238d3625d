"""Aggregate raw export rows into a structured :class:`CanonicalReport`."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from survey_insight.analysis.themes import compute_theme_stats
from survey_insight.reporting import config
from survey_insight.reporting.classifier import (
    Classified,
    Dropped,
    Engagement,
    EngagementNote,
    EngagementTarget,
    OpenAnswer,
    ScoredMetric,
    classify_row,
    is_aggregate_team,
)
from survey_insight.reporting.models import (
    AnswerEntry,
    AreaMetricMatrix,
    CanonicalReport,
    EngagementRecord,
    Metric,
    OpenQuestion,
    OpenQuestionGroup,
    RawRow,
    ReportMetadata,
    TeamMetrics,
)

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Render *value* without a trailing ``.0`` for whole numbers."""
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass
class _QuestionScores:
    question_type: str
    scores: Dict[str, float] = field(default_factory=dict)


@dataclass
class _Accumulator:
    """Running state of one aggregation pass."""

    # dicts double as insertion-ordered sets
    teams: Dict[str, None] = field(default_factory=dict)
    metric_teams: Dict[str, None] = field(default_factory=dict)
    areas: Dict[str, Dict[str, _QuestionScores]] = field(default_factory=dict)
    engagement: Dict[str, EngagementRecord] = field(default_factory=dict)
    open_answers: Dict[str, Dict[str, List[AnswerEntry]]] = field(default_factory=dict)
    total_sent: float = 0
    total_received: float = 0
    success_rate: str = ""
    client_name: str = ""
    survey_name: str = ""
    dropped: int = 0

    def engagement_record(self, team: str) -> EngagementRecord:
        if team not in self.engagement:
            self.engagement[team] = EngagementRecord(team_name=team)
        return self.engagement[team]


def _observe_row(acc: _Accumulator, row: RawRow) -> None:
    team = row.team.strip()
    if team and not is_aggregate_team(team):
        acc.teams.setdefault(team, None)
    if not acc.client_name and row.company.strip():
        acc.client_name = row.company.strip()
    if not acc.survey_name and row.survey.strip():
        acc.survey_name = row.survey.strip()


def _apply(acc: _Accumulator, item: Classified) -> None:  # noqa: C901 – flat dispatch
    if isinstance(item, Engagement):
        target = item.target
        if target is EngagementTarget.TOTAL_SENT:
            acc.total_sent = item.value
        elif target is EngagementTarget.SUCCESS_RATE:
            acc.success_rate = f"{format_number(item.value)}%"
        elif target is EngagementTarget.TOTAL_RECEIVED:
            acc.total_received = item.value
        elif target is EngagementTarget.TEAM_SENT:
            acc.engagement_record(item.team).sent_count = item.value
        else:
            # duplicate rows overwrite; the export is a single current state
            acc.engagement_record(item.team).response_count = item.value
    elif isinstance(item, EngagementNote):
        acc.engagement_record(item.team).summary = item.text
    elif isinstance(item, OpenAnswer):
        questions = acc.open_answers.setdefault(item.team, {})
        questions.setdefault(item.question, []).append(
            AnswerEntry(text=item.text, theme=item.theme)
        )
    elif isinstance(item, ScoredMetric):
        acc.metric_teams.setdefault(item.team, None)
        area = acc.areas.setdefault(item.area, {})
        question = area.setdefault(item.question, _QuestionScores(item.question_type))
        question.scores[item.team] = item.score
    elif isinstance(item, Dropped):
        acc.dropped += 1
        if item.warning is not None:
            logger.warning("Dropping row: %s", item.warning)
        else:
            logger.debug("Dropping row: %s", item.reason)


def _build_areas(acc: _Accumulator) -> List[AreaMetricMatrix]:
    areas: List[AreaMetricMatrix] = []
    for index, (title, questions) in enumerate(acc.areas.items(), start=1):
        teams = []
        for team in acc.metric_teams:
            metrics = []
            for category, data in questions.items():
                observed = team in data.scores
                metrics.append(
                    Metric(
                        category=category,
                        score=data.scores[team] if observed else 0,
                        question_type=data.question_type,
                        has_data=observed,
                    )
                )
            teams.append(TeamMetrics(team_name=team, metrics=metrics))
        areas.append(
            AreaMetricMatrix(area_id=f"area_{index}", title=title, teams=teams)
        )
    return areas


def _build_open_questions(acc: _Accumulator) -> List[OpenQuestionGroup]:
    groups = []
    for team, questions in acc.open_answers.items():
        items = []
        for text, answers in questions.items():
            summary = compute_theme_stats(answers)
            items.append(
                OpenQuestion(
                    question_text=text,
                    answers=list(answers),
                    theme_stats=summary.theme_stats,
                )
            )
        groups.append(OpenQuestionGroup(team_name=team, questions=items))
    return groups


def aggregate_rows(
    rows: Iterable[RawRow],
    *,
    report_date: Optional[str] = None,
    scale_max: int = config.SCALE_MAX,
) -> CanonicalReport:
    """Fold *rows* into a :class:`CanonicalReport`.

    Individual rows that cannot be used are dropped and counted in
    ``dropped_rows``; the function always returns a report.
    """

    acc = _Accumulator()
    for row in rows:
        _observe_row(acc, row)
        _apply(acc, classify_row(row))

    engagement = [
        acc.engagement.get(team) or EngagementRecord(team_name=team)
        for team in acc.teams
    ]
    report = CanonicalReport(
        metadata=ReportMetadata(
            date=report_date or str(datetime.date.today().year),
            scale_max=scale_max,
            company=acc.client_name,
        ),
        client_name=acc.client_name or config.DEFAULT_CLIENT_NAME,
        survey_name=acc.survey_name or config.DEFAULT_SURVEY_NAME,
        total_sent=acc.total_sent,
        total_received=acc.total_received,
        success_rate=acc.success_rate or "0%",
        team_engagement=engagement,
        areas=_build_areas(acc),
        open_questions=_build_open_questions(acc),
        dropped_rows=acc.dropped,
    )
    logger.info(
        "Aggregated %d areas, %d open-question teams, %d engagement teams "
        "(%d rows dropped)",
        len(report.areas),
        len(report.open_questions),
        len(report.team_engagement),
        report.dropped_rows,
    )
    return report
