"""Route raw export rows to an aggregation branch.

:func:`classify_row` is pure: it looks at one :class:`RawRow` and returns a
tagged variant describing what the row contributes to the report. The
aggregator folds over these variants and never inspects raw rows itself.
"""
from __future__ import annotations

import math
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from survey_insight.exceptions import ParseWarning
from survey_insight.reporting import config
from survey_insight.reporting.models import CROSS_CUTTING, SPECIFIC, RawRow


def normalize_text(value: Any) -> str:
    """Strip diacritics, lower-case and trim *value*."""
    decomposed = unicodedata.normalize("NFD", str(value or ""))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def _contains_any(text: str, markers) -> bool:
    return any(marker in text for marker in markers)


def is_aggregate_team(team: str) -> bool:
    """Return True when *team* names the company-wide summary rows."""
    return normalize_text(team) in config.AGGREGATE_TEAM_MARKERS


def parse_value(raw: Any) -> Optional[float]:
    """Parse a locale-tolerant numeric cell.

    Accepts ``4,5`` as well as ``4.5``. Returns ``None`` for empty cells and
    anything that is not a finite number.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = str(raw).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def question_type_for(category: str) -> str:
    if config.SPECIFIC_MARKER in normalize_text(category):
        return SPECIFIC
    return CROSS_CUTTING


class EngagementTarget(str, Enum):
    """Which engagement figure a participation row sets."""

    TOTAL_SENT = "total_sent"
    TOTAL_RECEIVED = "total_received"
    SUCCESS_RATE = "success_rate"
    TEAM_SENT = "team_sent"
    TEAM_RESPONSES = "team_responses"


@dataclass(frozen=True)
class Engagement:
    target: EngagementTarget
    value: float
    team: Optional[str] = None  # None for company-wide totals


@dataclass(frozen=True)
class EngagementNote:
    team: str
    text: str


@dataclass(frozen=True)
class OpenAnswer:
    team: str
    question: str
    text: str
    theme: str = ""


@dataclass(frozen=True)
class ScoredMetric:
    area: str
    team: str
    question: str
    score: float
    question_type: str = CROSS_CUTTING


@dataclass(frozen=True)
class Dropped:
    reason: str
    warning: Optional[ParseWarning] = None


Classified = Union[Engagement, EngagementNote, OpenAnswer, ScoredMetric, Dropped]


def _classify_participation(
    row: RawRow, question: str, value: float, aggregate: bool
) -> Classified:
    team = row.team.strip()
    if aggregate:
        if _contains_any(question, config.SENT_MARKERS):
            return Engagement(EngagementTarget.TOTAL_SENT, value)
        if _contains_any(question, config.RATE_MARKERS):
            return Engagement(EngagementTarget.SUCCESS_RATE, value)
        return Engagement(EngagementTarget.TOTAL_RECEIVED, value)

    if not team:
        return Dropped("engagement row without team")
    if _contains_any(question, config.SENT_MARKERS):
        return Engagement(EngagementTarget.TEAM_SENT, value, team=team)
    if _contains_any(question, config.RESPONSE_MARKERS):
        return Engagement(EngagementTarget.TEAM_RESPONSES, value, team=team)
    return Dropped(f"unmapped engagement question {row.question!r}")


def classify_row(row: RawRow) -> Classified:
    """Decide the single destination of *row*."""

    team = row.team.strip()
    aggregate = is_aggregate_team(team)
    question_text = row.question.strip()
    question = normalize_text(question_text)
    kind = normalize_text(row.row_kind)
    free_text = str(row.free_text or "").strip()

    if _contains_any(question, config.ENGAGEMENT_NOTE_MARKERS):
        if team and not aggregate:
            return EngagementNote(team=team, text=free_text)
        return Dropped("engagement note without a real team")

    if _contains_any(kind, config.FREE_TEXT_KINDS) and free_text:
        if team and question_text and not aggregate:
            return OpenAnswer(
                team=team,
                question=question_text,
                text=free_text,
                theme=str(row.theme or "").strip(),
            )
        return Dropped("free-text answer without team or question")

    value = parse_value(row.value)
    if value is None:
        if row.value is not None and str(row.value).strip():
            return Dropped(
                "unparseable value",
                ParseWarning(f"Cannot parse value {row.value!r} for {question_text!r}"),
            )
        return Dropped("missing value")

    area = normalize_text(row.area)
    if _contains_any(area, config.PARTICIPATION_MARKERS) or _contains_any(
        question, config.PARTICIPATION_MARKERS
    ):
        return _classify_participation(row, question, value, aggregate)

    scored = _contains_any(kind, config.SCORED_KINDS)
    if scored and team and question_text and not aggregate:
        return ScoredMetric(
            area=str(row.area or "").strip() or config.DEFAULT_AREA,
            team=team,
            question=question_text,
            score=value,
            question_type=question_type_for(row.question_category),
        )

    return Dropped("no matching branch")
