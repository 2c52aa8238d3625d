"""Data structures for reporting pipeline.

Every report type serialises to the camelCase JSON document consumed by the
dashboard (``to_dict``) and can be rebuilt from it (``from_dict``), which is
how a decrypted share payload turns back into a :class:`CanonicalReport`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from survey_insight.reporting import config

CROSS_CUTTING = "Cross-cutting"
SPECIFIC = "Specific"


@dataclass(frozen=True, slots=True)
class RawRow:
    """One record of the survey export, as decoded from the spreadsheet."""

    team: str = ""
    question: str = ""
    value: Any = None  # raw cell; parsed by the classifier
    free_text: str = ""
    area: str = config.DEFAULT_AREA
    row_kind: str = ""
    question_category: str = CROSS_CUTTING
    theme: str = ""
    company: str = ""
    survey: str = ""


@dataclass(frozen=True, slots=True)
class AnswerEntry:
    """A single free-text answer with its optional theme label."""

    text: str
    theme: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "theme": self.theme}

    @classmethod
    def from_dict(cls, data: Any) -> "AnswerEntry":
        if isinstance(data, dict):
            return cls(
                text=str(data.get("text", "")), theme=str(data.get("theme") or "")
            )
        return cls(text=str(data))  # older links carry bare answer strings


@dataclass(slots=True)
class ThemeStat:
    theme: str
    count: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"theme": self.theme, "count": self.count, "percentage": self.percentage}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThemeStat":
        return cls(
            theme=str(data.get("theme", "")),
            count=int(data.get("count", 0)),
            percentage=float(data.get("percentage", 0)),
        )


@dataclass(slots=True)
class Recommendation:
    """Management recommendation returned by the summarization collaborator."""

    title: str
    description: str = ""
    quotes: List[str] = field(default_factory=list)
    theme_cloud: List[ThemeStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "quotes": list(self.quotes),
            "themeCloud": [t.to_dict() for t in self.theme_cloud],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recommendation":
        return cls(
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            quotes=[str(q) for q in data.get("quotes", [])],
            theme_cloud=[ThemeStat.from_dict(t) for t in data.get("themeCloud", [])],
        )


@dataclass(slots=True)
class OpenQuestion:
    question_text: str
    answers: List[AnswerEntry] = field(default_factory=list)
    theme_stats: List[ThemeStat] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)

    def answer_texts(self) -> List[str]:
        return [a.text for a in self.answers]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionText": self.question_text,
            "answers": [a.to_dict() for a in self.answers],
            "themeStats": [t.to_dict() for t in self.theme_stats],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OpenQuestion":
        return cls(
            question_text=str(data.get("questionText", "")),
            answers=[AnswerEntry.from_dict(a) for a in data.get("answers", [])],
            theme_stats=[ThemeStat.from_dict(t) for t in data.get("themeStats", [])],
            recommendations=[
                Recommendation.from_dict(r) for r in data.get("recommendations", [])
            ],
        )


@dataclass(slots=True)
class OpenQuestionGroup:
    """All open questions answered by one team."""

    team_name: str
    questions: List[OpenQuestion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamName": self.team_name,
            "questions": [q.to_dict() for q in self.questions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OpenQuestionGroup":
        return cls(
            team_name=str(data.get("teamName", "")),
            questions=[OpenQuestion.from_dict(q) for q in data.get("questions", [])],
        )


@dataclass(slots=True)
class Metric:
    """Score of one team for one statement.

    ``has_data`` is False for zero-filled cells, i.e. the team never
    answered the statement; a real score of 0 keeps ``has_data`` True.
    """

    category: str
    score: float
    question_type: str = CROSS_CUTTING
    has_data: bool = True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "category": self.category,
            "score": self.score,
            "questionType": self.question_type,
        }
        if not self.has_data:
            data["noData"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Metric":
        return cls(
            category=str(data.get("category", "")),
            score=float(data.get("score", 0)),
            question_type=str(data.get("questionType", CROSS_CUTTING)),
            has_data=not data.get("noData", False),
        )


@dataclass(slots=True)
class TeamMetrics:
    team_name: str
    metrics: List[Metric] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamName": self.team_name,
            "metrics": [m.to_dict() for m in self.metrics],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamMetrics":
        return cls(
            team_name=str(data.get("teamName", "")),
            metrics=[Metric.from_dict(m) for m in data.get("metrics", [])],
        )


@dataclass(slots=True)
class AreaMetricMatrix:
    """Team × statement score matrix for one survey area."""

    area_id: str
    title: str
    teams: List[TeamMetrics] = field(default_factory=list)

    def categories(self) -> List[str]:
        if not self.teams:
            return []
        return [m.category for m in self.teams[0].metrics]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.area_id,
            "title": self.title,
            "teams": [t.to_dict() for t in self.teams],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AreaMetricMatrix":
        return cls(
            area_id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            teams=[TeamMetrics.from_dict(t) for t in data.get("teams", [])],
        )


@dataclass(slots=True)
class EngagementRecord:
    team_name: str
    response_count: float = 0
    sent_count: Optional[float] = None
    summary: str = ""
    recommendation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamName": self.team_name,
            "responseCount": self.response_count,
            "sentCount": self.sent_count,
            "summary": self.summary,
            "recommendation": self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngagementRecord":
        sent = data.get("sentCount")
        return cls(
            team_name=str(data.get("teamName", "")),
            response_count=float(data.get("responseCount", 0)),
            sent_count=None if sent is None else float(sent),
            summary=str(data.get("summary", "")),
            recommendation=str(data.get("recommendation", "")),
        )


@dataclass(slots=True)
class ReportMetadata:
    date: str
    scale_max: int = config.SCALE_MAX
    company: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "scaleMax": self.scale_max, "company": self.company}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportMetadata":
        return cls(
            date=str(data.get("date", "")),
            scale_max=int(data.get("scaleMax", config.SCALE_MAX)),
            company=str(data.get("company", "")),
        )


@dataclass(slots=True)
class CanonicalReport:
    """Fully aggregated result of one analysis run."""

    metadata: ReportMetadata
    client_name: str = config.DEFAULT_CLIENT_NAME
    survey_name: str = config.DEFAULT_SURVEY_NAME
    total_sent: float = 0
    total_received: float = 0
    success_rate: str = "0%"
    team_engagement: List[EngagementRecord] = field(default_factory=list)
    areas: List[AreaMetricMatrix] = field(default_factory=list)
    open_questions: List[OpenQuestionGroup] = field(default_factory=list)
    dropped_rows: int = 0

    def has_open_answers(self) -> bool:
        return any(q.answers for g in self.open_questions for q in g.questions)

    def engagement_for(self, team_name: str) -> Optional[EngagementRecord]:
        for record in self.team_engagement:
            if record.team_name == team_name:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reportMetadata": self.metadata.to_dict(),
            "clientName": self.client_name,
            "surveyName": self.survey_name,
            "totalSent": self.total_sent,
            "totalReceived": self.total_received,
            "successRate": self.success_rate,
            "teamEngagement": [e.to_dict() for e in self.team_engagement],
            "areas": [a.to_dict() for a in self.areas],
            "openQuestions": [g.to_dict() for g in self.open_questions],
            "droppedRows": self.dropped_rows,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalReport":
        return cls(
            metadata=ReportMetadata.from_dict(data.get("reportMetadata", {})),
            client_name=str(data.get("clientName", config.DEFAULT_CLIENT_NAME)),
            survey_name=str(data.get("surveyName", config.DEFAULT_SURVEY_NAME)),
            total_sent=float(data.get("totalSent", 0)),
            total_received=float(data.get("totalReceived", 0)),
            success_rate=str(data.get("successRate", "0%")),
            team_engagement=[
                EngagementRecord.from_dict(e) for e in data.get("teamEngagement", [])
            ],
            areas=[AreaMetricMatrix.from_dict(a) for a in data.get("areas", [])],
            open_questions=[
                OpenQuestionGroup.from_dict(g) for g in data.get("openQuestions", [])
            ],
            dropped_rows=int(data.get("droppedRows", 0)),
        )
