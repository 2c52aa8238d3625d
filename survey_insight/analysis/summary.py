"""Recommendations and engagement commentary from the summarization service.

The collaborator is any callable taking the request document built by
:func:`build_summary_request` and returning a response document. The
default, :func:`openai_summarizer`, asks an OpenAI chat model for it.
Responses are never trusted as-is: :func:`normalize_summary_response`
keeps only teams and questions that were asked about, caps list sizes and
discards quotes that are not literal answers.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from survey_insight.exceptions import CollaboratorUnavailable
from survey_insight.openai_client import chat_completion
from survey_insight.reporting import config
from survey_insight.reporting.models import CanonicalReport, Recommendation, ThemeStat

_logger = logging.getLogger(__name__)

Summarizer = Callable[[Dict[str, Any]], Dict[str, Any]]

DEFAULT_RECOMMENDATION_TITLE = "Recommendation"

_FENCE_RE = re.compile(r"```(?:json)?")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")  # outermost JSON object in string

_SYSTEM_PROMPT = (
    "You are a senior HR and people analytics expert. You turn employee "
    "survey answers into practical management recommendations. Respond ONLY "
    "with minified JSON matching the requested schema."
)

_RULES = (
    "Rules:\n"
    "1. For every team and every question write up to 3 short, practical "
    "recommendations for management.\n"
    "2. Do NOT count themes yourself; counts and shares are given in "
    '"themeStats". For each recommendation pick the most relevant entries '
    'from themeStats as "themeCloud" (theme, count, percentage copied as-is).\n'
    '3. "quotes": up to 5 literal answer texts copied verbatim from '
    '"answers". Never invent or rephrase quotes.\n'
    "4. For every team in \"engagement\" write a one-sentence summary of its "
    "participation and one recommendation.\n"
    "5. No invented data, counts or themes.\n\n"
    "Response schema:\n"
    '{"openQuestions":[{"teamName":"","questions":[{"questionText":"",'
    '"recommendations":[{"title":"","description":"","quotes":[""],'
    '"themeCloud":[{"theme":"","count":0,"percentage":0}]}]}]}],'
    '"engagement":[{"teamName":"","summary":"","recommendation":""}]}'
)


def build_summary_request(report: CanonicalReport) -> Dict[str, Any]:
    """Collect the per-team answers and engagement figures to summarise."""

    return {
        "openQuestions": [
            {
                "teamName": group.team_name,
                "questions": [
                    {
                        "questionText": q.question_text,
                        "answers": [a.to_dict() for a in q.answers],
                        "themeStats": [t.to_dict() for t in q.theme_stats],
                    }
                    for q in group.questions
                ],
            }
            for group in report.open_questions
        ],
        "engagement": {
            "teams": [
                {
                    "teamName": e.team_name,
                    "responseCount": e.response_count,
                    "sentCount": e.sent_count,
                }
                for e in report.team_engagement
            ],
            "successRate": report.success_rate,
            "totalSent": report.total_sent,
            "totalReceived": report.total_received,
        },
    }


def _parse_response(content: str) -> Dict[str, Any]:
    """Extract the JSON object from the raw model *content* string."""

    cleaned = _FENCE_RE.sub("", content).strip()
    match = _OBJECT_RE.search(cleaned)
    if not match:
        raise CollaboratorUnavailable("Model response did not contain a JSON object")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise CollaboratorUnavailable(
            "Failed to parse JSON from model response"
        ) from exc
    if not isinstance(data, dict):
        raise CollaboratorUnavailable("Model response was not a JSON object")
    return data


def openai_summarizer(
    request: Dict[str, Any],
    *,
    temperature: float = 0.2,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Ask the OpenAI chat model for recommendations on *request*.

    *timeout* bounds the HTTP call and defaults to the summary timeout.
    """

    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {
            "role": "user",
            "content": _RULES
            + "\n\nInput data:\n"
            + json.dumps(request, ensure_ascii=False),
        },
    ]
    response = chat_completion(
        messages,
        temperature=temperature,
        timeout=config.SUMMARY_TIMEOUT_SECONDS if timeout is None else timeout,
    )
    try:
        content: str = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise CollaboratorUnavailable("Model response missing expected fields") from exc
    return _parse_response(content or "")


@dataclass(slots=True)
class SummaryResult:
    """Normalised collaborator output, keyed like the report it enriches."""

    recommendations: Dict[Tuple[str, str], List[Recommendation]] = field(
        default_factory=dict
    )
    engagement: Dict[str, Tuple[str, str]] = field(default_factory=dict)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _theme_cloud(raw: Any, fallback: List[ThemeStat]) -> List[ThemeStat]:
    cloud = []
    for item in _as_list(raw):
        if not isinstance(item, dict) or not str(item.get("theme") or "").strip():
            continue
        try:
            count = int(float(item.get("count") or 0))
            percentage = float(item.get("percentage") or 0)
        except (TypeError, ValueError):
            count, percentage = 0, 0.0
        cloud.append(
            ThemeStat(
                theme=str(item["theme"]).strip(), count=count, percentage=percentage
            )
        )
    if not cloud:
        return list(fallback[: config.MAX_FALLBACK_THEMES])
    cloud.sort(key=lambda t: t.count, reverse=True)
    return cloud


def _recommendation(
    raw: Any, answers: set, fallback: List[ThemeStat]
) -> Recommendation:
    raw = raw if isinstance(raw, dict) else {}
    quotes: List[str] = []
    for quote in _as_list(raw.get("quotes")):
        text = str(quote or "").strip()
        if text and text in answers and text not in quotes:
            quotes.append(text)
        elif text and text not in answers:
            _logger.debug("Discarding quote not found among answers: %r", text)
    return Recommendation(
        title=str(raw.get("title") or "").strip() or DEFAULT_RECOMMENDATION_TITLE,
        description=str(raw.get("description") or "").strip(),
        quotes=quotes[: config.MAX_QUOTES],
        theme_cloud=_theme_cloud(raw.get("themeCloud"), fallback),
    )


def normalize_summary_response(
    report: CanonicalReport, response: Any
) -> SummaryResult:
    """Validate *response* against what *report* asked for.

    Raises :class:`CollaboratorUnavailable` when *response* is not a
    response document at all.
    """

    if not isinstance(response, dict):
        raise CollaboratorUnavailable("Summary response is not a JSON object")

    asked = {
        (group.team_name, q.question_text): q
        for group in report.open_questions
        for q in group.questions
    }
    result = SummaryResult()

    for team in _as_list(response.get("openQuestions")):
        if not isinstance(team, dict):
            continue
        team_name = str(team.get("teamName") or "").strip()
        for question in _as_list(team.get("questions")):
            if not isinstance(question, dict):
                continue
            key = (team_name, str(question.get("questionText") or "").strip())
            asked_question = asked.get(key)
            if asked_question is None:
                _logger.debug("Ignoring summary for unknown question %s", key)
                continue
            answers = set(asked_question.answer_texts())
            recs = _as_list(question.get("recommendations"))
            recs = recs[: config.MAX_RECOMMENDATIONS]
            result.recommendations[key] = [
                _recommendation(r, answers, asked_question.theme_stats) for r in recs
            ]

    known_teams = {e.team_name for e in report.team_engagement}
    for item in _as_list(response.get("engagement")):
        if not isinstance(item, dict):
            continue
        team_name = str(item.get("teamName") or "").strip()
        if team_name in known_teams:
            result.engagement[team_name] = (
                str(item.get("summary") or "").strip(),
                str(item.get("recommendation") or "").strip(),
            )
    return result


def apply_summary(report: CanonicalReport, result: SummaryResult) -> None:
    """Merge *result* into *report* in place.

    Engagement summaries read from the export take precedence over the
    collaborator's.
    """

    for group in report.open_questions:
        for question in group.questions:
            key = (group.team_name, question.question_text)
            question.recommendations = list(result.recommendations.get(key, []))

    for record in report.team_engagement:
        if record.team_name not in result.engagement:
            continue
        summary, recommendation = result.engagement[record.team_name]
        if not record.summary:
            record.summary = summary
        record.recommendation = recommendation
