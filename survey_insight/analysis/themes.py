"""Theme frequency statistics for free-text answers."""
from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping

from survey_insight.reporting.models import AnswerEntry, ThemeStat


@dataclass(slots=True)
class ThemeSummary:
    total_answers: int
    theme_stats: List[ThemeStat] = field(default_factory=list)

    @property
    def has_themes(self) -> bool:
        return bool(self.theme_stats)


def normalize_theme(label: Any) -> str:
    """Trim *label* and collapse internal whitespace."""
    return " ".join(str(label or "").split())


def _theme_of(entry: Any) -> str:
    if isinstance(entry, AnswerEntry):
        return normalize_theme(entry.theme)
    if isinstance(entry, Mapping):
        return normalize_theme(entry.get("theme") or entry.get("tema"))
    # plain answer strings carry no theme
    return ""


def _percentage(count: int, total: int) -> float:
    if not total:
        return 0.0
    # halves round up, as the dashboard shows them
    share = Decimal(count / total * 100).quantize(Decimal("0.1"), ROUND_HALF_UP)
    return float(share)


def compute_theme_stats(entries: Iterable[Any]) -> ThemeSummary:
    """Count theme labels across *entries*.

    Entries without a theme count towards the total but land in no bucket.
    Results are sorted by descending count; ties keep first-seen order.
    """

    total = 0
    counts: Counter[str] = Counter()
    for entry in entries:
        total += 1
        theme = _theme_of(entry)
        if theme:
            counts[theme] += 1

    stats = [
        ThemeStat(
            theme=theme,
            count=count,
            percentage=_percentage(count, total),
        )
        for theme, count in counts.items()
    ]
    stats.sort(key=lambda s: s.count, reverse=True)
    return ThemeSummary(total_answers=total, theme_stats=stats)
