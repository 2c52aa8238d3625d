"""Configuration constants for the reporting pipeline."""
from __future__ import annotations

import os

# Highest value on the survey answer scale
SCALE_MAX: int = int(os.getenv("REPORT_SCALE_MAX", "6"))

# Area used when a scored row carries no area
DEFAULT_AREA: str = os.getenv("REPORT_DEFAULT_AREA", "Unclassified")

# Fallback header values when the export carries no metadata columns
DEFAULT_CLIENT_NAME: str = os.getenv("REPORT_DEFAULT_CLIENT_NAME", "Unknown company")
DEFAULT_SURVEY_NAME: str = os.getenv("REPORT_DEFAULT_SURVEY_NAME", "Survey report")

# Limits applied to the summarization collaborator response
MAX_RECOMMENDATIONS: int = int(os.getenv("REPORT_MAX_RECOMMENDATIONS", "3"))
MAX_QUOTES: int = int(os.getenv("REPORT_MAX_QUOTES", "5"))
MAX_FALLBACK_THEMES: int = int(os.getenv("REPORT_MAX_FALLBACK_THEMES", "5"))

# Seconds to wait for the summarization collaborator before giving up
SUMMARY_TIMEOUT_SECONDS: float = float(os.getenv("REPORT_SUMMARY_TIMEOUT", "60"))

# Team names (normalized) that mark the company-wide summary rows
AGGREGATE_TEAM_MARKERS = ("total", "aggregate", "overall", "all teams", "celkom")

# Substrings (normalized) that mark participation / engagement rows
PARTICIPATION_MARKERS = (
    "engagement",
    "participation",
    "respondent",
    "responded",
    "response rate",
    "invited",
    "zapojen",
    "ucast",
    "navrat",
    "osloven",
    "rozposlan",
)
SENT_MARKERS = ("sent", "invited", "osloven", "rozposlan")
RATE_MARKERS = ("return", "rate", "navrat")
RESPONSE_MARKERS = (
    "structure",
    "filled",
    "engaged",
    "engagement",
    "responded",
    "responses",
    "struktura",
    "vyplnen",
    "zapojen",
)

# Question text marking a free-text interpretation of a team's engagement
ENGAGEMENT_NOTE_MARKERS = ("engagement interpretation", "interpretacia zapojenia")

# Row kind markers
FREE_TEXT_KINDS = ("free", "open", "volna")
SCORED_KINDS = ("score", "scale", "skore")

# Question category marker for team-specific statements
SPECIFIC_MARKER = "specif"
