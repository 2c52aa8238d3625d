"""Map spreadsheet-style records to :class:`RawRow` objects.

The export may use English or Slovak column headers in any capitalisation;
each field lists the headers it is read from, first match wins.
"""
from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from survey_insight.exceptions import InvalidInput
from survey_insight.reporting import config
from survey_insight.reporting.models import CROSS_CUTTING, RawRow

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, tuple] = {
    "team": ("team", "skupina"),
    "question": ("question", "otazka"),
    "value": ("value", "hodnota"),
    "free_text": ("free_text", "answer_text", "text_odpovede"),
    "area": ("area", "oblast"),
    "row_kind": ("row_kind", "type", "typ"),
    "question_category": ("question_category", "category", "kategoria_otazky"),
    "theme": ("theme", "answer_theme", "tema_odpovede", "label_temy"),
    "company": ("company", "company_name", "nazov_firmy", "firma"),
    "survey": ("survey", "survey_name", "nazov_prieskumu", "prieskum"),
}

_DEFAULTS = {"area": config.DEFAULT_AREA, "question_category": CROSS_CUTTING}

TABLE_SUFFIXES = (".xlsx", ".csv")


def _lookup(lowered: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    for alias in aliases:
        value = lowered.get(alias)
        if value is not None and str(value).strip() != "":
            return value
    return None


def row_from_record(record: Mapping[str, Any]) -> RawRow:
    """Build a :class:`RawRow` from one decoded spreadsheet record."""

    lowered = {str(k).strip().lower(): v for k, v in record.items()}
    fields: Dict[str, Any] = {}
    for name, aliases in COLUMN_ALIASES.items():
        value = _lookup(lowered, aliases)
        if name == "value":
            fields[name] = value
        elif value is None:
            fields[name] = _DEFAULTS.get(name, "")
        else:
            fields[name] = str(value).strip()
    return RawRow(**fields)


def rows_from_records(records: Iterable[Mapping[str, Any]]) -> List[RawRow]:
    return [row_from_record(r) for r in records]


def _frame_records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    # empty cells arrive as NaN
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict("records")


def _read_table(path: Path, suffix: str) -> pd.DataFrame:
    try:
        if suffix == ".csv":
            # keep decimal commas and leading zeros as written
            return pd.read_csv(path, dtype=str, encoding="utf-8-sig")
        return pd.read_excel(path, sheet_name=0)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise InvalidInput(f"Cannot read {path}: {exc}") from exc


def load_rows(path: Path) -> List[RawRow]:
    """Read rows from an ``.xlsx`` (first sheet), ``.csv`` or ``.json`` export."""

    path = Path(path)
    if not path.exists():
        raise InvalidInput(f"Input file {path} does not exist")

    suffix = path.suffix.lower()
    if suffix == ".json":
        with path.open(encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise InvalidInput(f"{path} is not valid JSON") from exc
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise InvalidInput(f"{path} must contain a JSON array of objects")
        records: List[Mapping[str, Any]] = data
    elif suffix in TABLE_SUFFIXES:
        records = _frame_records(_read_table(path, suffix))
    else:
        raise InvalidInput(
            f"Unsupported input format {suffix!r}; use .xlsx, .csv or .json"
        )

    logger.info("Loaded %d rows from %s", len(records), path)
    return rows_from_records(records)
