"""End-to-end analysis run: rows in, enriched :class:`CanonicalReport` out."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Any, Dict, Iterable, Optional

from survey_insight.analysis.summary import (
    Summarizer,
    apply_summary,
    build_summary_request,
    normalize_summary_response,
)
from survey_insight.exceptions import CollaboratorUnavailable
from survey_insight.reporting import config
from survey_insight.reporting.aggregator import aggregate_rows
from survey_insight.reporting.models import CanonicalReport, RawRow

logger = logging.getLogger(__name__)


def _submit_detached(summarizer: Summarizer, request: Dict[str, Any]) -> Future:
    """Run *summarizer* on a daemon thread and return its future.

    The thread is never joined; an abandoned call dies with the process.
    """

    future: Future = Future()

    def _run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(summarizer(request))
        except BaseException as exc:  # noqa: BLE001 – handed to the caller
            future.set_exception(exc)

    threading.Thread(target=_run, name="summarizer", daemon=True).start()
    return future


def enrich_report(
    report: CanonicalReport,
    summarizer: Summarizer,
    *,
    timeout: Optional[float] = None,
) -> bool:
    """Merge collaborator recommendations into *report*.

    Any failure (exception, timeout, malformed response) leaves *report*
    without recommendations and returns False.
    """

    request = build_summary_request(report)
    timeout = config.SUMMARY_TIMEOUT_SECONDS if timeout is None else timeout

    try:
        response = _submit_detached(summarizer, request).result(timeout=timeout)
        result = normalize_summary_response(report, response)
    except FuturesTimeout:
        err = CollaboratorUnavailable(f"no response within {timeout}s")
        logger.warning("Summarization unavailable, continuing without it: %s", err)
        return False
    except Exception as exc:  # noqa: BLE001 – enrichment is optional
        err = exc
        if not isinstance(err, CollaboratorUnavailable):
            err = CollaboratorUnavailable(str(exc))
        logger.warning("Summarization unavailable, continuing without it: %s", err)
        return False

    apply_summary(report, result)
    logger.info("Merged recommendations for %d questions", len(result.recommendations))
    return True


def build_report(
    rows: Iterable[RawRow],
    summarizer: Optional[Summarizer] = None,
    *,
    timeout: Optional[float] = None,
    report_date: Optional[str] = None,
    scale_max: int = config.SCALE_MAX,
) -> CanonicalReport:
    """Aggregate *rows* and, when there are open answers, enrich the result.

    The summarizer is not called at all when no open answers were found.
    """

    report = aggregate_rows(rows, report_date=report_date, scale_max=scale_max)

    if not report.has_open_answers():
        logger.info("No open answers found; skipping summarization")
        report.open_questions = []
        return report

    if summarizer is None:
        logger.info("No summarizer configured; report has no recommendations")
        return report

    enrich_report(report, summarizer, timeout=timeout)
    return report
