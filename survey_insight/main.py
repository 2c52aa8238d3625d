"""Command-line entry point for survey-insight.

``analyze`` turns a survey export (Excel, CSV or JSON rows) into a
report, and can wrap the report into an encrypted share link. ``decode``
opens such a link again. Keeping the runtime bootstrap here ensures the
library modules can be imported by unit tests and tooling without
side-effects.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from functools import partial
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv

from survey_insight.analysis.summary import openai_summarizer
from survey_insight.exceptions import DecryptionFailed, InvalidInput
from survey_insight.pipeline import build_report
from survey_insight.reporting import config
from survey_insight.rows import load_rows
from survey_insight.share.links import open_shared_report, share_report

logger = logging.getLogger("survey_insight")

DEFAULT_BASE_URL = os.getenv("SURVEY_INSIGHT_BASE_URL", "https://localhost/")


def _configure_logging() -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=os.environ.get("SURVEY_INSIGHT_LOG_LEVEL", "INFO"),
    )


def _write(document: Any, output: Optional[Path]) -> None:
    text = json.dumps(document, ensure_ascii=False, indent=2)
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s", output)


def _cmd_analyze(args: argparse.Namespace) -> int:
    rows = load_rows(args.input)
    summarizer = None
    if not args.no_summary:
        summarizer = partial(openai_summarizer, timeout=args.timeout)
    report = build_report(
        rows,
        summarizer,
        timeout=args.timeout,
        report_date=args.date,
        scale_max=args.scale_max,
    )
    _write(report.to_dict(), args.output)

    if args.password:
        print(share_report(report, args.password, args.base_url))
    return 0


def _cmd_decode(args: argparse.Namespace) -> int:
    report = open_shared_report(args.link, args.password)
    _write(report.to_dict(), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survey-insight", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Build a report from a survey export")
    analyze.add_argument(
        "input", type=Path, help="Export as .xlsx, .csv or .json"
    )
    analyze.add_argument("-o", "--output", type=Path, help="Write report JSON here")
    analyze.add_argument(
        "--no-summary",
        action="store_true",
        help="Skip the OpenAI recommendations step",
    )
    analyze.add_argument(
        "--timeout", type=float, default=config.SUMMARY_TIMEOUT_SECONDS
    )
    analyze.add_argument("--date", help="Report date (default: current year)")
    analyze.add_argument("--scale-max", type=int, default=config.SCALE_MAX)
    analyze.add_argument("--password", help="Also print an encrypted share link")
    analyze.add_argument("--base-url", default=DEFAULT_BASE_URL)
    analyze.set_defaults(func=_cmd_analyze)

    decode = sub.add_parser("decode", help="Open an encrypted share link")
    decode.add_argument("link", help="Share URL, #fragment or bare payload")
    decode.add_argument("--password", required=True)
    decode.add_argument("-o", "--output", type=Path, help="Write report JSON here")
    decode.set_defaults(func=_cmd_decode)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    _configure_logging()

    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except InvalidInput as exc:
        logger.error("%s", exc)
    except DecryptionFailed as exc:
        logger.error("Cannot open shared report: %s", exc)
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
