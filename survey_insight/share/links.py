"""Embed share payloads in, and recover them from, URL fragments."""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote, unquote, urlsplit

from survey_insight.exceptions import InvalidInput
from survey_insight.reporting.models import CanonicalReport
from survey_insight.share.codec import decode_payload, encode_payload

logger = logging.getLogger(__name__)

FRAGMENT_KEY = "sreport"

# The sharing UI asks for a longer password than the codec itself requires.
SHARE_MIN_PASSWORD_LENGTH = 6


def build_share_url(base_url: str, payload: str) -> str:
    """Return *base_url* with *payload* attached as ``#sreport=...``."""
    base = base_url.split("#", 1)[0]
    return f"{base}#{FRAGMENT_KEY}={quote(payload, safe='')}"


def extract_payload(link: str) -> Optional[str]:
    """Pull the payload out of a share URL, a ``#...`` hash or a bare payload.

    Returns ``None`` when *link* has a fragment without an ``sreport`` entry.
    """

    link = link.strip()
    if "#" in link:
        fragment = urlsplit(link).fragment if "://" in link else link.split("#", 1)[1]
    elif link.startswith(f"{FRAGMENT_KEY}="):
        fragment = link
    else:
        return unquote(link) or None

    for part in fragment.split("&"):
        key, _, value = part.partition("=")
        if key == FRAGMENT_KEY and value:
            return unquote(value)
    return None


def share_report(report: CanonicalReport, password: str, base_url: str) -> str:
    """Encrypt *report* and return a self-contained share URL."""

    if not password or len(password.strip()) < SHARE_MIN_PASSWORD_LENGTH:
        raise InvalidInput(
            f"Password must be at least {SHARE_MIN_PASSWORD_LENGTH} characters long."
        )
    payload = encode_payload(report.to_dict(), password)
    logger.info("Created share payload of %d characters", len(payload))
    return build_share_url(base_url, payload)


def open_shared_report(link: str, password: str) -> CanonicalReport:
    """Decrypt the report carried by *link*.

    Raises :class:`InvalidInput` if *link* carries no payload; decryption
    errors propagate from :func:`decode_payload`.
    """

    payload = extract_payload(link)
    if not payload:
        raise InvalidInput("Link does not contain a shared report.")
    document: Any = decode_payload(payload, password)
    if not isinstance(document, dict):
        raise InvalidInput("Shared payload is not a report.")
    return CanonicalReport.from_dict(document)
