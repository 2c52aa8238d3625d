"""Password-protected share payloads.

A payload is four dot-separated, URL-safe base64 fields without padding::

    <version>.<salt>.<iv>.<ciphertext>

The document is serialised to compact JSON, compressed (depending on the
version), and encrypted with AES-256-GCM under a key derived from the
password with PBKDF2-HMAC-SHA256. The GCM tag authenticates the whole
ciphertext, so a wrong password and a tampered payload fail the same way.

Every version ever issued stays decodable: links already handed out keep
working after the encoder moves to a newer version.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import zlib
from enum import Enum
from typing import Any, Callable, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from survey_insight.exceptions import DecryptionFailed, FormatError, InvalidInput

logger = logging.getLogger(__name__)

__all__ = [
    "PayloadVersion",
    "CURRENT_VERSION",
    "encode_payload",
    "decode_payload",
]

DELIMITER = "."
SALT_BYTES = 16
IV_BYTES = 12
KEY_BYTES = 32
PBKDF2_ITERATIONS = 250_000
MIN_PASSWORD_LENGTH = 4


class PayloadVersion(str, Enum):
    """Known payload formats. Never remove a member once shipped."""

    V1 = "v1"  # legacy: uncompressed JSON
    V2 = "v2"  # zlib-compressed JSON


CURRENT_VERSION = PayloadVersion.V2

_COMPRESSORS: Dict[PayloadVersion, Callable[[bytes], bytes]] = {
    PayloadVersion.V1: lambda data: data,
    PayloadVersion.V2: lambda data: zlib.compress(data, 9),
}

_DECOMPRESSORS: Dict[PayloadVersion, Callable[[bytes], bytes]] = {
    PayloadVersion.V1: lambda data: data,
    PayloadVersion.V2: zlib.decompress,
}


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _derive_key(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_BYTES,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def _serialize(document: Any) -> bytes:
    return json.dumps(
        document, ensure_ascii=False, separators=(",", ":"), sort_keys=True
    ).encode("utf-8")


def encode_payload(
    document: Any,
    password: str,
    *,
    version: PayloadVersion = CURRENT_VERSION,
) -> str:
    """Encrypt *document* into a share payload string.

    Raises
    ------
    InvalidInput
        If *password* is shorter than ``MIN_PASSWORD_LENGTH`` characters.
    """

    if not password or len(password.strip()) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    version = PayloadVersion(version)

    plaintext = _COMPRESSORS[version](_serialize(document))
    salt = os.urandom(SALT_BYTES)
    iv = os.urandom(IV_BYTES)
    ciphertext = AESGCM(_derive_key(password, salt)).encrypt(iv, plaintext, None)

    return DELIMITER.join(
        [version.value, _b64encode(salt), _b64encode(iv), _b64encode(ciphertext)]
    )


def decode_payload(payload: str, password: str) -> Any:
    """Decrypt a share payload produced by :func:`encode_payload`.

    Raises
    ------
    InvalidInput
        If *payload* or *password* is empty.
    FormatError
        If the payload does not have four fields, carries an unknown
        version or is not valid base64url.
    DecryptionFailed
        If authentication fails (wrong password or corrupted payload).
    """

    if not payload:
        raise InvalidInput("Missing share payload.")
    if not password:
        raise InvalidInput("Missing password.")

    parts = payload.strip().split(DELIMITER)
    if len(parts) != 4:
        raise FormatError("Invalid share link format.")

    version_tag, salt_b64, iv_b64, cipher_b64 = parts
    try:
        version = PayloadVersion(version_tag)
    except ValueError as exc:
        raise FormatError(f"Unknown payload version {version_tag!r}.") from exc

    try:
        salt = _b64decode(salt_b64)
        iv = _b64decode(iv_b64)
        ciphertext = _b64decode(cipher_b64)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("Invalid share link format.") from exc
    if not salt or not iv or not ciphertext:
        raise FormatError("Invalid share link format.")

    try:
        plaintext = AESGCM(_derive_key(password, salt)).decrypt(iv, ciphertext, None)
    except (InvalidTag, ValueError) as exc:
        raise DecryptionFailed("Wrong password or corrupted link.") from exc

    try:
        data = _DECOMPRESSORS[version](plaintext)
        return json.loads(data.decode("utf-8"))
    except (zlib.error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        # authenticated but unreadable; report like any other bad link
        logger.warning("Authenticated payload could not be decoded: %s", exc)
        raise DecryptionFailed("Wrong password or corrupted link.") from exc
