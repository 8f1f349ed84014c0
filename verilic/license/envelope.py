"""
Outer license container decoding.

A license file is base64 text wrapping a JSON object::

    {"data": "<json record text>", "signature": "<base64>" | null}
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from verilic.common.exceptions import EnvelopeDecodeError, LicenseFileMissingError
from verilic.common.models import Envelope

logger = logging.getLogger(__name__)


def read_license_bytes(path: str | Path, max_len: int | None = None) -> bytes:
    """Read the raw license file."""
    license_path = Path(path)
    try:
        raw = license_path.read_bytes()
    except OSError as err:
        msg = f"Cannot read your license file: {license_path}"
        raise LicenseFileMissingError(msg) from err
    if max_len is not None and len(raw) > max_len:
        msg = f"License file exceeds {max_len} bytes"
        raise EnvelopeDecodeError(msg)
    return raw


def decode_envelope(raw: bytes) -> Envelope:
    """Decode raw license bytes into an Envelope."""
    # Line breaks and trailing whitespace are common in copied license files
    compact = b"".join(raw.split())
    try:
        container = base64.b64decode(compact, validate=True)
    except binascii.Error as err:
        msg = "The license file is not valid base64."
        raise EnvelopeDecodeError(msg) from err

    # ValueError covers JSONDecodeError, bad UTF-8 and oversized integers
    try:
        obj = json.loads(container)
    except (ValueError, RecursionError) as err:
        msg = "The license file could not be decoded."
        raise EnvelopeDecodeError(msg) from err

    if not isinstance(obj, dict):
        msg = "The license file could not be decoded."
        raise EnvelopeDecodeError(msg)
    if "data" not in obj:
        msg = "The license is missing its data."
        raise EnvelopeDecodeError(msg)

    try:
        envelope = Envelope.model_validate(obj)
    except ValidationError as err:
        logger.debug("Envelope validation failed: %s", err)
        msg = "The license file could not be decoded."
        raise EnvelopeDecodeError(msg) from err

    logger.debug(
        "Decoded envelope: %d payload bytes, signed=%s",
        len(envelope.signed_data),
        envelope.signature is not None,
    )
    return envelope
