"""
Inner license payload decoding.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from verilic.common.exceptions import RecordDecodeError
from verilic.common.models import RECORD_ADAPTER, Record


def decode_record(payload: str) -> Record:
    """Decode the payload text into a mapping of field names to scalars."""
    try:
        obj = json.loads(payload)
    except (ValueError, RecursionError) as err:
        msg = "The license data could not be decoded."
        raise RecordDecodeError(msg) from err

    try:
        return RECORD_ADAPTER.validate_python(obj)
    except (ValidationError, RecursionError) as err:
        msg = "The license data is not a mapping of scalar fields."
        raise RecordDecodeError(msg) from err
