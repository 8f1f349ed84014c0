"""
Pydantic models and enums shared by the verification components.
"""

from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    field_validator,
)

FieldValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]
Record = dict[str, FieldValue]

RECORD_ADAPTER: TypeAdapter[Record] = TypeAdapter(Record)


class ErrorKind(str, Enum):
    """Kinds of errors accumulated by a license. Values double as message keys."""

    MISSING_PUBLIC_KEY = "missing_pubkey"
    MISSING_LICENSE_FILE = "missing_license"
    CORRUPT_LICENSE_FILE = "corrupt_license_file"
    INVALID_SIGNATURE = "invalid_signature"


class ParseState(str, Enum):
    UNPARSED = "unparsed"
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"


class VerifyOutcome(str, Enum):
    """Result of a signature check. ERROR means the library could not decide."""

    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


class Envelope(BaseModel):
    """Outer license container: the signed payload text and its signature."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    data: StrictStr
    signature: bytes | None = None

    @field_validator("signature", mode="before")
    @classmethod
    def decode_signature(cls, value: Any) -> bytes | None:
        if value is None:
            return None
        if not isinstance(value, str):
            msg = "signature must be a base64 string"
            raise ValueError(msg)
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as err:
            msg = f"signature is not valid base64: {err}"
            raise ValueError(msg) from err

    @property
    def signed_data(self) -> bytes:
        """The exact bytes the issuer signed."""
        return self.data.encode("utf-8")


class LicenseStatus(BaseModel):
    """Diagnostic snapshot of a license verdict."""

    is_valid: bool
    is_signed: bool
    signature_is_valid: bool
    verify_outcome: VerifyOutcome | None = None
    state: ParseState
    errors: dict[ErrorKind, str]
