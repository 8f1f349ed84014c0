"""
License aggregate: lazy one-shot parsing, error accumulation and the
structural/cryptographic verdict.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from verilic.common.config import Config
from verilic.common.crypto import CryptoUtils
from verilic.common.exceptions import (
    EnvelopeDecodeError,
    FieldNotFoundError,
    LicenseFileMissingError,
    RecordDecodeError,
)
from verilic.common.models import (
    Envelope,
    ErrorKind,
    LicenseStatus,
    ParseState,
    Record,
    VerifyOutcome,
)
from verilic.license.envelope import decode_envelope, read_license_bytes
from verilic.license.record import decode_record

if TYPE_CHECKING:
    from collections.abc import Mapping

    from verilic.common.crypto import PublicKeyMaterial

logger = logging.getLogger(__name__)


class License:
    """A license file checked against a trusted public key.

    The file is read and decoded at most once, on the first query that needs
    its contents. Structural and cryptographic problems never raise; they are
    recorded in :meth:`errors` and make :meth:`is_valid` return False.
    """

    def __init__(
        self,
        license_file: str | Path,
        public_key: PublicKeyMaterial,
        config: Config | None = None,
    ) -> None:
        self.config = config or Config()
        self.license_file = Path(license_file)
        self.public_key = public_key

        self._errors: dict[ErrorKind, str] = {}
        self._state = ParseState.UNPARSED
        self._lock = threading.Lock()
        self._envelope: Envelope | None = None
        self._data: Record = {}
        self._verify_outcome: VerifyOutcome | None = None

        if not self.public_key:
            self._errors[ErrorKind.MISSING_PUBLIC_KEY] = "The public key is missing"

    @classmethod
    def from_config(cls, config: Config | None = None) -> License:
        """Build a license from the configured file and key paths."""
        config = config or Config()
        return cls(config.LICENSE_FILE_PATH, config.load_public_key(), config)

    def _ensure_parsed(self) -> None:
        if self._state is not ParseState.UNPARSED:
            return
        with self._lock:
            if self._state is ParseState.UNPARSED:
                self._state = self._parse_license_file()

    def _parse_license_file(self) -> ParseState:
        """Populate the envelope and fields. Must be called under the lock."""
        self._errors.pop(ErrorKind.MISSING_LICENSE_FILE, None)
        self._errors.pop(ErrorKind.CORRUPT_LICENSE_FILE, None)

        try:
            raw = read_license_bytes(
                self.license_file, self.config.MAX_LICENSE_FILE_LEN
            )
        except LicenseFileMissingError as err:
            logger.info("License file unavailable: %s", self.license_file)
            self._errors[ErrorKind.MISSING_LICENSE_FILE] = str(err)
            return ParseState.MISSING
        except EnvelopeDecodeError as err:
            logger.info("License file rejected: %s", err)
            self._errors[ErrorKind.CORRUPT_LICENSE_FILE] = str(err)
            return ParseState.CORRUPT

        try:
            envelope = decode_envelope(raw)
            data = decode_record(envelope.data)
        except (EnvelopeDecodeError, RecordDecodeError) as err:
            logger.info("License file %s is corrupt: %s", self.license_file, err)
            self._errors[ErrorKind.CORRUPT_LICENSE_FILE] = str(err)
            return ParseState.CORRUPT

        self._envelope = envelope
        self._data = data
        logger.debug("Parsed license %s with %d fields", self.license_file, len(data))
        return ParseState.OK

    @property
    def state(self) -> ParseState:
        return self._state

    def has_errors(self) -> bool:
        """Check whether any errors have been recorded."""
        return bool(self._errors)

    def errors(self) -> dict[ErrorKind, str]:
        """Return a copy of the recorded errors."""
        return dict(self._errors)

    def get_field(self, name: str) -> Any:
        """Fetch a field from the license data.

        Raises:
            FieldNotFoundError: When the license does not carry ``name``.
        """
        self._ensure_parsed()
        try:
            return self._data[name]
        except KeyError:
            raise FieldNotFoundError(name, type(self).__name__) from None

    def __getitem__(self, name: str) -> Any:
        return self.get_field(name)

    def has_field(self, name: str) -> bool:
        self._ensure_parsed()
        return name in self._data

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_field(name)

    def fields(self) -> Mapping[str, Any]:
        """Read-only view of all license fields."""
        self._ensure_parsed()
        return MappingProxyType(self._data)

    @property
    def signature(self) -> bytes | None:
        self._ensure_parsed()
        return self._envelope.signature if self._envelope else None

    @property
    def signed_data(self) -> bytes | None:
        self._ensure_parsed()
        return self._envelope.signed_data if self._envelope else None

    def is_signed(self) -> bool:
        """Check whether the license file carried a signature."""
        return self.signature is not None

    def verify_outcome(self) -> VerifyOutcome | None:
        """Run (once) and return the signature check, None when unsigned."""
        if not self.is_signed():
            return None
        if self._verify_outcome is None:
            with self._lock:
                if self._verify_outcome is None:
                    self._verify_outcome = CryptoUtils.verify(
                        self.signed_data, self.signature, self.public_key
                    )
        return self._verify_outcome

    def signature_is_valid(self) -> bool:
        """Check the signature. An unsigned license has no valid signature."""
        return self.verify_outcome() is VerifyOutcome.VALID

    def is_valid(self) -> bool:
        """Check that license data was found and, if signed, is authentic.

        Unsigned licenses are accepted on structure alone.
        """
        self._ensure_parsed()

        if not self._data:
            return False

        if self.is_signed():
            valid = self.signature_is_valid()
            if not valid:
                if self.verify_outcome() is VerifyOutcome.ERROR:
                    message = "The license signature could not be verified"
                else:
                    message = "The license file has been tampered with"
                self._errors[ErrorKind.INVALID_SIGNATURE] = message
            return valid

        return True

    def status(self) -> LicenseStatus:
        """Snapshot of the verdict for diagnostics."""
        is_valid = self.is_valid()
        return LicenseStatus(
            is_valid=is_valid,
            is_signed=self.is_signed(),
            signature_is_valid=self.signature_is_valid(),
            verify_outcome=self.verify_outcome(),
            state=self.state,
            errors=self.errors(),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.license_file)!r}, state={self._state.value})"
