"""
Custom exceptions for the license verification engine.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base exception for license failures."""


class LicenseFileMissingError(LicenseError):
    """Exception for license files that cannot be read."""


class EnvelopeDecodeError(LicenseError):
    """Exception for license files whose outer container cannot be decoded."""


class RecordDecodeError(LicenseError):
    """Exception for license payloads that cannot be decoded into fields."""


class FieldNotFoundError(LicenseError, LookupError):
    """Exception for requests of a field the license does not carry."""

    def __init__(self, field: str, owner: str = "License") -> None:
        super().__init__(f"No such field: '{field}' on {owner}")
        self.field = field


class ValidationError(LicenseError):
    """Exception for guarded calls made without a valid license."""

    def __init__(self, message: str, status_code: int = 403) -> None:
        super().__init__(message)
        self.status_code = status_code
