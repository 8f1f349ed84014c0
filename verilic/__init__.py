# Verilic license verification

from verilic.common.decorators import license_protected, requires_valid_license
from verilic.common.exceptions import FieldNotFoundError, ValidationError
from verilic.common.models import ErrorKind, VerifyOutcome
from verilic.license import License, SiteLicense

__all__ = [
    "ErrorKind",
    "FieldNotFoundError",
    "License",
    "SiteLicense",
    "ValidationError",
    "VerifyOutcome",
    "license_protected",
    "requires_valid_license",
]
