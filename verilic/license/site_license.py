"""
Product license with license number and site entitlement rules.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from verilic.common.exceptions import FieldNotFoundError
from verilic.license.license import License

logger = logging.getLogger(__name__)

LICENSE_NUMBER_PATTERN = re.compile(r"[0-9]{4}-[0-9]{4}-[0-9]{4}-[0-9]{4}")
PLACEHOLDER_LICENSE_NUMBER = "1234-1234-1234-1234"


class SiteLicense(License):
    """License that also requires a well-formed license number and caps the
    number of sites that may be defined."""

    @property
    def license_number(self) -> Any:
        return self.get_field("license_number")

    @property
    def sites(self) -> Any:
        return self.get_field("sites")

    def is_valid(self) -> bool:
        if not super().is_valid():
            return False
        return self.valid_license_number()

    def valid_license_number(self) -> bool:
        """Reject placeholder, degenerate and malformed license numbers."""
        try:
            number = self.license_number
        except FieldNotFoundError:
            logger.info("License %s has no license number", self.license_file)
            return False

        if not isinstance(number, str):
            return False

        if len(set(number.replace("-", ""))) == 1 or number == PLACEHOLDER_LICENSE_NUMBER:
            return False

        return LICENSE_NUMBER_PATTERN.fullmatch(number) is not None

    def can_add_sites(self, current_site_count: int) -> bool:
        """Check whether another site may be added.

        Raises:
            FieldNotFoundError: When the license carries no ``sites`` quota.
        """
        if current_site_count < 1 or not self.is_valid():
            return False

        quota = self.sites
        if isinstance(quota, bool) or not isinstance(quota, int):
            logger.warning("License %s has a non-integer site quota", self.license_file)
            return False

        return current_site_count < quota
