"""
Configuration settings for the license verification engine.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MAX_LICENSE_FILE_LEN = 64 * 1024
DEFAULT_LOG_LEVEL = logging.WARNING


def _env_log_level(name: str, default: int) -> int:
    """Read a level name (``INFO``) or number (``20``), falling back on junk."""
    value = os.getenv(name)
    if value is None:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        logger.warning("Ignoring unknown log level %s=%r", name, value)
        return default
    return level


def _env_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        parsed = 0
    if parsed < 1:
        logger.warning("Ignoring invalid %s=%r, using %d", name, value, default)
        return default
    return parsed


class Config:
    """Central configuration class for all engine settings.

    Malformed environment values fall back to the defaults, so a broken
    variable never stops a license from being checked.
    """

    def __init__(self) -> None:
        # File paths
        self.BASE_DIR: Path = Path(
            os.getenv("VERILIC_BASE_DIR", str(Path(__file__).parent.parent))
        )
        self.DATA_DIR: Path = self.BASE_DIR / "data"
        self.KEYS_DIR: Path = self.BASE_DIR / "keys"
        self.LICENSE_FILE_PATH: Path = Path(
            os.getenv("VERILIC_LICENSE_FILE", str(self.DATA_DIR / "license.key"))
        )
        self.PUBLIC_KEY_PATH: Path = Path(
            os.getenv("VERILIC_PUBLIC_KEY_FILE", str(self.KEYS_DIR / "public.pem"))
        )

        # Upper bound on the raw license file, prevents decoding huge blobs
        self.MAX_LICENSE_FILE_LEN: int = _env_positive_int(
            "VERILIC_MAX_LICENSE_FILE_LEN", DEFAULT_MAX_LICENSE_FILE_LEN
        )

        # Logging
        self.LOG_LEVEL: int = _env_log_level("VERILIC_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    def load_public_key(self) -> bytes | None:
        """Load the PEM public key, or None when it cannot be read."""
        try:
            with self.PUBLIC_KEY_PATH.open("rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as err:
            logger.warning("Cannot read public key %s: %s", self.PUBLIC_KEY_PATH, err)
            return None
