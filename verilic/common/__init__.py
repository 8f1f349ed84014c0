# Common utilities
from verilic.common.crypto import CryptoUtils as CryptoUtils
from verilic.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
