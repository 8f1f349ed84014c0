"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from verilic.common.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _reject(error_message: str, *, raise_exception: bool) -> None:
    if raise_exception:
        raise ValidationError(error_message)
    logger.warning("License check failed: %s", error_message)


def requires_valid_license(
    license_obj: Any | Callable[..., Any] | str,
    error_message: str = "License is not valid",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that ensures function runs only when the license is valid.

    Args:
        license_obj: License instance, callable that returns one, or the name
            of an attribute holding one on ``self``
        error_message: Message to show when the license is not valid
        raise_exception: Whether to raise exception or return None

    Returns:
        Decorated function that only executes with a valid license
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if isinstance(license_obj, str):
                if not args:
                    msg = f"Cannot get license attribute '{license_obj}' without self"
                    raise ValueError(msg)
                lic = getattr(args[0], license_obj)
            elif hasattr(license_obj, "is_valid"):
                lic = license_obj
            elif callable(license_obj):
                if args and hasattr(args[0], func.__name__):
                    try:
                        lic = license_obj(args[0])
                    except TypeError:
                        lic = license_obj()
                else:
                    lic = license_obj()
            else:
                msg = f"Cannot resolve a license from {license_obj!r}"
                raise TypeError(msg)

            if not lic.is_valid():
                _reject(error_message, raise_exception=raise_exception)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator


def license_protected(
    get_license: Callable[[], Any],
    error_message: str = "License is not valid",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that gets the license dynamically and checks its validity.

    Args:
        get_license: Function that returns a License instance
        error_message: Message to show when the license is not valid
        raise_exception: Whether to raise exception or return None
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not get_license().is_valid():
                _reject(error_message, raise_exception=raise_exception)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator
