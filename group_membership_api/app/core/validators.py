"""Request parameter validators.

Each validator raises ``ParameterError`` naming the offending field.
"""

from typing import Any, Optional

from .errors import ParameterError


MAX_INTEGER = 2 ** 63 - 1
MIN_INTEGER = -(2 ** 63)


def require_non_empty_string(value: Any, name: str, required: bool = True) -> Optional[str]:
    """Check that ``value`` is a non-blank string.

    When ``required`` is false a missing value (``None``) is accepted and
    returned as is; a value that is present must still be non-blank.
    """
    if value is None:
        if required:
            raise ParameterError("parameterEmpty", name)
        return None
    if not isinstance(value, str):
        raise ParameterError("parameterInvalid", name)
    if not value.strip():
        raise ParameterError("parameterEmpty", name)
    return value


def require_number(value: Any, name: str) -> int:
    """Check that ``value`` is an integer or a string of digits and return it as ``int``.

    Values outside the signed 64-bit range the database stores are rejected.
    """
    if isinstance(value, bool):
        raise ParameterError("parameterNotANumber", name)
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ParameterError("parameterNotANumber", name)
        value = int(text)
    if not isinstance(value, int) or not MIN_INTEGER <= value <= MAX_INTEGER:
        raise ParameterError("parameterNotANumber", name)
    return value
