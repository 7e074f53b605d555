"""Sanitization helpers for untrusted free-text input."""
from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional

from email_validator import EmailNotValidError, validate_email
from markupsafe import escape


_LOW_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_string(value: Any) -> str:
    """Strip control characters, HTML-escape and trim ``value``."""

    if value is None:
        return ""
    text = _LOW_CHARS.sub("", str(value))
    return str(escape(text)).strip()


def sanitize_email(value: Any) -> str:
    """Return the normalized address, or an empty string when it is not valid."""

    if not value:
        return ""
    try:
        result = validate_email(str(value).strip(), check_deliverability=False)
    except EmailNotValidError:
        return ""
    return result.normalized.lower()


def sanitize_number(
    value: Any, minimum: Optional[float] = None, maximum: Optional[float] = None
) -> Optional[float]:
    """Coerce ``value`` to a finite float within bounds, else ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if minimum is not None and number < minimum:
        return None
    if maximum is not None and number > maximum:
        return None
    return number


def sanitize_object(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Apply :func:`sanitize_string` to every string inside ``obj``.

    Nested mappings and lists are walked recursively; other values are copied
    through untouched.
    """

    return {key: _sanitize_value(value) for key, value in obj.items()}


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, Mapping):
        return sanitize_object(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    return value


__all__ = ["sanitize_email", "sanitize_number", "sanitize_object", "sanitize_string"]
