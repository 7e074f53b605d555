"""Structural rules applied to candidate template rows."""
from __future__ import annotations

import re
from typing import List, Mapping, Optional

from .errors import ValidationError
from .records import CallToAction


REQUIRED_FIELDS: List[str] = [
    "TemplateName",
    "PrimaryText",
    "Headline",
    "CTA",
    "Industry",
    "Goal",
]
PRIMARY_TEXT_MAX = 125
HEADLINE_MAX = 40
ALLOWED_CTAS: List[str] = [cta.value for cta in CallToAction]

_WHITESPACE = re.compile(r"\s+")


def normalize_cta(value: object) -> str:
    """Upper-case a call-to-action and collapse whitespace runs to underscores."""

    return _WHITESPACE.sub("_", str(value or "").strip().upper())


def is_allowed_cta(value: object) -> bool:
    return normalize_cta(value) in ALLOWED_CTAS


def _field(row: Mapping[str, object], name: str) -> str:
    value = row.get(name)
    return "" if value is None else str(value)


def validate_row(row: Mapping[str, object]) -> Optional[ValidationError]:
    """Return the first rule ``row`` breaks, or ``None`` when it is acceptable.

    Checks run in a fixed order and stop at the first failure: required
    fields, primary text length, headline length, then the CTA whitelist.
    The row is never modified.
    """

    for name in REQUIRED_FIELDS:
        if not _field(row, name).strip():
            return ValidationError(f"Missing required field: {name}", rule="required", field=name)

    if len(_field(row, "PrimaryText")) > PRIMARY_TEXT_MAX:
        return ValidationError(
            f"PrimaryText exceeds {PRIMARY_TEXT_MAX} characters",
            rule="primary_text_length",
            field="PrimaryText",
        )

    if len(_field(row, "Headline")) > HEADLINE_MAX:
        return ValidationError(
            f"Headline exceeds {HEADLINE_MAX} characters",
            rule="headline_length",
            field="Headline",
        )

    if not is_allowed_cta(_field(row, "CTA")):
        return ValidationError(
            f"Invalid CTA. Allowed: {', '.join(ALLOWED_CTAS)}",
            rule="cta",
            field="CTA",
        )

    return None


def require_allowed_cta(value: object) -> str:
    """Normalize ``value`` and raise unless it is on the whitelist."""

    normalized = normalize_cta(value)
    if normalized not in ALLOWED_CTAS:
        raise ValidationError(
            f"Invalid CTA. Allowed: {', '.join(ALLOWED_CTAS)}", rule="cta", field="CTA"
        )
    return normalized


__all__ = [
    "ALLOWED_CTAS",
    "HEADLINE_MAX",
    "PRIMARY_TEXT_MAX",
    "REQUIRED_FIELDS",
    "is_allowed_cta",
    "normalize_cta",
    "require_allowed_cta",
    "validate_row",
]
