from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from catalog.errors import ValidationError
from catalog.validators import (
    ALLOWED_CTAS,
    is_allowed_cta,
    normalize_cta,
    require_allowed_cta,
    validate_row,
)


def _row(**overrides: str) -> dict[str, str]:
    row = {
        "TemplateName": "Pizza Deal",
        "PrimaryText": "Get 50% off",
        "Headline": "Hot Pizza",
        "CTA": "Sign Up",
        "Industry": "Food",
        "Goal": "Leads",
    }
    row.update(overrides)
    return row


def test_valid_row_passes() -> None:
    assert validate_row(_row()) is None


@pytest.mark.parametrize("field", ["TemplateName", "PrimaryText", "Headline", "CTA", "Industry", "Goal"])
def test_missing_required_field(field: str) -> None:
    row = _row()
    del row[field]
    error = validate_row(row)
    assert isinstance(error, ValidationError)
    assert error.message == f"Missing required field: {field}"
    assert error.rule == "required"
    assert error.field == field


def test_whitespace_only_counts_as_missing() -> None:
    error = validate_row(_row(Goal="   "))
    assert error is not None and error.message == "Missing required field: Goal"


def test_first_missing_field_is_reported() -> None:
    error = validate_row({"CTA": "SIGN_UP"})
    assert error is not None and error.field == "TemplateName"


def test_primary_text_length_limit() -> None:
    assert validate_row(_row(PrimaryText="x" * 125)) is None
    error = validate_row(_row(PrimaryText="x" * 126))
    assert error is not None
    assert error.message == "PrimaryText exceeds 125 characters"


def test_headline_length_limit() -> None:
    assert validate_row(_row(Headline="h" * 40)) is None
    error = validate_row(_row(Headline="h" * 41))
    assert error is not None
    assert error.message == "Headline exceeds 40 characters"
    assert error.rule == "headline_length"


def test_primary_text_checked_before_headline() -> None:
    error = validate_row(_row(PrimaryText="x" * 200, Headline="h" * 60))
    assert error is not None and error.rule == "primary_text_length"


def test_invalid_cta_lists_allowed_values() -> None:
    error = validate_row(_row(CTA="Buy Stuff"))
    assert error is not None
    assert error.rule == "cta"
    assert error.message == "Invalid CTA. Allowed: " + ", ".join(ALLOWED_CTAS)


def test_validate_row_does_not_modify_input() -> None:
    row = _row(CTA="shop now")
    snapshot = dict(row)
    validate_row(row)
    assert row == snapshot


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("shop now", "SHOP_NOW"),
        ("  Learn   More ", "LEARN_MORE"),
        ("call\tnow", "CALL_NOW"),
        ("GET_QUOTE", "GET_QUOTE"),
        (None, ""),
    ],
)
def test_normalize_cta(raw: object, expected: str) -> None:
    assert normalize_cta(raw) == expected


def test_cta_whitelist() -> None:
    assert len(ALLOWED_CTAS) == 10
    assert is_allowed_cta("book now")
    assert not is_allowed_cta("subscribe")
    assert require_allowed_cta("download") == "DOWNLOAD"
    with pytest.raises(ValidationError):
        require_allowed_cta("subscribe")
