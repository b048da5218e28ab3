from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from quickbudget.models import Candidate, NormalizedTransaction, Rejected
from quickbudget.validation import (
    EXTRACTION,
    STRICT,
    validate,
    validate_date,
    validate_many,
    validate_number,
)

TODAY = date(2024, 5, 17)


def _record(**overrides):
    base = {
        "description": "Coffee",
        "amount": "4.50",
        "kind": "expense",
        "category": "Restaurant",
        "date": "2024-03-01",
    }
    base.update(overrides)
    return base


def test_valid_record_is_normalized():
    result = validate(_record(description="  Coffee  ", amount="$1,204.555"), today=TODAY)
    assert result == NormalizedTransaction(
        description="Coffee",
        amount=Decimal("1204.56"),
        kind="expense",
        category="Restaurant",
        date="2024-03-01",
    )


def test_validation_is_idempotent():
    first = validate(_record(amount=-12.345, category="  Gas  "), today=TODAY)
    assert isinstance(first, NormalizedTransaction)
    second = validate(first, today=TODAY)
    assert second == first


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-02-29", "2024-02-29"),
        ("2024-02-30", None),
        ("2023-02-29", None),
        ("2024-13-01", None),
        ("2024-3-01", None),
        ("03/01/2024", None),
        (" 2024-03-01 ", "2024-03-01"),
        (date(2024, 1, 2), "2024-01-02"),
        (20240301, None),
    ],
)
def test_validate_date(raw, expected):
    assert validate_date(raw) == expected


def test_missing_date_defaults_to_today():
    result = validate(_record(date=None), today=TODAY)
    assert isinstance(result, NormalizedTransaction)
    assert result.date == "2024-05-17"

    blank = validate(_record(date="   "), today=TODAY)
    assert isinstance(blank, NormalizedTransaction)
    assert blank.date == "2024-05-17"


def test_invalid_date_is_rejected_not_replaced():
    result = validate(_record(date="2024-02-30"), today=TODAY)
    assert isinstance(result, Rejected)
    assert "date" in result.reason


@pytest.mark.parametrize(
    ("amount", "ok"),
    [
        ("0", False),
        (0, False),
        ("0.004", False),
        ("1000000000.00", False),
        ("999999999.99", True),
        ("-999999999.99", True),
        ("abc", False),
        ("NaN", False),
        ("Infinity", False),
        (None, False),
        (True, False),
        ("0.005", True),
    ],
)
def test_amount_bounds(amount, ok):
    result = validate(_record(amount=amount), today=TODAY)
    assert isinstance(result, NormalizedTransaction) is ok


def test_amount_is_stored_as_absolute_value():
    result = validate(_record(amount="-42.10"), today=TODAY)
    assert isinstance(result, NormalizedTransaction)
    assert result.amount == Decimal("42.10")


def test_description_rules_depend_on_policy():
    long_desc = "x" * 250
    assert isinstance(validate(_record(description=long_desc)), Rejected)

    truncated = validate(_record(description=long_desc), policy=EXTRACTION)
    assert isinstance(truncated, NormalizedTransaction)
    assert len(truncated.description) == 200

    assert validate(_record(description="   ")) == Rejected("description is required")
    assert isinstance(validate(_record(description=12)), Rejected)


def test_kind_rules_depend_on_policy():
    assert isinstance(validate(_record(kind="refund"), policy=STRICT), Rejected)
    repaired = validate(_record(kind="refund"), policy=EXTRACTION)
    assert isinstance(repaired, NormalizedTransaction)
    assert repaired.kind == "expense"


def test_category_is_trimmed_and_truncated():
    result = validate(_record(category="  " + "c" * 150 + "  "))
    assert isinstance(result, NormalizedTransaction)
    assert result.category == "c" * 100

    no_category = validate(_record(category=None))
    assert isinstance(no_category, NormalizedTransaction)
    assert no_category.category == ""


def test_candidates_are_validated_like_mappings():
    c = Candidate(
        description="SHELL OIL",
        amount=Decimal("34.12"),
        kind="expense",
        category="Gas",
        date="2024-04-02",
    )
    result = validate(c, policy=EXTRACTION)
    assert isinstance(result, NormalizedTransaction)
    assert result.to_dict() == c.to_dict()


def test_validate_many_counts_skips_with_positions():
    report = validate_many(
        [_record(), _record(amount="0"), _record(date="2023-02-29"), _record(description="Tea")],
        today=TODAY,
    )
    assert [r.description for r in report.accepted] == ["Coffee", "Tea"]
    assert report.skipped_count == 2
    assert [s.position for s in report.skipped] == [2, 3]


def test_commas_must_group_thousands():
    assert validate_number("1,234.50") == Decimal("1234.50")
    assert validate_number("-$12,345") == Decimal("-12345")
    for raw in ("1,2,3", "12,34.00", "1234,567", ",123", "1,234,5"):
        assert validate_number(raw) is None
    result = validate(_record(amount="1,2,3"), today=TODAY)
    assert isinstance(result, Rejected)


def test_validate_number_keeps_sign_and_bounds():
    assert validate_number("-12.5") == Decimal("-12.5")
    assert validate_number("1,000") == Decimal("1000")
    assert validate_number("1000000000") is None
    assert validate_number("") is None
    assert validate_number("12abc") is None
