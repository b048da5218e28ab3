from __future__ import annotations

from decimal import Decimal

import pytest

from quickbudget.categories import CATEGORY_KEYWORDS, category_labels, infer_category
from quickbudget.duplicates import candidate_key, dedupe_candidates
from quickbudget.models import Candidate


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("SHELL OIL 57442", "Gas"),
        ("Payroll Direct Dep", "Income"),
        ("WHOLEFDS grocery #10", "Groceries"),
        ("STARBUCKS STORE 123", "Restaurant"),
        ("Netflix.com", "Entertainment"),
        ("Uber *Trip", "Transportation"),
        ("Zelle Payment To Bob", "Transfers"),
        ("Monthly Service Fee", "Fees"),
        ("Unrecognizable merchant", ""),
        ("", ""),
    ],
)
def test_infer_category(description, expected):
    assert infer_category(description) == expected


def test_first_label_in_table_order_wins():
    # "gas bill" is a Utilities keyword but "gas" is scanned first under Gas
    assert infer_category("PG&E gas bill") == "Gas"
    assert category_labels()[:2] == ["Groceries", "Gas"]
    assert len(category_labels()) == len(CATEGORY_KEYWORDS)


def _c(description: str, amount: str, day: str = "2024-03-14") -> Candidate:
    return Candidate(
        description=description,
        amount=Decimal(amount),
        kind="income",
        category="",
        date=day,
    )


def test_key_uses_date_cents_and_description_prefix():
    a = _c("Payroll Direct Dep ACME CORP PPD ID 123456789", "1250.00")
    assert candidate_key(a) == ("2024-03-14", 125000, "Payroll Direct Dep ACME CORP P")


def test_dedupe_keeps_first_occurrence_in_order():
    first = _c("Payroll Direct Dep ACME CORP PPD ID 1", "1250.00")
    other = _c("Coffee", "4.50")
    dup = _c("Payroll Direct Dep ACME CORP PPD ID 2", "1250.00")
    different_day = _c("Coffee", "4.50", day="2024-03-15")
    assert dedupe_candidates([first, other, dup, different_day]) == [first, other, different_day]
    assert dedupe_candidates([first, other, dup])[0] is first
