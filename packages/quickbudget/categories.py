"""Keyword-based category inference for extracted descriptions.

``CATEGORY_KEYWORDS`` is scanned in declaration order and the first label with
a keyword contained in the lower-cased description wins. Keywords overlap
across labels (``"gas"`` vs ``"gas bill"``, ``"atm"`` vs ``"atm fee"``), so the
order of the table is part of its behavior: bump ``CATEGORY_TABLE_VERSION``
whenever labels, keywords or their order change.
"""

from __future__ import annotations

from collections.abc import Sequence

CATEGORY_TABLE_VERSION = 1

CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Groceries",
        ("grocery", "supermarket", "walmart", "target", "kroger", "safeway", "wm supercenter"),
    ),
    ("Gas", ("gas", "fuel", "shell", "chevron", "bp", "exxon", "mobil")),
    (
        "Restaurant",
        ("restaurant", "cafe", "starbucks", "mcdonald", "subway", "pizza", "dining"),
    ),
    (
        "Utilities",
        ("electric", "water", "gas bill", "utility", "power", "internet", "phone", "cell phone"),
    ),
    ("Rent", ("rent", "housing", "apartment", "bilt", "biltrent")),
    ("Shopping", ("amazon", "store", "shop", "retail", "purchase")),
    ("Entertainment", ("movie", "netflix", "spotify", "entertainment", "game")),
    (
        "Transportation",
        ("uber", "lyft", "taxi", "bus", "train", "metro", "atm withdrawal", "atm"),
    ),
    (
        "Healthcare",
        ("pharmacy", "medical", "doctor", "hospital", "health", "insurance", "lemonade"),
    ),
    (
        "Income",
        (
            "salary",
            "paycheck",
            "deposit",
            "payment received",
            "payroll",
            "zelle payment from",
            "apple cash",
        ),
    ),
    ("Transfers", ("transfer", "schwab", "goldman sachs", "zelle payment to")),
    ("Credit cards", ("chase card", "american express", "applecard", "payment to", "ach pmt")),
    ("Debt", ("student loan", "studntloan", "advs ed serv", "credit repayment", "paypal")),
    ("Fees", ("fee", "atm fee")),
)


def infer_category(description: str | None) -> str:
    """Return the first matching category label, or ``""`` when none match."""

    if not description:
        return ""
    text = description.lower()
    for label, keywords in CATEGORY_KEYWORDS:
        if any(kw in text for kw in keywords):
            return label
    return ""


def category_labels() -> Sequence[str]:
    return [label for label, _ in CATEGORY_KEYWORDS]


__all__ = [
    "CATEGORY_TABLE_VERSION",
    "CATEGORY_KEYWORDS",
    "infer_category",
    "category_labels",
]
