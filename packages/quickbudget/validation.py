"""Schema validation and normalization shared by every ingestion path.

Manual entry, tabular import and confirmed statement candidates all pass
through :func:`validate` before anything reaches the ledger, so there is one
definition of a well-formed record. The module is stateless and never touches
storage. Rejections are returned as :class:`~quickbudget.models.Rejected`
values; callers decide whether to skip-and-count or to report.

Rules, checked in order (first failure wins):

- ``description``: trimmed, non-empty, at most 200 characters. The strict
  policy rejects longer values; the extraction policy truncates them.
- ``amount``: finite number, stored as its absolute value quantized to cents;
  zero and magnitudes above 999,999,999.99 are rejected.
- ``kind``: ``"income"`` or ``"expense"``. The extraction policy defaults
  anything else to ``"expense"``.
- ``category``: optional, trimmed, truncated to 100 characters.
- ``date``: ``YYYY-MM-DD`` naming a real calendar day; absent means today.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .logging_setup import get_logger
from .models import (
    KINDS,
    Candidate,
    Kind,
    NormalizedTransaction,
    Rejected,
    SkippedRow,
    Transaction,
    ValidationReport,
)

logger = get_logger("quickbudget.validation")

MAX_AMOUNT = Decimal("999999999.99")
MAX_DESCRIPTION_LEN = 200
MAX_CATEGORY_LEN = 100

_CENTS = Decimal("0.01")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_GROUPED_RE = re.compile(r"^\d{1,3}(?:,\d{3})+(?:\.\d+)?$")


@dataclass(frozen=True, slots=True)
class ValidationPolicy:
    """How lenient validation is for a given source.

    Extracted text is noisy and its ``kind`` is itself inferred, so the
    extraction policy repairs what it can; manual and tabular input is
    rejected instead.
    """

    name: str
    truncate_description: bool
    default_kind: Kind | None


STRICT = ValidationPolicy(name="strict", truncate_description=False, default_kind=None)
EXTRACTION = ValidationPolicy(name="extraction", truncate_description=True, default_kind="expense")


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def _to_decimal(raw: Any) -> Decimal | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int):
        d = Decimal(raw)
    elif isinstance(raw, float):
        # repr() keeps the shortest round-tripping form (0.1 -> "0.1")
        d = Decimal(repr(raw))
    elif isinstance(raw, str):
        s = raw.strip()
        negative = False
        if s.startswith(("+", "-")):
            negative = s[0] == "-"
            s = s[1:].lstrip()
        if s.startswith("$"):
            s = s[1:].lstrip()
        if "," in s:
            # Commas only as thousands separators: "1,234.50", never "1,2,3".
            if not _GROUPED_RE.match(s):
                return None
            s = s.replace(",", "")
        if not s:
            return None
        try:
            d = Decimal(s)
        except InvalidOperation:
            return None
        if negative:
            d = -d
    else:
        return None
    if not d.is_finite():
        return None
    return d


def validate_number(value: Any, *, max_value: Decimal = MAX_AMOUNT) -> Decimal | None:
    """Return ``value`` as a finite ``Decimal`` within ``±max_value``, else ``None``.

    This is the numeric primitive shared by transaction amounts and worksheet
    entries. The sign is preserved.
    """

    d = _to_decimal(value)
    if d is None or abs(d) > max_value:
        return None
    return d


def validate_date(value: Any) -> str | None:
    """Return the normalized ``YYYY-MM-DD`` form of ``value`` or ``None``.

    Only real calendar dates pass: ``2024-02-30`` and ``2023-02-29`` are
    rejected rather than rolled over. ``datetime.date`` instances are accepted
    as-is.
    """

    if isinstance(value, date):
        return date(value.year, value.month, value.day).isoformat()
    if not isinstance(value, str):
        return None
    m = _ISO_DATE_RE.match(value.strip())
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3))).isoformat()
    except ValueError:
        return None


def validate_amount(value: Any) -> Decimal | Rejected:
    d = _to_decimal(value)
    if d is None:
        return Rejected(f"invalid amount {value!r}: must be a finite number")
    magnitude = abs(d)
    if magnitude > MAX_AMOUNT:
        return Rejected("amount is too large (max 999,999,999.99)")
    q = magnitude.quantize(_CENTS, rounding=ROUND_HALF_UP)
    if q == 0:
        return Rejected("amount must be non-zero")
    return q


def _truncate(text: str, limit: int) -> str:
    # Re-strip so a cut landing on whitespace stays stable under re-validation.
    return text[:limit].rstrip() if len(text) > limit else text


# ---------------------------------------------------------------------------
# Record validation
# ---------------------------------------------------------------------------

type ValidationInput = (
    Mapping[str, Any] | Candidate | NormalizedTransaction | Transaction
)


def validate(
    candidate: ValidationInput,
    *,
    policy: ValidationPolicy = STRICT,
    today: date | None = None,
) -> NormalizedTransaction | Rejected:
    """Validate and normalize one record.

    ``candidate`` may be a mapping with ``description``, ``amount``, ``kind``,
    ``category`` and ``date`` keys or any of the package's record types.
    Validation is idempotent: feeding a returned record back in yields an
    equal record.
    """

    data: Mapping[str, Any] = candidate if isinstance(candidate, Mapping) else candidate.to_dict()

    raw_desc = data.get("description")
    if raw_desc is None:
        raw_desc = ""
    if not isinstance(raw_desc, str):
        return Rejected("description must be text")
    description = raw_desc.strip()
    if not description:
        return Rejected("description is required")
    if len(description) > MAX_DESCRIPTION_LEN:
        if not policy.truncate_description:
            return Rejected(f"description is too long (max {MAX_DESCRIPTION_LEN} characters)")
        description = _truncate(description, MAX_DESCRIPTION_LEN)

    amount = validate_amount(data.get("amount"))
    if isinstance(amount, Rejected):
        return amount

    raw_kind = data.get("kind")
    if raw_kind in KINDS:
        kind: Kind = raw_kind
    elif policy.default_kind is not None:
        kind = policy.default_kind
    else:
        return Rejected(f"invalid kind {raw_kind!r} (must be 'income' or 'expense')")

    raw_cat = data.get("category")
    category = _truncate(str(raw_cat).strip(), MAX_CATEGORY_LEN) if raw_cat is not None else ""

    raw_date = data.get("date")
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        iso_date = (today or date.today()).isoformat()
    else:
        normalized_date = validate_date(raw_date)
        if normalized_date is None:
            return Rejected(f"invalid date {raw_date!r} (expected YYYY-MM-DD)")
        iso_date = normalized_date

    return NormalizedTransaction(
        description=description,
        amount=amount,
        kind=kind,
        category=category,
        date=iso_date,
    )


def validate_many(
    items: Iterable[ValidationInput],
    *,
    policy: ValidationPolicy = STRICT,
    today: date | None = None,
) -> ValidationReport:
    """Validate a batch, skipping and counting rejected items."""

    accepted: list[NormalizedTransaction] = []
    skipped: list[SkippedRow] = []
    for pos, item in enumerate(items, start=1):
        result = validate(item, policy=policy, today=today)
        if isinstance(result, Rejected):
            logger.warning("Skipping item %d: %s", pos, result.reason)
            skipped.append(SkippedRow(pos, result.reason))
            continue
        accepted.append(result)
    return ValidationReport(accepted=tuple(accepted), skipped=tuple(skipped))


__all__ = [
    "MAX_AMOUNT",
    "MAX_DESCRIPTION_LEN",
    "MAX_CATEGORY_LEN",
    "ValidationPolicy",
    "STRICT",
    "EXTRACTION",
    "validate_number",
    "validate_date",
    "validate_amount",
    "validate",
    "validate_many",
]
