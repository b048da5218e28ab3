"""Data models and type aliases for ``quickbudget``.

Records are frozen ``dataclass`` instances with explicit field order. Amounts
are ``Decimal`` values quantized to cents and always non-negative (the sign is
carried by ``kind``); dates are ``YYYY-MM-DD`` strings so records stay
CSV/JSON-friendly without reformatting.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date as _date
from decimal import Decimal
from typing import Any, Literal, NamedTuple

# ---------------------------------------------------------------------------
# Transaction records
# ---------------------------------------------------------------------------

type Kind = Literal["income", "expense"]

KINDS: tuple[str, ...] = ("income", "expense")


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A record that passed schema validation but has not been admitted yet.

    Admission into the ledger assigns the ``id`` (see
    :meth:`Transaction.admit`).
    """

    description: str
    amount: Decimal
    kind: Kind
    category: str
    date: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "amount": self.amount,
            "kind": self.kind,
            "category": self.category,
            "date": self.date,
        }


@dataclass(frozen=True, slots=True)
class Transaction:
    """A ledger record. Immutable once admitted; removable only by ``id``."""

    id: str
    description: str
    amount: Decimal
    kind: Kind
    category: str
    date: str

    @classmethod
    def admit(cls, record: NormalizedTransaction, *, txn_id: str) -> Transaction:
        return cls(
            id=txn_id,
            description=record.description,
            amount=record.amount,
            kind=record.kind,
            category=record.category,
            date=record.date,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "kind": self.kind,
            "category": self.category,
            "date": self.date,
        }


@dataclass(slots=True)
class Candidate:
    """An unconfirmed record produced by statement extraction.

    ``selected`` is the only review-time flag; the remaining fields may be
    edited by the user before admission and are re-validated at that point.
    """

    description: str
    amount: Decimal
    kind: Kind
    category: str
    date: str
    selected: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "amount": self.amount,
            "kind": self.kind,
            "category": self.category,
            "date": self.date,
        }


class Rejected(NamedTuple):
    """Schema validation failure for a single record."""

    reason: str


class SkippedRow(NamedTuple):
    """A row or candidate dropped from a batch, with its 1-based position."""

    position: int
    reason: str


# ---------------------------------------------------------------------------
# Document extraction inputs
# ---------------------------------------------------------------------------


class Fragment(NamedTuple):
    """A positioned piece of text supplied by the extraction collaborator.

    ``y`` is a baseline coordinate in a bottom-up coordinate system (larger
    values are higher on the page).
    """

    x: float
    y: float
    text: str


type Page = Sequence[Fragment]


@dataclass(frozen=True, slots=True)
class StatementPeriod:
    """The date range declared in a statement header."""

    start: _date
    end: _date


# ---------------------------------------------------------------------------
# Aggregate results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Outcome of validating a batch: accepted records plus skip accounting."""

    accepted: tuple[NormalizedTransaction, ...]
    skipped: tuple[SkippedRow, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Outcome of decoding a tabular file.

    ``records`` may be empty while the file was structurally valid; callers
    present that as "no valid rows" rather than as a failure.
    """

    records: tuple[NormalizedTransaction, ...]
    skipped: tuple[SkippedRow, ...] = ()
    rows_read: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """Visual lines reconstructed from positioned fragments."""

    lines: tuple[str, ...]
    pages_processed: int
    truncated: bool = False
    pages_total: int | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Candidates recognized in one document."""

    candidates: list[Candidate]
    period: StatementPeriod | None
    pages_processed: int
    pages_truncated: bool = False
    pages_total: int | None = None

    @property
    def is_empty(self) -> bool:
        return not self.candidates


@dataclass(frozen=True, slots=True)
class AdmissionOutcome:
    """Ledger records created from a batch plus the rows that were skipped."""

    admitted: tuple[Transaction, ...]
    skipped: tuple[SkippedRow, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """Result of a tabular import into the ledger."""

    mode: Literal["append", "replace"]
    admitted: tuple[Transaction, ...]
    skipped: tuple[SkippedRow, ...] = ()
    rows_read: int = 0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True, slots=True)
class Totals:
    income: Decimal = Decimal("0.00")
    expense: Decimal = Decimal("0.00")
    by_category: dict[str, Decimal] = field(default_factory=dict)

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


__all__ = [
    "Kind",
    "KINDS",
    "NormalizedTransaction",
    "Transaction",
    "Candidate",
    "Rejected",
    "SkippedRow",
    "Fragment",
    "Page",
    "StatementPeriod",
    "ValidationReport",
    "DecodeResult",
    "LayoutResult",
    "ExtractionResult",
    "AdmissionOutcome",
    "ImportOutcome",
    "Totals",
]
