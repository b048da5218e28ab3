"""Public orchestration surface for the ``quickbudget`` package.

:class:`Ledger` is the single place where records enter or leave the ledger.
Every path (manual entry, tabular import, confirmed statement candidates)
runs through :mod:`quickbudget.validation` first; nothing reaches the store
without passing it.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal
from typing import Any, Literal

from .config import ImportLimits
from .csv_codec import decode_csv, encode_csv
from .errors import ValidationError
from .logging_setup import get_logger
from .models import (
    AdmissionOutcome,
    Candidate,
    ImportOutcome,
    Kind,
    Rejected,
    SkippedRow,
    Totals,
    Transaction,
)
from .persistence import LedgerStore, SqlLedgerStore
from .validation import EXTRACTION, STRICT, validate

logger = get_logger("quickbudget.api")

UNCATEGORIZED = "Uncategorized"


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class Ledger:
    """Validated access to the transaction ledger.

    Parameters
    ----------
    store:
        Persistence collaborator. Defaults to :class:`SqlLedgerStore` on
        ``DATABASE_URL``.
    id_factory:
        Produces a fresh, unique id per admitted record.
    limits:
        Resource ceilings (tabular row cap).
    today:
        Fixed "today" for records without a date; ``None`` means the real date.
    """

    def __init__(
        self,
        store: LedgerStore | None = None,
        *,
        id_factory: Callable[[], str] = new_transaction_id,
        limits: ImportLimits | None = None,
        today: date | None = None,
    ) -> None:
        self.store: LedgerStore = store if store is not None else SqlLedgerStore()
        self._new_id = id_factory
        self.limits = limits or ImportLimits()
        self._today = today

    # -- entry paths --------------------------------------------------------

    def add_manual(
        self,
        description: Any,
        amount: Any,
        kind: Any,
        category: Any = "",
        date: Any = None,
    ) -> Transaction:
        """Validate and store one record; raise :class:`ValidationError` on rejection."""

        result = validate(
            {
                "description": description,
                "amount": amount,
                "kind": kind,
                "category": category,
                "date": date,
            },
            policy=STRICT,
            today=self._today,
        )
        if isinstance(result, Rejected):
            raise ValidationError(result.reason)
        txn = Transaction.admit(result, txn_id=self._new_id())
        self.store.append([txn])
        return txn

    def import_csv(
        self, text: str, *, mode: Literal["append", "replace"] = "append"
    ) -> ImportOutcome:
        """Import tabular ``text`` by appending to or replacing the ledger.

        Structural failures and the row cap raise before the store is touched.
        A file with no valid rows leaves the ledger unchanged in either mode.
        """

        if mode not in ("append", "replace"):
            raise ValueError(f"unknown import mode {mode!r}")
        decoded = decode_csv(text, max_rows=self.limits.max_import_rows, today=self._today)
        admitted = tuple(Transaction.admit(r, txn_id=self._new_id()) for r in decoded.records)

        if not admitted:
            logger.warning("CSV import found no valid rows; ledger unchanged")
        elif mode == "replace":
            self.store.replace(list(admitted))
        else:
            self.store.append(list(admitted))
        return ImportOutcome(
            mode=mode, admitted=admitted, skipped=decoded.skipped, rows_read=decoded.rows_read
        )

    def admit_candidates(self, candidates: Iterable[Candidate]) -> AdmissionOutcome:
        """Store the selected candidates after re-validating them.

        Unselected candidates are ignored; selected ones that fail validation
        are skipped and reported with their 1-based position in ``candidates``.
        """

        admitted: list[Transaction] = []
        skipped: list[SkippedRow] = []
        for pos, c in enumerate(candidates, start=1):
            if not c.selected:
                continue
            result = validate(c, policy=EXTRACTION, today=self._today)
            if isinstance(result, Rejected):
                logger.warning("Skipping candidate %d: %s", pos, result.reason)
                skipped.append(SkippedRow(pos, result.reason))
                continue
            admitted.append(Transaction.admit(result, txn_id=self._new_id()))

        self.store.append(admitted)
        logger.info("Admitted %d candidate(s), skipped %d", len(admitted), len(skipped))
        return AdmissionOutcome(admitted=tuple(admitted), skipped=tuple(skipped))

    # -- queries and removal -------------------------------------------------

    def transactions(
        self, *, kind: Kind | None = None, search: str | None = None
    ) -> list[Transaction]:
        rows = self.store.load()
        if kind is not None:
            rows = [t for t in rows if t.kind == kind]
        if search:
            needle = search.strip().lower()
            rows = [
                t for t in rows if needle in t.description.lower() or needle in t.category.lower()
            ]
        return rows

    def delete(self, txn_id: str) -> bool:
        return self.store.delete(txn_id)

    def export_csv(self) -> str:
        return encode_csv(self.store.load())

    def totals(self, transactions: Iterable[Transaction] | None = None) -> Totals:
        """Sum income and expenses; ``by_category`` holds expense totals."""

        rows = self.store.load() if transactions is None else transactions
        income = Decimal("0.00")
        expense = Decimal("0.00")
        by_category: dict[str, Decimal] = {}
        for t in rows:
            if t.kind == "income":
                income += t.amount
                continue
            expense += t.amount
            label = t.category or UNCATEGORIZED
            by_category[label] = by_category.get(label, Decimal("0.00")) + t.amount
        return Totals(income=income, expense=expense, by_category=by_category)


__all__ = ["Ledger", "new_transaction_id", "UNCATEGORIZED"]
