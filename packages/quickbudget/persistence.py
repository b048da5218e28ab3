"""Ledger persistence backed by the shared ``ledger_db`` library.

The engine never trusts what comes back from storage: :meth:`SqlLedgerStore.load`
re-validates every row with the strict policy and drops (and logs) anything
that no longer passes, so a hand-edited database cannot inject malformed
records into totals or exports.

Scope:
- Ordered load/append/replace/delete of ``qb_transactions``.
- Key/value numeric worksheet entries in ``qb_worksheet_values``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from sqlalchemy import delete, select

from ledger_db.client import init_db, session_scope
from ledger_db.models.ledger import LedgerTransaction, WorksheetValue

from .errors import ValidationError
from .logging_setup import get_logger
from .models import Rejected, Transaction
from .validation import STRICT, validate, validate_number

logger = get_logger("quickbudget.persistence")


class LedgerStore(Protocol):
    """Persistence collaborator for the ledger."""

    def load(self) -> list[Transaction]: ...

    def append(self, transactions: Sequence[Transaction]) -> None: ...

    def replace(self, transactions: Sequence[Transaction]) -> None: ...

    def delete(self, txn_id: str) -> bool: ...


def _row_values(txn: Transaction) -> dict[str, object]:
    return {
        "id": txn.id,
        "description": txn.description,
        "amount": txn.amount,
        "kind": txn.kind,
        "category": txn.category,
        "date": date.fromisoformat(txn.date),
    }


def _from_row(row: LedgerTransaction) -> Transaction | Rejected:
    result = validate(
        {
            "description": row.description,
            "amount": row.amount,
            "kind": row.kind,
            "category": row.category,
            "date": row.date,
        },
        policy=STRICT,
    )
    if isinstance(result, Rejected):
        return result
    if not row.id or not isinstance(row.id, str):
        return Rejected("missing id")
    return Transaction.admit(result, txn_id=row.id)


class SqlLedgerStore:
    """:class:`LedgerStore` implementation over SQLAlchemy sessions.

    Tables are created on construction when missing.
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._url = database_url
        init_db(database_url=database_url)

    # -- transactions -----------------------------------------------------

    def load(self) -> list[Transaction]:
        with session_scope(database_url=self._url) as s:
            rows = s.scalars(select(LedgerTransaction).order_by(LedgerTransaction.seq)).all()
            loaded: list[Transaction] = []
            for row in rows:
                txn = _from_row(row)
                if isinstance(txn, Rejected):
                    logger.warning("Ignoring stored transaction %r: %s", row.id, txn.reason)
                    continue
                loaded.append(txn)
        return loaded

    def append(self, transactions: Sequence[Transaction]) -> None:
        if not transactions:
            return
        with session_scope(database_url=self._url) as s:
            s.add_all(LedgerTransaction(**_row_values(t)) for t in transactions)
        logger.info("Stored %d transaction(s)", len(transactions))

    def replace(self, transactions: Sequence[Transaction]) -> None:
        """Swap the whole ledger for ``transactions`` in one database transaction."""

        with session_scope(database_url=self._url) as s:
            s.execute(delete(LedgerTransaction))
            s.add_all(LedgerTransaction(**_row_values(t)) for t in transactions)
        logger.info("Replaced ledger with %d transaction(s)", len(transactions))

    def delete(self, txn_id: str) -> bool:
        with session_scope(database_url=self._url) as s:
            result = s.execute(delete(LedgerTransaction).where(LedgerTransaction.id == txn_id))
            removed = result.rowcount > 0
        if removed:
            logger.info("Deleted transaction %s", txn_id)
        return removed

    def clear(self) -> None:
        with session_scope(database_url=self._url) as s:
            s.execute(delete(LedgerTransaction))

    # -- worksheet ----------------------------------------------------------

    def load_worksheet(self) -> dict[str, Decimal]:
        """Return worksheet values by key; values that fail validation read as ``0``."""

        with session_scope(database_url=self._url) as s:
            rows = s.scalars(select(WorksheetValue).order_by(WorksheetValue.key)).all()
            values: dict[str, Decimal] = {}
            for row in rows:
                number = validate_number(row.value)
                if number is None:
                    logger.warning("Worksheet value for %r is invalid; using 0", row.key)
                    number = Decimal("0")
                values[row.key] = number
        return values

    def set_worksheet_value(self, key: str, value: object) -> Decimal:
        name = key.strip() if isinstance(key, str) else ""
        if not name:
            raise ValidationError("worksheet key is required")
        number = validate_number(value)
        if number is None:
            raise ValidationError(f"invalid worksheet value {value!r}")
        number = number.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        with session_scope(database_url=self._url) as s:
            existing = s.get(WorksheetValue, name)
            if existing is None:
                s.add(WorksheetValue(key=name, value=number))
            else:
                existing.value = number
        return number


__all__ = ["LedgerStore", "SqlLedgerStore"]
