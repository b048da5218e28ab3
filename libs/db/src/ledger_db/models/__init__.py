"""SQLAlchemy models for the ledger database."""

from .ledger import Base, LedgerTransaction, WorksheetValue

__all__ = [
    "Base",
    "LedgerTransaction",
    "WorksheetValue",
]
