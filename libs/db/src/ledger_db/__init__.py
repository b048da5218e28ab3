"""ledger_db: storage library for the quickbudget ledger (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata`` for table creation
- ORM models in ``ledger_db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``ledger_db.client``
"""

from __future__ import annotations

from .client import database_url, dispose_engines, get_engine, get_session, init_db, session_scope
from .models.ledger import Base, LedgerTransaction, WorksheetValue

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "LedgerTransaction",
    "WorksheetValue",
    "database_url",
    "get_engine",
    "get_session",
    "session_scope",
    "init_db",
    "dispose_engines",
]
