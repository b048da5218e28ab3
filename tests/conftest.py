"""Pytest configuration for test isolation.

Every test gets its own SQLite ledger file: ``DATABASE_URL`` is pointed at the
test's temporary directory and cached engines are disposed afterwards, so no
test can observe rows written by another. The workspace source directories
are put on ``sys.path`` so the suite also runs from a plain checkout.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_SRC_DIRS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _SRC_DIRS if str(p) not in sys.path]

from ledger_db.client import dispose_engines  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Force a per-test SQLite database and clear ambient limit overrides."""

    url = f"sqlite+pysqlite:///{os.fspath(tmp_path / 'ledger.db')}"
    monkeypatch.setenv("DATABASE_URL", url)
    for name in (
        "QUICKBUDGET_MAX_PAGES",
        "QUICKBUDGET_MAX_IMPORT_ROWS",
        "QUICKBUDGET_PDF_TIMEOUT",
        "QUICKBUDGET_MAX_PDF_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
    yield url
    dispose_engines()


@pytest.fixture()
def database_url(_isolate_database: str) -> str:
    return _isolate_database
