"""Resource ceilings for imports, resolved from the environment.

Environment variables (all optional; invalid or non-positive values fall back
to the defaults):

- ``QUICKBUDGET_MAX_PAGES`` (default 100)
- ``QUICKBUDGET_MAX_IMPORT_ROWS`` (default 10000)
- ``QUICKBUDGET_PDF_TIMEOUT`` seconds (default 30)
- ``QUICKBUDGET_MAX_PDF_BYTES`` (default 10 MiB)
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from dataclasses import dataclass

from .errors import ExtractionTimeout


def _env_number[T: (int, float)](name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True, slots=True)
class ImportLimits:
    max_pages: int = 100
    max_import_rows: int = 10_000
    timeout_s: float = 30.0
    max_document_bytes: int = 10 * 1024 * 1024

    @classmethod
    def from_env(cls) -> ImportLimits:
        defaults = cls()
        return cls(
            max_pages=_env_number("QUICKBUDGET_MAX_PAGES", defaults.max_pages, int),
            max_import_rows=_env_number(
                "QUICKBUDGET_MAX_IMPORT_ROWS", defaults.max_import_rows, int
            ),
            timeout_s=_env_number("QUICKBUDGET_PDF_TIMEOUT", defaults.timeout_s, float),
            max_document_bytes=_env_number(
                "QUICKBUDGET_MAX_PDF_BYTES", defaults.max_document_bytes, int
            ),
        )


class Deadline:
    """Cooperative wall-clock budget checked between units of work.

    Parsing has no suspension points, so the budget is enforced by calling
    :meth:`check` per page and per line rather than by interrupting a thread.
    """

    __slots__ = ("budget_s", "_clock", "_expires_at")

    def __init__(self, budget_s: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.budget_s = budget_s
        self._clock = clock
        self._expires_at = clock() + budget_s

    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self) -> None:
        if self.expired():
            raise ExtractionTimeout(self.budget_s)


__all__ = ["ImportLimits", "Deadline"]
