"""Exception types raised by ``quickbudget``.

Only structural and resource failures are raised. Row-level validation
problems are returned as data (:class:`~quickbudget.models.Rejected` plus
aggregate counts on result objects) so a batch never aborts because of a
single bad row.
"""

from __future__ import annotations


class QuickBudgetError(Exception):
    """Base class for all errors raised by the package."""


class ValidationError(QuickBudgetError, ValueError):
    """A single manually entered record failed schema validation.

    Raised only by entry points that add exactly one record (manual entry),
    where there is no batch to skip-and-count within.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CsvFormatError(QuickBudgetError, ValueError):
    """The tabular file is structurally invalid (header or quoting)."""


class RowLimitExceeded(QuickBudgetError):
    """A tabular import carried more data rows than the configured cap."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Too many transactions in CSV file (more than {limit}). "
            "Please split the file into smaller files."
        )
        self.limit = limit


class ExtractionTimeout(QuickBudgetError, TimeoutError):
    """Document-to-candidates processing exceeded its wall-clock budget."""

    def __init__(self, budget_s: float) -> None:
        super().__init__(f"statement processing exceeded {budget_s:g}s budget")
        self.budget_s = budget_s


class UnsupportedDocument(QuickBudgetError, ValueError):
    """The supplied document is not a PDF."""


class DocumentTooLarge(QuickBudgetError, ValueError):
    """The supplied document exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"document is {size} bytes; maximum size is {limit} bytes")
        self.size = size
        self.limit = limit


class ReviewFileError(QuickBudgetError, ValueError):
    """A candidate review file could not be read or failed its schema."""


__all__ = [
    "QuickBudgetError",
    "ValidationError",
    "CsvFormatError",
    "RowLimitExceeded",
    "ExtractionTimeout",
    "UnsupportedDocument",
    "DocumentTooLarge",
    "ReviewFileError",
]
