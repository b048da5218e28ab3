"""Public interface for the ``quickbudget`` package.

This module exposes the ledger service, the extraction pipeline and the public
models/types as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .api import Ledger
from .categories import infer_category
from .config import ImportLimits
from .csv_codec import decode_csv, encode_csv
from .duplicates import dedupe_candidates
from .errors import (
    CsvFormatError,
    DocumentTooLarge,
    ExtractionTimeout,
    QuickBudgetError,
    ReviewFileError,
    RowLimitExceeded,
    UnsupportedDocument,
    ValidationError,
)
from .layout import reconstruct_lines
from .models import (
    AdmissionOutcome,
    Candidate,
    ExtractionResult,
    Fragment,
    ImportOutcome,
    NormalizedTransaction,
    Rejected,
    StatementPeriod,
    Totals,
    Transaction,
)
from .pipeline import extract_candidates, extract_candidates_from_pdf
from .statement_parser import parse_statement_text
from .validation import validate, validate_date, validate_number

__all__ = [
    # API
    "Ledger",
    "ImportLimits",
    "validate",
    "validate_date",
    "validate_number",
    "encode_csv",
    "decode_csv",
    "reconstruct_lines",
    "parse_statement_text",
    "infer_category",
    "dedupe_candidates",
    "extract_candidates",
    "extract_candidates_from_pdf",
    # Models
    "Transaction",
    "NormalizedTransaction",
    "Candidate",
    "Rejected",
    "Fragment",
    "StatementPeriod",
    "ExtractionResult",
    "AdmissionOutcome",
    "ImportOutcome",
    "Totals",
    # Errors
    "QuickBudgetError",
    "ValidationError",
    "CsvFormatError",
    "RowLimitExceeded",
    "ExtractionTimeout",
    "UnsupportedDocument",
    "DocumentTooLarge",
    "ReviewFileError",
]
