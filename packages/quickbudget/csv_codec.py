"""Tabular (CSV) export and import of ledger records.

Format
------
UTF-8 text, CRLF or LF line endings, header ``Date,Type,Description,Category,
Amount`` (matched case-insensitively on import). Every field is quoted with
embedded quotes doubled, per RFC 4180 via the stdlib :mod:`csv` module.

Any field whose text starts with ``=``, ``+``, ``-``, ``@`` or a tab is written
with a leading tab inside the quotes so spreadsheet applications do not
evaluate it as a formula. Import removes a single leading tab from each field.

Import failures
---------------
- Header mismatch or malformed quoting raise
  :class:`~quickbudget.errors.CsvFormatError`; nothing is admitted.
- More than ``max_rows`` data rows raise
  :class:`~quickbudget.errors.RowLimitExceeded`; nothing is admitted.
- Rows with the wrong column count, missing required values, or failing
  validation are skipped and reported on the :class:`DecodeResult`.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator
from datetime import date

from .errors import CsvFormatError, RowLimitExceeded
from .logging_setup import get_logger
from .models import DecodeResult, NormalizedTransaction, Rejected, SkippedRow, Transaction
from .validation import STRICT, validate

logger = get_logger("quickbudget.csv_codec")

HEADER: tuple[str, ...] = ("Date", "Type", "Description", "Category", "Amount")
MAX_IMPORT_ROWS = 10_000

_GUARD = "\t"
_FORMULA_PREFIXES = ("=", "+", "-", "@", "\t")


def guard_field(value: object) -> str:
    """Return ``value`` as text, tab-prefixed when it could run as a formula."""

    if value is None:
        return ""
    s = str(value)
    if s.startswith(_FORMULA_PREFIXES):
        return _GUARD + s
    return s


def unguard_field(value: str) -> str:
    return value[1:] if value.startswith(_GUARD) else value


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def encode_csv(transactions: Iterable[Transaction | NormalizedTransaction]) -> str:
    """Serialize records to quoted CSV text, header first."""

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HEADER)
    for t in transactions:
        writer.writerow(
            [
                guard_field(t.date),
                guard_field(t.kind),
                guard_field(t.description),
                guard_field(t.category),
                guard_field(f"{t.amount:.2f}"),
            ]
        )
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _check_header(row: list[str]) -> None:
    labels = [h.strip().lower() for h in row]
    if labels != [h.lower() for h in HEADER]:
        raise CsvFormatError(
            "Invalid CSV format. Expected headers: " + ", ".join(HEADER) + f"; got: {row!r}"
        )


def _read_rows(text: str) -> Iterator[tuple[int, list[str]]]:
    """Yield ``(line_number, fields)`` for each non-blank CSV record."""

    # Drop a UTF-8 BOM so the first header label still matches.
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        for row in reader:
            if not row or all(not f.strip() for f in row):
                continue
            yield reader.line_num, row
    except csv.Error as e:
        raise CsvFormatError(f"Malformed CSV near line {reader.line_num}: {e}") from e


def decode_csv(
    text: str,
    *,
    max_rows: int = MAX_IMPORT_ROWS,
    today: date | None = None,
) -> DecodeResult:
    """Parse CSV ``text`` into validated records.

    All rows are read (and the row cap enforced) before any result is
    returned, so a capped or malformed file never yields a partial import.
    """

    rows = _read_rows(text)
    first = next(rows, None)
    if first is None:
        logger.info("CSV import: file contains no rows")
        return DecodeResult(records=(), skipped=(), rows_read=0)
    _check_header(first[1])

    records: list[NormalizedTransaction] = []
    skipped: list[SkippedRow] = []
    rows_read = 0

    for line_no, row in rows:
        rows_read += 1
        if rows_read > max_rows:
            logger.warning("CSV import aborted: more than %d data rows", max_rows)
            raise RowLimitExceeded(max_rows)

        if len(row) != len(HEADER):
            skipped.append(SkippedRow(line_no, "incorrect number of columns"))
            continue

        date_raw, kind_raw, desc_raw, cat_raw, amount_raw = (
            unguard_field(f).strip() for f in row
        )
        if not (date_raw and kind_raw and desc_raw and amount_raw):
            skipped.append(SkippedRow(line_no, "missing required fields"))
            continue

        result = validate(
            {
                "date": date_raw,
                "kind": kind_raw.lower(),
                "description": desc_raw,
                "category": cat_raw,
                "amount": amount_raw,
            },
            policy=STRICT,
            today=today,
        )
        if isinstance(result, Rejected):
            skipped.append(SkippedRow(line_no, result.reason))
            continue
        records.append(result)

    for s in skipped:
        logger.warning("Skipping row %d: %s", s.position, s.reason)
    logger.info(
        "CSV import: %d valid row(s), %d skipped of %d", len(records), len(skipped), rows_read
    )
    return DecodeResult(records=tuple(records), skipped=tuple(skipped), rows_read=rows_read)


__all__ = [
    "HEADER",
    "MAX_IMPORT_ROWS",
    "guard_field",
    "unguard_field",
    "encode_csv",
    "decode_csv",
]
