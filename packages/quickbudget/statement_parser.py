"""Recognize transaction rows in text recovered from a bank statement.

Statements vary widely in layout, so recognition runs two independent passes
over the same line sequence and merges their output:

- :func:`parse_strict` is a small state machine. Section headings decide the
  transaction kind (deposits vs. withdrawals/fees), a column header or table
  rule opens the table, and only rows inside an open table of a known section
  are read. The line right after any of those markers is skipped.
- :func:`parse_fallback` ignores sections entirely and takes every line that
  starts with a ``MM/DD`` token and carries an amount. The kind is guessed
  from income phrases in the line.

Rows carry only ``MM/DD``; the year comes from the statement period phrase
("March 1, 2024 through March 31, 2024") detected once per document, or the
current year when the document has none.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from .categories import infer_category
from .config import Deadline
from .duplicates import CandidateKey, candidate_key, dedupe_candidates
from .logging_setup import get_logger
from .models import Candidate, Kind, StatementPeriod

logger = get_logger("quickbudget.statement_parser")

MAX_CANDIDATE_AMOUNT = Decimal("1000000")
MAX_DESCRIPTION_LEN = 100
# Descriptions shorter than this borrow the following line (wrapped text).
MIN_DESCRIPTION_LEN = 3

_MONTHS: dict[str, int] = {
    name.lower(): idx for idx, name in enumerate(calendar.month_name) if name
}

_PERIOD_RE = re.compile(
    r"\b([A-Za-z]+)\s+(\d{1,2}),\s+(\d{4})\s+through\s+([A-Za-z]+)\s+(\d{1,2}),\s+(\d{4})",
    re.IGNORECASE,
)

_DATE_TOKEN_RE = re.compile(r"^(\d{1,2})/(\d{1,2})(?![\d/])")
_AMOUNT = r"-?\$?((?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})"
_TRAILING_AMOUNT_RE = re.compile(r"(?<!\S)" + _AMOUNT + r"\s*$")
_ANY_AMOUNT_RE = re.compile(r"(?<!\S)" + _AMOUNT + r"(?![\d.])")

_INCOME_HEADING_RE = re.compile(r"DEPOSITS\s+AND\s+ADDITIONS", re.IGNORECASE)
_EXPENSE_HEADING_RES = (
    re.compile(r"ATM\s*&\s*DEBIT\s+CARD\s*WITHDRAWALS", re.IGNORECASE),
    re.compile(r"ELECTRONIC\s+WITHDRAWALS", re.IGNORECASE),
    re.compile(r"\bFEES\b", re.IGNORECASE),
)
_TABLE_HEADER_RES = (
    re.compile(r"^\s*DATE\s*\|\s*DESCRIPTION", re.IGNORECASE),
    re.compile(r"^\s*DATE\s+DESCRIPTION", re.IGNORECASE),
    re.compile(r"^\s*[-=_]{3,}"),
)
_TOTALS_RE = re.compile(r"^\s*Total\b", re.IGNORECASE)
_BALANCE_RE = re.compile(r"\b(?:Beginning|Ending|Opening|Closing)\s+Balance\b", re.IGNORECASE)
_RULE_CHARS_RE = re.compile(r"\|")
_WS_RE = re.compile(r"\s+")

_INCOME_PHRASES = ("deposit", "payroll", "zelle payment from")


# ---------------------------------------------------------------------------
# Statement period and date resolution
# ---------------------------------------------------------------------------


def detect_statement_period(text: str) -> StatementPeriod | None:
    """Return the first well-formed "<Month> <d>, <yyyy> through ..." range."""

    for m in _PERIOD_RE.finditer(text):
        start_month = _MONTHS.get(m.group(1).lower())
        end_month = _MONTHS.get(m.group(4).lower())
        if start_month is None or end_month is None:
            continue
        try:
            start = date(int(m.group(3)), start_month, int(m.group(2)))
            end = date(int(m.group(6)), end_month, int(m.group(5)))
        except ValueError:
            continue
        return StatementPeriod(start=start, end=end)
    return None


def resolve_month_day(
    month: int,
    day: int,
    period: StatementPeriod | None,
    *,
    today: date | None = None,
) -> str | None:
    """Resolve ``month``/``day`` to an ISO date, or ``None`` if no such day exists.

    A period spanning New Year (Dec 15 .. Jan 14) places months before the
    start month in the end year.
    """

    if period is None:
        year = (today or date.today()).year
    else:
        year = period.start.year
        if period.end.year != year and month < period.start.month:
            year = period.end.year
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


class LineKind(Enum):
    INCOME_HEADING = "income_heading"
    EXPENSE_HEADING = "expense_heading"
    TABLE_HEADER = "table_header"
    SUMMARY = "summary"
    DATED = "dated"
    OTHER = "other"


def starts_with_date(line: str) -> bool:
    return _DATE_TOKEN_RE.match(line) is not None


def is_summary_line(line: str) -> bool:
    """Totals and opening/closing balance lines never describe a transaction."""

    if _BALANCE_RE.search(line):
        return True
    # "03/14 TOTAL WINE & MORE" is a purchase, not a total.
    return not starts_with_date(line) and _TOTALS_RE.match(line) is not None


def classify_line(line: str) -> LineKind:
    dated = starts_with_date(line)
    if not dated and not _TOTALS_RE.match(line):
        if _INCOME_HEADING_RE.search(line):
            return LineKind.INCOME_HEADING
        if any(p.search(line) for p in _EXPENSE_HEADING_RES):
            return LineKind.EXPENSE_HEADING
        if any(p.match(line) for p in _TABLE_HEADER_RES):
            return LineKind.TABLE_HEADER
    if is_summary_line(line):
        return LineKind.SUMMARY
    return LineKind.DATED if dated else LineKind.OTHER


def _clean_description(text: str) -> str:
    return _WS_RE.sub(" ", _RULE_CHARS_RE.sub(" ", text)).strip()


def _can_continue_description(next_line: str | None) -> bool:
    return (
        next_line is not None
        and classify_line(next_line) is LineKind.OTHER
        and _TRAILING_AMOUNT_RE.search(next_line) is None
    )


def _looks_like_income(line: str) -> bool:
    low = line.lower()
    if any(p in low for p in _INCOME_PHRASES):
        return True
    return "transfer" in low and "from" in low


@dataclass(frozen=True, slots=True)
class RowMatch:
    candidate: Candidate
    consumed_next: bool = False


def extract_row(
    line: str,
    next_line: str | None,
    *,
    kind: Kind,
    period: StatementPeriod | None,
    amount_re: re.Pattern[str] = _TRAILING_AMOUNT_RE,
    today: date | None = None,
) -> RowMatch | None:
    """Read a ``MM/DD <description> <amount>`` row, or return ``None``.

    ``amount_re`` selects which amount on the line counts: the trailing one
    (strict pass) or the first one (fallback pass, which tolerates a running
    balance column after the amount).
    """

    dm = _DATE_TOKEN_RE.match(line)
    if dm is None:
        return None
    am = amount_re.search(line, dm.end())
    if am is None:
        return None

    iso_date = resolve_month_day(int(dm.group(1)), int(dm.group(2)), period, today=today)
    if iso_date is None:
        return None
    amount = Decimal(am.group(1).replace(",", ""))
    if not (0 < amount < MAX_CANDIDATE_AMOUNT):
        return None

    description = _clean_description(line[dm.end() : am.start()])
    consumed = False
    if len(description) < MIN_DESCRIPTION_LEN and _can_continue_description(next_line):
        description = _clean_description(f"{description} {next_line}")
        consumed = True
    description = description[:MAX_DESCRIPTION_LEN].rstrip()
    if not description:
        return None

    return RowMatch(
        Candidate(description=description, amount=amount, kind=kind, category="", date=iso_date),
        consumed_next=consumed,
    )


# ---------------------------------------------------------------------------
# Strict pass: section/table state machine
# ---------------------------------------------------------------------------


class Section(Enum):
    NONE = "none"
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class ParserState:
    section: Section = Section.NONE
    table_open: bool = False
    skip_header: bool = False


@dataclass(frozen=True, slots=True)
class StepResult:
    state: ParserState
    candidate: Candidate | None = None
    consumed_next: bool = False


def step(
    state: ParserState,
    line: str,
    next_line: str | None = None,
    *,
    period: StatementPeriod | None = None,
    today: date | None = None,
) -> StepResult:
    """Advance the state machine by one line."""

    kind = classify_line(line)
    if kind is LineKind.INCOME_HEADING:
        return StepResult(ParserState(Section.INCOME, table_open=False, skip_header=True))
    if kind is LineKind.EXPENSE_HEADING:
        return StepResult(ParserState(Section.EXPENSE, table_open=False, skip_header=True))
    if kind is LineKind.TABLE_HEADER:
        return StepResult(replace(state, table_open=True, skip_header=True))

    cleared = replace(state, skip_header=False)
    if kind is LineKind.SUMMARY:
        return StepResult(cleared)
    if state.section is Section.NONE or not state.table_open or state.skip_header:
        return StepResult(cleared)

    row = extract_row(
        line,
        next_line,
        kind="income" if state.section is Section.INCOME else "expense",
        period=period,
        today=today,
    )
    if row is None:
        return StepResult(cleared)
    return StepResult(cleared, row.candidate, row.consumed_next)


def parse_strict(
    lines: Sequence[str],
    period: StatementPeriod | None,
    *,
    today: date | None = None,
    deadline: Deadline | None = None,
) -> list[Candidate]:
    state = ParserState()
    found: list[Candidate] = []
    i = 0
    while i < len(lines):
        if deadline is not None:
            deadline.check()
        next_line = lines[i + 1] if i + 1 < len(lines) else None
        result = step(state, lines[i], next_line, period=period, today=today)
        state = result.state
        if result.candidate is not None:
            logger.debug("strict: %s -> %s", lines[i], result.candidate)
            found.append(result.candidate)
        i += 2 if result.consumed_next else 1
    return found


# ---------------------------------------------------------------------------
# Fallback pass: section-independent scan
# ---------------------------------------------------------------------------


def parse_fallback(
    lines: Sequence[str],
    period: StatementPeriod | None,
    *,
    known: Iterable[Candidate] = (),
    today: date | None = None,
    deadline: Deadline | None = None,
) -> list[Candidate]:
    """Scan every dated line for an amount, regardless of section state.

    Rows whose dedup key is already in ``known`` (or was found earlier in this
    pass) are not added again.
    """

    seen: set[CandidateKey] = {candidate_key(c) for c in known}
    found: list[Candidate] = []
    for i, line in enumerate(lines):
        if deadline is not None:
            deadline.check()
        if not starts_with_date(line) or is_summary_line(line):
            continue
        next_line = lines[i + 1] if i + 1 < len(lines) else None
        row = extract_row(
            line,
            next_line,
            kind="income" if _looks_like_income(line) else "expense",
            period=period,
            amount_re=_ANY_AMOUNT_RE,
            today=today,
        )
        if row is None:
            continue
        key = candidate_key(row.candidate)
        if key in seen:
            continue
        seen.add(key)
        logger.debug("fallback: %s -> %s", line, row.candidate)
        found.append(row.candidate)
    return found


# ---------------------------------------------------------------------------
# Document entry point
# ---------------------------------------------------------------------------


def split_lines(text: str) -> list[str]:
    return [s for s in (raw.strip() for raw in text.split("\n")) if s]


def parse_statement_lines(
    lines: Sequence[str],
    *,
    period: StatementPeriod | None = None,
    today: date | None = None,
    deadline: Deadline | None = None,
) -> list[Candidate]:
    """Run both passes, infer categories and drop duplicates."""

    cleaned = [s for s in (raw.strip() for raw in lines) if s]
    strict = parse_strict(cleaned, period, today=today, deadline=deadline)
    fallback = parse_fallback(cleaned, period, known=strict, today=today, deadline=deadline)
    merged = dedupe_candidates(
        replace(c, category=infer_category(c.description)) for c in (*strict, *fallback)
    )
    logger.info(
        "Statement parse: %d strict, %d fallback, %d after dedupe",
        len(strict),
        len(fallback),
        len(merged),
    )
    return merged


def parse_statement_text(
    text: str,
    *,
    today: date | None = None,
    deadline: Deadline | None = None,
) -> list[Candidate]:
    """Detect the statement period in ``text`` and parse its lines."""

    period = detect_statement_period(text)
    if period is None:
        logger.info("No statement period found; assuming the current year")
    return parse_statement_lines(split_lines(text), period=period, today=today, deadline=deadline)


__all__ = [
    "MAX_CANDIDATE_AMOUNT",
    "LineKind",
    "Section",
    "ParserState",
    "StepResult",
    "RowMatch",
    "detect_statement_period",
    "resolve_month_day",
    "classify_line",
    "is_summary_line",
    "starts_with_date",
    "extract_row",
    "step",
    "parse_strict",
    "parse_fallback",
    "split_lines",
    "parse_statement_lines",
    "parse_statement_text",
]
