"""On-disk review file for extracted candidates.

Extraction and admission are separate steps: ``extract-pdf`` writes the
candidates to a JSON review file, the user may inspect or edit it, and
``review`` admits the selected ones. The file is validated with pydantic on
load (strict types, unknown keys rejected); records are validated again by the
ledger on admission, so an edited file cannot bypass the record rules.
"""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ReviewFileError
from .logging_setup import get_logger
from .models import Candidate, ExtractionResult, StatementPeriod
from .validation import validate_date, validate_number

logger = get_logger("quickbudget.review")

SCHEMA_VERSION = 1


class ReviewCandidate(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    description: str
    # Kept as text so amounts survive JSON without float rounding.
    amount: str
    kind: Literal["income", "expense"]
    category: str = ""
    date: str
    selected: bool = True

    @field_validator("amount")
    @classmethod
    def _amount_is_number(cls, v: str) -> str:
        if validate_number(v) is None:
            raise ValueError(f"invalid amount {v!r}")
        return v

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, v: str) -> str:
        normalized = validate_date(v)
        if normalized is None:
            raise ValueError(f"invalid date {v!r} (expected YYYY-MM-DD)")
        return normalized

    @classmethod
    def from_candidate(cls, c: Candidate) -> ReviewCandidate:
        return cls(
            description=c.description,
            amount=f"{c.amount:.2f}",
            kind=c.kind,
            category=c.category,
            date=c.date,
            selected=c.selected,
        )

    def to_candidate(self) -> Candidate:
        amount = validate_number(self.amount)
        if amount is None:
            raise ReviewFileError(f"invalid amount {self.amount!r}")
        return Candidate(
            description=self.description,
            amount=amount,
            kind=self.kind,
            category=self.category,
            date=self.date,
            selected=self.selected,
        )


class ReviewPeriod(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid")

    start: str
    end: str

    def to_period(self) -> StatementPeriod | None:
        start, end = validate_date(self.start), validate_date(self.end)
        if start is None or end is None:
            return None
        return StatementPeriod(date.fromisoformat(start), date.fromisoformat(end))


class ReviewFile(BaseModel):
    """Top-level schema for a candidate review JSON file."""

    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    schema_version: int
    source: str
    generated_at: str
    statement_period: ReviewPeriod | None = None
    pages_processed: int
    pages_truncated: bool = False

    candidates: list[ReviewCandidate]

    @classmethod
    def from_extraction(
        cls, result: ExtractionResult, *, source: str, generated_at: datetime | None = None
    ) -> ReviewFile:
        period = result.period
        return cls(
            schema_version=SCHEMA_VERSION,
            source=source,
            generated_at=(generated_at or datetime.now(UTC)).isoformat(),
            statement_period=(
                ReviewPeriod(start=period.start.isoformat(), end=period.end.isoformat())
                if period is not None
                else None
            ),
            pages_processed=result.pages_processed,
            pages_truncated=result.pages_truncated,
            candidates=[ReviewCandidate.from_candidate(c) for c in result.candidates],
        )

    def to_candidates(self) -> list[Candidate]:
        return [c.to_candidate() for c in self.candidates]


def save_review_file(path: str | os.PathLike[str], review: ReviewFile) -> Path:
    """Write ``review`` to ``path`` atomically and return the path."""

    p = Path(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    try:
        tmp.write_text(
            json.dumps(review.model_dump(mode="json"), ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        os.replace(tmp, p)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise
    logger.info("Wrote %d candidate(s) to %s", len(review.candidates), os.fspath(p))
    return p


def load_review_file(path: str | os.PathLike[str]) -> ReviewFile:
    """Read and validate a review file; raise :class:`ReviewFileError` on any problem."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReviewFileError(f"cannot read review file {os.fspath(p)}: {e}") from e
    try:
        parsed = ReviewFile.model_validate_json(text)
    except PydanticValidationError as e:
        raise ReviewFileError(f"invalid review file {os.fspath(p)}: {e}") from e
    if parsed.schema_version != SCHEMA_VERSION:
        raise ReviewFileError(
            f"unsupported review file schema_version {parsed.schema_version} "
            f"(expected {SCHEMA_VERSION})"
        )
    return parsed


__all__ = [
    "SCHEMA_VERSION",
    "ReviewCandidate",
    "ReviewPeriod",
    "ReviewFile",
    "save_review_file",
    "load_review_file",
]
