"""Document-to-candidates orchestration.

``pages of fragments -> visual lines -> statement period -> candidates``. A
single :class:`~quickbudget.config.Deadline` covers the whole run; running out
of time raises :class:`~quickbudget.errors.ExtractionTimeout`, which callers
must keep distinct from a successful run that found nothing.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterable
from datetime import date

from .config import Deadline, ImportLimits
from .layout import reconstruct_lines
from .logging_setup import get_logger
from .models import ExtractionResult, Page
from .pdf_text import open_pdf_fragments
from .statement_parser import detect_statement_period, parse_statement_lines

logger = get_logger("quickbudget.pipeline")


def extract_candidates(
    pages: Iterable[Page],
    *,
    limits: ImportLimits | None = None,
    pages_total: int | None = None,
    today: date | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> ExtractionResult:
    """Turn positioned fragments into reviewable candidates.

    Parameters
    ----------
    pages:
        Pages in document order, each a sequence of fragments.
    limits:
        Page cap and time budget; defaults to :class:`ImportLimits` defaults.
    pages_total:
        Full page count when the caller knows it, used for the truncation flag.
    today:
        Reference date for the year of ``MM/DD`` rows when the document has no
        statement period.
    """

    lim = limits or ImportLimits()
    deadline = Deadline(lim.timeout_s, clock=clock)

    layout = reconstruct_lines(
        pages, max_pages=lim.max_pages, pages_total=pages_total, deadline=deadline
    )
    period = detect_statement_period(layout.text)
    candidates = parse_statement_lines(
        layout.lines, period=period, today=today, deadline=deadline
    )
    deadline.check()

    if not candidates:
        logger.info("No transactions recognized in %d page(s)", layout.pages_processed)
    return ExtractionResult(
        candidates=candidates,
        period=period,
        pages_processed=layout.pages_processed,
        pages_truncated=layout.truncated,
        pages_total=layout.pages_total,
    )


def extract_candidates_from_pdf(
    path: str | os.PathLike[str],
    *,
    limits: ImportLimits | None = None,
    today: date | None = None,
) -> ExtractionResult:
    lim = limits or ImportLimits()
    with open_pdf_fragments(
        path, max_pages=lim.max_pages, max_bytes=lim.max_document_bytes
    ) as doc:
        return extract_candidates(
            doc.pages, limits=lim, pages_total=doc.pages_total, today=today
        )


__all__ = ["extract_candidates", "extract_candidates_from_pdf"]
