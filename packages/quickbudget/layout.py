"""Rebuild visual text lines from positioned fragments.

Document renderers emit text as fragments with coordinates rather than as
lines. Fragments whose baselines round to the same integer are treated as one
visual line (this absorbs sub-pixel jitter), lines are ordered top to bottom
(descending ``y``, since page coordinates grow upwards), fragments within a
line left to right, and values are joined with single spaces.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from itertools import islice

from .config import Deadline
from .logging_setup import get_logger
from .models import Fragment, LayoutResult

logger = get_logger("quickbudget.layout")

MAX_PAGES = 100


def _round_half_up(y: float) -> int:
    # round() is banker's rounding; baselines at .5 must group consistently.
    return math.floor(y + 0.5)


def page_lines(fragments: Sequence[Fragment]) -> list[str]:
    """Return the non-blank visual lines of a single page, top to bottom."""

    by_line: dict[int, list[Fragment]] = {}
    for frag in fragments:
        by_line.setdefault(_round_half_up(frag.y), []).append(frag)

    lines: list[str] = []
    for y in sorted(by_line, reverse=True):
        # sorted() is stable, so fragments sharing an x keep source order
        ordered = sorted(by_line[y], key=lambda f: f.x)
        line = " ".join(f.text for f in ordered).strip()
        if line:
            lines.append(line)
    return lines


def reconstruct_lines(
    pages: Iterable[Sequence[Fragment]],
    *,
    max_pages: int = MAX_PAGES,
    pages_total: int | None = None,
    deadline: Deadline | None = None,
) -> LayoutResult:
    """Reconstruct lines across ``pages`` in order, honoring the page cap.

    Pages beyond ``max_pages`` are ignored (not an error); the result is
    flagged as truncated. ``pages_total`` may be supplied by callers that know
    the document's page count up front. When a ``deadline`` is given it is
    checked before each page.
    """

    it = iter(pages)
    lines: list[str] = []
    processed = 0
    for page in islice(it, max_pages):
        if deadline is not None:
            deadline.check()
        lines.extend(page_lines(page))
        processed += 1

    truncated = pages_total > max_pages if pages_total is not None else next(it, None) is not None
    if truncated:
        logger.warning(
            "Document has %s pages; processed first %d only",
            pages_total if pages_total is not None else f"more than {max_pages}",
            processed,
        )
    return LayoutResult(
        lines=tuple(lines),
        pages_processed=processed,
        truncated=truncated,
        pages_total=pages_total,
    )


__all__ = ["MAX_PAGES", "page_lines", "reconstruct_lines"]
