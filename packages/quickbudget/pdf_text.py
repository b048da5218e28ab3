"""PDF adapter producing positioned text fragments (pdfplumber).

Each page becomes a list of :class:`~quickbudget.models.Fragment` built from
``page.extract_words()``. pdfplumber reports ``top``/``bottom`` from the top
edge of the page; fragments use a bottom-up baseline (``page.height -
bottom``) so that larger ``y`` means higher on the page.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import pdfplumber

from .errors import DocumentTooLarge, UnsupportedDocument
from .layout import MAX_PAGES
from .logging_setup import get_logger
from .models import Fragment

logger = get_logger("quickbudget.pdf_text")

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
_PDF_MAGIC = b"%PDF-"


@dataclass(frozen=True, slots=True)
class DocumentPages:
    """Lazily produced pages plus the document's full page count."""

    pages: Iterator[list[Fragment]]
    pages_total: int


def _check_document(path: Path, *, max_bytes: int) -> None:
    try:
        size = path.stat().st_size
    except OSError as e:
        raise UnsupportedDocument(f"cannot read {os.fspath(path)}: {e}") from e
    if size > max_bytes:
        raise DocumentTooLarge(size, max_bytes)
    with path.open("rb") as fh:
        head = fh.read(1024)
    if path.suffix.lower() != ".pdf" and _PDF_MAGIC not in head:
        raise UnsupportedDocument(f"{path.name} is not a PDF document")


def _page_fragments(page: pdfplumber.page.Page) -> list[Fragment]:
    height = float(page.height)
    return [
        Fragment(x=float(w["x0"]), y=height - float(w["bottom"]), text=w["text"])
        for w in page.extract_words()
    ]


@contextmanager
def open_pdf_fragments(
    path: str | os.PathLike[str],
    *,
    max_pages: int = MAX_PAGES,
    max_bytes: int = MAX_DOCUMENT_BYTES,
) -> Iterator[DocumentPages]:
    """Open ``path`` and yield its pages as fragment lists.

    Pages are extracted on demand while the context is open; at most
    ``max_pages`` are ever produced.
    """

    p = Path(path)
    _check_document(p, max_bytes=max_bytes)
    try:
        pdf = pdfplumber.open(p)
    except Exception as e:
        raise UnsupportedDocument(f"could not open {p.name} as PDF: {e}") from e

    with pdf:
        total = len(pdf.pages)
        logger.info("Opened %s: %d page(s)", p.name, total)

        def _pages() -> Iterator[list[Fragment]]:
            for page in pdf.pages[:max_pages]:
                yield _page_fragments(page)

        yield DocumentPages(pages=_pages(), pages_total=total)


def read_pdf_fragments(
    path: str | os.PathLike[str],
    *,
    max_pages: int = MAX_PAGES,
    max_bytes: int = MAX_DOCUMENT_BYTES,
) -> tuple[list[list[Fragment]], int]:
    """Return ``(pages, pages_total)`` with every processed page materialized."""

    with open_pdf_fragments(path, max_pages=max_pages, max_bytes=max_bytes) as doc:
        return list(doc.pages), doc.pages_total


__all__ = [
    "MAX_DOCUMENT_BYTES",
    "DocumentPages",
    "open_pdf_fragments",
    "read_pdf_fragments",
]
