from __future__ import annotations

import itertools
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

import quickbudget.pipeline as pipeline
from quickbudget.config import ImportLimits
from quickbudget.errors import DocumentTooLarge, ExtractionTimeout, UnsupportedDocument
from quickbudget.pdf_text import DocumentPages, read_pdf_fragments
from quickbudget.pipeline import extract_candidates, extract_candidates_from_pdf

from tests.helpers.statements import PERIOD_LINE, pages_for

STATEMENT_PAGES = pages_for(
    [
        "CHECKING SUMMARY",
        PERIOD_LINE,
        "Beginning Balance $1,000.00",
    ],
    [
        "DEPOSITS AND ADDITIONS",
        "DATE DESCRIPTION AMOUNT",
        "03/14 Payroll Direct Dep 1,250.00",
        "Total Deposits and Additions $1,250.00",
        "ATM & DEBIT CARD WITHDRAWALS",
        "DATE DESCRIPTION AMOUNT",
        "03/15 Card Purchase Safeway 54.20",
        "03/16 Card Purchase Shell Oil 31.00",
        "Total ATM & Debit Card Withdrawals $85.20",
    ],
)


def test_extracts_candidates_from_fragments():
    result = extract_candidates(STATEMENT_PAGES)
    assert result.period is not None
    assert result.period.start == date(2024, 3, 1)
    assert result.pages_processed == 2
    assert not result.pages_truncated
    summary = [(c.date, c.kind, c.amount, c.category) for c in result.candidates]
    assert summary == [
        ("2024-03-16", "expense", Decimal("31.00"), "Gas"),
        ("2024-03-14", "income", Decimal("1250.00"), "Income"),
        ("2024-03-15", "expense", Decimal("54.20"), "Groceries"),
    ]
    assert all(c.selected for c in result.candidates)


def test_empty_document_is_a_successful_empty_result():
    result = extract_candidates(pages_for(["Thank you for banking with us"]))
    assert result.is_empty
    assert result.pages_processed == 1


def test_page_cap_reports_truncation():
    pages = pages_for(["04/01 SHELL OIL 10.00"], ["04/02 SHELL OIL 20.00"])
    result = extract_candidates(
        pages, limits=ImportLimits(max_pages=1), today=date(2024, 6, 1)
    )
    assert result.pages_truncated
    assert [c.amount for c in result.candidates] == [Decimal("10.00")]


def test_timeout_is_distinct_from_empty_result():
    ticks = itertools.count(0, 10)
    with pytest.raises(ExtractionTimeout):
        extract_candidates(
            STATEMENT_PAGES, limits=ImportLimits(timeout_s=15), clock=lambda: next(ticks)
        )


def test_pdf_entry_point_uses_page_count(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    seen: dict[str, object] = {}

    @contextmanager
    def fake_open(path, *, max_pages, max_bytes):
        seen.update(path=path, max_pages=max_pages, max_bytes=max_bytes)
        yield DocumentPages(pages=iter(STATEMENT_PAGES[:max_pages]), pages_total=5)

    monkeypatch.setattr(pipeline, "open_pdf_fragments", fake_open)
    result = extract_candidates_from_pdf(
        tmp_path / "statement.pdf", limits=ImportLimits(max_pages=2, max_document_bytes=1234)
    )
    assert seen["max_pages"] == 2
    assert seen["max_bytes"] == 1234
    assert result.pages_total == 5
    assert result.pages_truncated
    assert len(result.candidates) == 3


def test_non_pdf_documents_are_refused(tmp_path: Path):
    notes = tmp_path / "notes.txt"
    notes.write_text("03/14 Payroll 1,250.00\n", encoding="utf-8")
    with pytest.raises(UnsupportedDocument):
        read_pdf_fragments(notes)


def test_oversized_documents_are_refused(tmp_path: Path):
    big = tmp_path / "statement.pdf"
    big.write_bytes(b"%PDF-1.4\n" + b"0" * 2048)
    with pytest.raises(DocumentTooLarge):
        read_pdf_fragments(big, max_bytes=1024)
