# ruff: noqa: E501
from __future__ import annotations

import json
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from quickbudget.errors import ReviewFileError
from quickbudget.models import Candidate, ExtractionResult, StatementPeriod
from quickbudget.review import ReviewCandidate, ReviewFile, load_review_file, save_review_file


def _result() -> ExtractionResult:
    return ExtractionResult(
        candidates=[
            Candidate("Payroll Direct Dep", Decimal("1250.00"), "income", "Income", "2024-03-14"),
            Candidate("SHELL OIL", Decimal("34.1"), "expense", "Gas", "2024-03-20"),
        ],
        period=StatementPeriod(date(2024, 3, 1), date(2024, 3, 31)),
        pages_processed=2,
    )


def test_save_and_load_preserves_candidates(tmp_path: Path):
    path = tmp_path / "review.json"
    review = ReviewFile.from_extraction(
        _result(), source="march.pdf", generated_at=datetime(2024, 4, 1, tzinfo=UTC)
    )
    save_review_file(path, review)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["candidates"][1]["amount"] == "34.10"
    assert raw["statement_period"] == {"start": "2024-03-01", "end": "2024-03-31"}
    assert not (tmp_path / "review.json.tmp").exists()

    loaded = load_review_file(path)
    assert loaded == review
    assert loaded.to_candidates() == _result().candidates
    assert loaded.statement_period is not None
    assert loaded.statement_period.to_period() == _result().period


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _payload(**overrides) -> dict:
    base = {
        "schema_version": 1,
        "source": "march.pdf",
        "generated_at": "2024-04-01T00:00:00+00:00",
        "pages_processed": 1,
        "candidates": [
            {
                "description": "Coffee",
                "amount": "4.50",
                "kind": "expense",
                "category": "",
                "date": "2024-03-01",
                "selected": False,
            }
        ],
    }
    base.update(overrides)
    return base


def test_edited_selection_is_honored(tmp_path: Path):
    loaded = load_review_file(_write(tmp_path / "r.json", _payload()))
    assert loaded.to_candidates()[0].selected is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"schema_version": 2},
        {"unexpected": True},
        {"pages_processed": "1"},
        {"candidates": [{"description": "x", "amount": "abc", "kind": "expense", "date": "2024-03-01"}]},
        {"candidates": [{"description": "x", "amount": "1", "kind": "refund", "date": "2024-03-01"}]},
        {"candidates": [{"description": "x", "amount": "1", "kind": "expense", "date": "2024-02-30"}]},
        {"candidates": [{"description": "x", "amount": 1.5, "kind": "expense", "date": "2024-03-01"}]},
    ],
)
def test_invalid_files_raise_review_file_error(tmp_path: Path, overrides: dict):
    with pytest.raises(ReviewFileError):
        load_review_file(_write(tmp_path / "r.json", _payload(**overrides)))


def test_missing_or_garbled_file(tmp_path: Path):
    with pytest.raises(ReviewFileError):
        load_review_file(tmp_path / "missing.json")
    garbled = tmp_path / "garbled.json"
    garbled.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReviewFileError):
        load_review_file(garbled)


def test_unvalidated_amount_raises_review_error():
    bad = ReviewCandidate.model_construct(
        description="Edited", amount="lots", kind="expense", category="", date="2024-03-01", selected=True
    )
    with pytest.raises(ReviewFileError):
        bad.to_candidate()
