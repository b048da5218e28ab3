from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from quickbudget.csv_codec import HEADER, decode_csv, encode_csv, guard_field
from quickbudget.errors import CsvFormatError, RowLimitExceeded
from quickbudget.models import Transaction

TODAY = date(2024, 5, 17)


def _txn(i: int, description: str, *, kind="expense", category="", amount="10.00"):
    return Transaction(
        id=f"t{i}",
        description=description,
        amount=Decimal(amount),
        kind=kind,
        category=category,
        date="2024-03-01",
    )


def test_round_trip_preserves_tricky_fields():
    rows = [
        _txn(1, 'Say "hello", world', category="Gifts, misc"),
        _txn(2, "=SUM(A1)", category="+cat"),
        _txn(3, "-5 off coupon", kind="income", amount="1250.00"),
        _txn(4, "@handle payment", category="Transfers"),
        _txn(5, "line one\nline two"),
    ]
    decoded = decode_csv(encode_csv(rows), today=TODAY)
    assert decoded.skipped_count == 0
    assert [r.to_dict() for r in decoded.records] == [
        {k: v for k, v in t.to_dict().items() if k != "id"} for t in rows
    ]


def test_export_guards_formula_prefixes():
    text = encode_csv([_txn(1, "=SUM(A1)")])
    fields = list(csv.reader(io.StringIO(text)))[1]
    assert fields[2] == "\t=SUM(A1)"
    assert not fields[2].startswith("=")


def test_export_quotes_every_field_and_writes_header_first():
    text = encode_csv([_txn(1, "Coffee", category="Restaurant", amount="4.5")])
    lines = text.splitlines()
    assert lines[0] == '"Date","Type","Description","Category","Amount"'
    assert lines[1] == '"2024-03-01","expense","Coffee","Restaurant","4.50"'


@pytest.mark.parametrize("value", ["=1+1", "+1", "-1", "@x", "\tx"])
def test_guard_field_prefixes_tab(value):
    assert guard_field(value) == "\t" + value


def test_header_matches_case_insensitively_and_crlf_is_accepted():
    text = "date, TYPE ,Description,category,AMOUNT\r\n2024-03-01,Expense,Coffee,,4.50\r\n"
    decoded = decode_csv(text, today=TODAY)
    assert decoded.rows_read == 1
    assert decoded.records[0].kind == "expense"
    assert decoded.records[0].amount == Decimal("4.50")


def test_wrong_header_raises():
    with pytest.raises(CsvFormatError):
        decode_csv("When,Type,Description,Category,Amount\n2024-03-01,expense,x,,1\n")


def test_malformed_quoting_raises():
    text = ",".join(HEADER) + '\n2024-03-01,expense,"unterminated,,1\n'
    with pytest.raises(CsvFormatError):
        decode_csv(text)


def test_empty_file_is_empty_result():
    decoded = decode_csv("")
    assert decoded.is_empty
    assert decoded.rows_read == 0


def test_bad_rows_are_skipped_and_counted():
    text = "\n".join(
        [
            ",".join(HEADER),
            "2024-03-01,expense,Coffee,Restaurant,4.50",
            "2024-03-02,expense,Too,few",
            "2024-03-03,expense,,Gas,30.00",
            "2024-02-30,expense,Bad date,,1.00",
            "2024-03-04,transfer,Bad kind,,1.00",
            "2024-03-05,income,Salary,Income,0",
            "",
            "2024-03-06,Income,Salary,Income,2000",
        ]
    )
    decoded = decode_csv(text, today=TODAY)
    assert [r.description for r in decoded.records] == ["Coffee", "Salary"]
    assert decoded.records[1].kind == "income"
    assert decoded.skipped_count == 5
    assert decoded.rows_read == 7
    assert decoded.skipped[0].position == 3


def test_only_invalid_rows_yield_empty_result():
    text = ",".join(HEADER) + "\n2024-03-01,expense,Coffee,,abc\n"
    decoded = decode_csv(text)
    assert decoded.is_empty
    assert decoded.skipped_count == 1


def test_row_cap_is_all_or_nothing():
    body = "".join(f"2024-03-01,expense,Row {i},,1.00\n" for i in range(4))
    text = ",".join(HEADER) + "\n" + body
    with pytest.raises(RowLimitExceeded) as exc:
        decode_csv(text, max_rows=3)
    assert "more than 3" in str(exc.value)
    assert len(decode_csv(text, max_rows=4).records) == 4


def test_bom_is_ignored():
    text = "\ufeff" + ",".join(HEADER) + "\n2024-03-01,expense,Coffee,,4.50\n"
    assert len(decode_csv(text).records) == 1
