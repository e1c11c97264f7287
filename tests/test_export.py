from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from expense_tracker import Ledger, NothingToExportError
from expense_tracker.export import CSV_HEADER, export_filename, to_csv, write_csv

from tests.helpers.ledger import make_entry


def test_to_csv_quotes_every_field_and_omits_trailing_newline(ledger: Ledger):
    ledger.add(make_entry(item='Rice "basmati", 5kg', amount="250.50", note="bulk"))
    ledger.add(
        make_entry(type="income", category="Savings and Investments", item="Salary", amount="500")
    )

    text = to_csv(ledger.filtered())

    lines = text.split("\n")
    assert lines == [
        '"Date","Type","Category","Item","Amount","Note"',
        '"2025-06-01","expense","🍔 Food and Groceries","Rice ""basmati"", 5kg","250.5","bulk"',
        '"2025-06-01","income","💰 Savings and Investments","Salary","500",""',
    ]
    assert not text.endswith("\n")


def test_to_csv_keeps_selection_order(ledger: Ledger):
    ledger.add(make_entry(item="first", date="2025-01-01"))
    ledger.add(make_entry(item="second", date="2025-06-01"))

    rows = to_csv(ledger.filtered()).split("\n")[1:]

    assert [r.split(",")[3] for r in rows] == ['"first"', '"second"']


def test_to_csv_of_empty_selection_raises():
    with pytest.raises(NothingToExportError) as excinfo:
        to_csv([])
    assert str(excinfo.value) == "No data to export!"


def test_export_filename_uses_iso_date():
    assert export_filename(dt.date(2025, 6, 10)) == "expense-tracker-2025-06-10.csv"


def test_write_csv_creates_named_file(ledger: Ledger, tmp_path: Path):
    ledger.add(make_entry())

    path = write_csv(ledger.filtered(), directory=tmp_path / "out", today=ledger.today())

    assert path == tmp_path / "out" / "expense-tracker-2025-06-10.csv"
    content = path.read_text(encoding="utf-8")
    assert content.split("\n")[0] == ",".join(f'"{h}"' for h in CSV_HEADER)
    assert len(content.split("\n")) == 2


def test_write_csv_writes_nothing_for_empty_selection(tmp_path: Path):
    with pytest.raises(NothingToExportError):
        write_csv([], directory=tmp_path, today=dt.date(2025, 6, 10))
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize(
    ("amount", "expected"),
    [("100.50", "100.5"), ("100.00", "100"), ("1e3", "1000"), ("0.000", "0"), ("1e30", "1" + "0" * 30)],
)
def test_to_csv_writes_amounts_without_trailing_zeros(ledger: Ledger, amount, expected):
    ledger.add(make_entry(amount=amount))

    row = to_csv(ledger.filtered()).split("\n")[1]

    assert row.split(",")[4] == f'"{expected}"'
