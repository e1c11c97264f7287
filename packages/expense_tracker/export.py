"""CSV export of the filtered transaction selection.

Output shape: a ``Date,Type,Category,Item,Amount,Note`` header followed by one
row per transaction, every field double-quoted, rows separated by ``\\n``. The
download file is named ``expense-tracker-YYYY-MM-DD.csv`` after the export
date.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import os
from collections.abc import Iterable
from decimal import Decimal
from pathlib import Path

from .errors import NothingToExportError, PersistenceError
from .logging_setup import get_logger
from .models import Transaction

CSV_HEADER: tuple[str, ...] = ("Date", "Type", "Category", "Item", "Amount", "Note")

_logger = get_logger("expense_tracker.export")


def export_filename(today: dt.date) -> str:
    return f"expense-tracker-{today.isoformat()}.csv"


def _plain_amount(amount: Decimal) -> str:
    # Positional notation without trailing fraction zeros: 100.50 -> 100.5, 1E+3 -> 1000
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _row(tx: Transaction) -> list[str]:
    return [
        tx.date.isoformat(),
        tx.type.value,
        tx.category.label,
        tx.item,
        _plain_amount(tx.amount),
        tx.note or "",
    ]


def to_csv(transactions: Iterable[Transaction]) -> str:
    """Render ``transactions`` as CSV text; raise when there is nothing to export."""

    rows = [_row(tx) for tx in transactions]
    if not rows:
        raise NothingToExportError()

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(rows)
    # No trailing newline after the last row.
    return buf.getvalue().rstrip("\n")


def write_csv(
    transactions: Iterable[Transaction],
    *,
    directory: str | os.PathLike[str],
    today: dt.date,
) -> Path:
    """Write the CSV export into ``directory`` and return the file path."""

    text = to_csv(transactions)
    path = Path(directory) / export_filename(today)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="")
    except OSError as e:
        raise PersistenceError(f"failed to write export {os.fspath(path)}: {e}") from e
    _logger.info("export:csv rows=%d path=%s", text.count("\n"), path)
    return path


__all__ = ["CSV_HEADER", "export_filename", "to_csv", "write_csv"]
