"""Display formatting for the terminal views.

Amounts are shown in rupees with Indian digit grouping (``₹1,23,456.5``) and
at most three fraction digits; dates as ``DD/MM/YYYY``.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal, localcontext

from .categories import Category
from .models import Summary, Transaction, TrendSeries

CURRENCY_SYMBOL = "₹"
TABLE_HEADER: tuple[str, ...] = ("Date", "Type", "Category", "Item", "Amount", "Note", "Id")
EMPTY_TABLE_MESSAGE = "No transactions found"

_MAX_FRACTION = Decimal("0.001")


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_amount(amount: Decimal) -> str:
    """Indian-grouped number with up to three fraction digits (no symbol)."""

    with localcontext() as ctx:
        # quantize needs room for every integer digit plus three fraction digits
        ctx.prec = max(ctx.prec, amount.adjusted() + 5)
        q = amount.quantize(_MAX_FRACTION, rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    whole, _, frac = format(q.copy_abs(), "f").partition(".")
    frac = frac.rstrip("0")
    text = _group_indian(whole)
    return f"{sign}{text}.{frac}" if frac else f"{sign}{text}"


def format_currency(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{format_amount(amount)}"


def format_date(d: dt.date) -> str:
    return d.strftime("%d/%m/%Y")


def table_rows(transactions: Iterable[Transaction]) -> list[tuple[str, ...]]:
    return [
        (
            format_date(tx.date),
            tx.type.value.capitalize(),
            tx.category.label,
            tx.item,
            format_currency(tx.amount),
            tx.note or "-",
            tx.id,
        )
        for tx in transactions
    ]


def render_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Left-aligned plain-text table with a dashed rule under the header."""

    widths = [len(h) for h in header]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = [
        "  ".join(h.ljust(widths[i]) for i, h in enumerate(header)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    for row in rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def render_transactions(transactions: Sequence[Transaction]) -> str:
    if not transactions:
        return EMPTY_TABLE_MESSAGE
    return render_table(TABLE_HEADER, table_rows(transactions))


def render_summary(summary: Summary) -> str:
    return "\n".join(
        [
            f"Income:  {format_currency(summary.total_income)}",
            f"Expense: {format_currency(summary.total_expense)}",
            f"Balance: {format_currency(summary.balance)}",
        ]
    )


def render_category_totals(totals: Mapping[Category, Decimal]) -> str:
    if not totals:
        return "No expenses found"
    rows = [(c.label, format_currency(v)) for c, v in totals.items()]
    return render_table(("Category", "Amount"), rows)


def render_trend(series: TrendSeries) -> str:
    if not series.labels:
        return "No trend for this time frame"
    rows = [
        (label, format_currency(i), format_currency(e))
        for label, i, e in zip(series.labels, series.income, series.expense, strict=True)
    ]
    return render_table(("Period", "Income", "Expenses"), rows)


__all__ = [
    "format_amount",
    "format_currency",
    "format_date",
    "table_rows",
    "render_table",
    "render_transactions",
    "render_summary",
    "render_category_totals",
    "render_trend",
]
