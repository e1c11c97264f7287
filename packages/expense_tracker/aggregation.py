"""Filtering and aggregation over a flat list of transactions.

Everything here is a pure function of its inputs: no I/O, no clock reads. The
:class:`~expense_tracker.ledger.Ledger` supplies the current instant and the
reference year so callers (and tests) control time explicitly.

Filter semantics
----------------
The three selections in :class:`~expense_tracker.models.Filters` are AND-ed in
a fixed order: time frame first, then type. ``month`` only participates under
the monthly time frame.

- ``weekly`` keeps records dated on or after ``now - 7 days``, comparing the
  record's date at local midnight against that instant. There is no upper
  bound, so future-dated records pass.
- ``monthly`` keeps records whose month index (January = 0) equals
  ``filters.month``, ignoring the year; with ``month=None`` nothing is removed.
- ``yearly`` keeps records dated in ``reference_year``.

Sums and the monthly quarter split run in a decimal context wide enough to
stay exact, so no rounding happens here.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from decimal import Decimal, localcontext

from .categories import Category
from .models import (
    Filters,
    Summary,
    TimeFrame,
    Transaction,
    TransactionType,
    TrendSeries,
    TypeFilter,
    exact_context,
)

WEEKLY_WINDOW = dt.timedelta(days=7)
WEEK_LABELS: tuple[str, ...] = ("Week 1", "Week 2", "Week 3", "Week 4")
MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
DAY_LABEL_FORMAT = "%d/%m/%Y"

_ZERO = Decimal(0)


def _month_index(d: dt.date) -> int:
    return d.month - 1


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((tx.amount for tx in transactions), _ZERO)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def filter_by_time_frame(
    transactions: Iterable[Transaction],
    time_frame: TimeFrame,
    *,
    month: int | None,
    now: dt.datetime,
    reference_year: int,
) -> list[Transaction]:
    if time_frame is TimeFrame.WEEKLY:
        cutoff = now - WEEKLY_WINDOW
        return [
            tx
            for tx in transactions
            if dt.datetime.combine(tx.date, dt.time.min, tzinfo=now.tzinfo) >= cutoff
        ]
    if time_frame is TimeFrame.MONTHLY and month is not None:
        return [tx for tx in transactions if _month_index(tx.date) == month]
    if time_frame is TimeFrame.YEARLY:
        return [tx for tx in transactions if tx.date.year == reference_year]
    return list(transactions)


def filter_by_type(
    transactions: Iterable[Transaction], type_filter: TypeFilter
) -> list[Transaction]:
    if type_filter is TypeFilter.ALL:
        return list(transactions)
    wanted = TransactionType(type_filter.value)
    return [tx for tx in transactions if tx.type is wanted]


def filter_transactions(
    transactions: Iterable[Transaction],
    filters: Filters,
    *,
    now: dt.datetime,
    reference_year: int,
) -> list[Transaction]:
    """Apply the time-frame filter and then the type filter."""

    by_time = filter_by_time_frame(
        transactions,
        filters.time_frame,
        month=filters.month,
        now=now,
        reference_year=reference_year,
    )
    return filter_by_type(by_time, filters.type_filter)


def sort_for_table(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest date first; records sharing a date keep their relative order."""

    return sorted(transactions, key=lambda tx: tx.date, reverse=True)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def _exact(transactions: Sequence[Transaction]):
    return localcontext(exact_context(tx.amount for tx in transactions))


def summarize(transactions: Iterable[Transaction]) -> Summary:
    txs = list(transactions)
    income = _ZERO
    expense = _ZERO
    with _exact(txs):
        for tx in txs:
            if tx.is_income:
                income += tx.amount
            else:
                expense += tx.amount
    return Summary(total_income=income, total_expense=expense)


def category_totals(transactions: Iterable[Transaction]) -> dict[Category, Decimal]:
    """Sum expense amounts per category.

    Income records are ignored. Categories without expenses are absent; keys
    appear in order of first occurrence.
    """

    txs = list(transactions)
    totals: dict[Category, Decimal] = {}
    with _exact(txs):
        for tx in txs:
            if not tx.is_expense:
                continue
            totals[tx.category] = totals.get(tx.category, _ZERO) + tx.amount
    return totals


def _split_sum(transactions: Sequence[Transaction], pred) -> tuple[Decimal, Decimal]:
    income = _sum_amounts(tx for tx in transactions if tx.is_income and pred(tx))
    expense = _sum_amounts(tx for tx in transactions if tx.is_expense and pred(tx))
    return income, expense


def trend_series(
    transactions: Sequence[Transaction],
    time_frame: TimeFrame,
    *,
    today: dt.date,
) -> TrendSeries:
    """Bucket ``transactions`` into an income/expense series for ``time_frame``.

    - weekly: 7 daily buckets ending ``today`` (oldest first), exact date match.
    - monthly: 4 ``Week N`` buckets, each holding the total divided by 4. This
      is a uniform spread of the selection's totals, not a per-week grouping
      by date.
    - yearly: 12 month buckets (Jan..Dec) by month of date.
    - all: no buckets.
    """

    labels: list[str] = []
    income: list[Decimal] = []
    expense: list[Decimal] = []

    with _exact(transactions):
        if time_frame is TimeFrame.WEEKLY:
            for offset in range(6, -1, -1):
                day = today - dt.timedelta(days=offset)
                i, e = _split_sum(transactions, lambda tx, day=day: tx.date == day)
                labels.append(day.strftime(DAY_LABEL_FORMAT))
                income.append(i)
                expense.append(e)
        elif time_frame is TimeFrame.MONTHLY:
            i, e = _split_sum(transactions, lambda tx: True)
            n = len(WEEK_LABELS)
            labels.extend(WEEK_LABELS)
            income.extend([i / n] * n)
            expense.extend([e / n] * n)
        elif time_frame is TimeFrame.YEARLY:
            for m, name in enumerate(MONTH_LABELS):
                i, e = _split_sum(transactions, lambda tx, m=m: _month_index(tx.date) == m)
                labels.append(name)
                income.append(i)
                expense.append(e)

    return TrendSeries(labels=tuple(labels), income=tuple(income), expense=tuple(expense))


__all__ = [
    "filter_by_time_frame",
    "filter_by_type",
    "filter_transactions",
    "sort_for_table",
    "summarize",
    "category_totals",
    "trend_series",
    "MONTH_LABELS",
    "WEEK_LABELS",
]
