import datetime as dt
from decimal import Decimal

import pytest

from expense_tracker import Category, Ledger, TimeFrame, TypeFilter
from expense_tracker.aggregation import MONTH_LABELS, WEEK_LABELS, sort_for_table

from tests.helpers.ledger import FixedClock, make_entry

# The ``clock`` fixture reads 2025-06-10 12:00 local time.


def _ids(transactions) -> set[str]:
    return {tx.id for tx in transactions}


# ---- filtered() --------------------------------------------------------------


def test_all_filters_return_whole_collection(ledger: Ledger):
    added = [
        ledger.add(make_entry(date="2019-01-01")),
        ledger.add(make_entry(type="income", date="2025-06-10")),
        ledger.add(make_entry(date="2031-12-31")),
    ]
    assert _ids(ledger.filtered()) == _ids(added)


def test_weekly_excludes_ten_days_ago_and_includes_two_days_ago(ledger: Ledger):
    old = ledger.add(make_entry(date="2025-05-31"))
    recent = ledger.add(make_entry(date="2025-06-08"))

    ledger.set_filters(time_frame=TimeFrame.WEEKLY)

    assert _ids(ledger.filtered()) == {recent.id}
    assert old.id not in _ids(ledger.filtered())


def test_weekly_window_compares_midnight_against_now_minus_seven_days(
    ledger: Ledger, clock: FixedClock
):
    boundary = ledger.add(make_entry(date="2025-06-03"))
    ledger.set_filters(time_frame="weekly")

    # 2025-06-03 00:00 is before 2025-06-03 12:00
    assert ledger.filtered() == []

    clock.now = dt.datetime(2025, 6, 10, 0, 0)
    assert _ids(ledger.filtered()) == {boundary.id}


def test_weekly_keeps_future_dated_records(ledger: Ledger):
    future = ledger.add(make_entry(date="2025-07-01"))
    ledger.set_filters(time_frame="weekly")
    assert _ids(ledger.filtered()) == {future.id}


def test_monthly_with_month_matches_month_of_any_year(ledger: Ledger):
    june_2024 = ledger.add(make_entry(date="2024-06-15"))
    june_2025 = ledger.add(make_entry(date="2025-06-01"))
    ledger.add(make_entry(date="2025-05-31"))

    ledger.set_filters(time_frame="monthly", month=5)

    assert _ids(ledger.filtered()) == {june_2024.id, june_2025.id}


def test_monthly_with_all_months_applies_no_restriction(ledger: Ledger):
    added = [ledger.add(make_entry(date=d)) for d in ("2024-01-01", "2025-06-01")]
    ledger.set_filters(time_frame="monthly", month=None)
    assert _ids(ledger.filtered()) == _ids(added)


def test_month_is_ignored_outside_monthly(ledger: Ledger):
    added = [ledger.add(make_entry(date=d)) for d in ("2025-01-01", "2025-06-01")]
    ledger.set_filters(time_frame="yearly", month=0)
    assert _ids(ledger.filtered()) == _ids(added)


def test_yearly_keeps_reference_year_only(store, clock: FixedClock):
    ledger = Ledger(store, clock=clock, reference_year=2024)
    in_year = ledger.add(make_entry(date="2024-03-01"))
    ledger.add(make_entry(date="2025-03-01"))

    ledger.set_filters(time_frame="yearly")

    assert _ids(ledger.filtered()) == {in_year.id}


def test_type_filter_is_anded_with_time_frame(ledger: Ledger):
    ledger.add(make_entry(type="expense", date="2025-06-09"))
    income = ledger.add(make_entry(type="income", date="2025-06-09"))
    ledger.add(make_entry(type="income", date="2025-01-01"))

    ledger.set_filters(time_frame="weekly", type_filter=TypeFilter.INCOME)

    assert _ids(ledger.filtered()) == {income.id}


def test_table_sorts_by_date_descending(ledger: Ledger):
    a = ledger.add(make_entry(date="2025-06-01", item="a"))
    b = ledger.add(make_entry(date="2025-06-05", item="b"))
    c = ledger.add(make_entry(date="2025-06-01", item="c"))

    assert [tx.id for tx in ledger.table()] == [b.id, a.id, c.id]
    assert sort_for_table([]) == []


# ---- summary() ---------------------------------------------------------------


def test_summary_scenario(ledger: Ledger):
    ledger.add(make_entry(type="expense", category="Food and Groceries", amount=100, date="2025-06-01"))
    ledger.add(
        make_entry(type="income", category="Savings and Investments", amount=500, date="2025-06-02")
    )

    summary = ledger.summary()

    assert summary.total_income == 500
    assert summary.total_expense == 100
    assert summary.balance == 400
    assert ledger.category_totals() == {"Food and Groceries": 100}


def test_summary_of_empty_selection_is_zero(ledger: Ledger):
    ledger.add(make_entry(date="2020-01-01"))
    ledger.set_filters(time_frame="weekly")

    summary = ledger.summary()

    assert (summary.total_income, summary.total_expense, summary.balance) == (0, 0, 0)


def test_summary_balance_can_go_negative_and_keeps_decimals(ledger: Ledger):
    ledger.add(make_entry(type="income", amount="0.10"))
    ledger.add(make_entry(type="income", amount="0.20"))
    ledger.add(make_entry(type="expense", amount="1.05"))

    summary = ledger.summary()

    assert summary.total_income == Decimal("0.30")
    assert summary.balance == Decimal("-0.75")
    assert summary.balance == summary.total_income - summary.total_expense


# ---- category_totals() -------------------------------------------------------


def test_category_totals_group_expenses_in_first_seen_order(ledger: Ledger):
    ledger.add(make_entry(category="Transportation", amount="20"))
    ledger.add(make_entry(category="Food and Groceries", amount="30"))
    ledger.add(make_entry(category="Transportation", amount="5.5"))

    totals = ledger.category_totals()

    assert list(totals) == [Category.TRANSPORTATION, Category.FOOD]
    assert totals[Category.TRANSPORTATION] == Decimal("25.5")
    assert Category.RENT not in totals


def test_income_never_changes_category_totals(ledger: Ledger):
    ledger.add(make_entry(category="Food and Groceries", amount="30"))
    before = ledger.category_totals()

    ledger.add(make_entry(type="income", category="Food and Groceries", amount="999"))
    ledger.add(make_entry(type="income", category="Gifts and Donations", amount="1"))

    assert ledger.category_totals() == before


def test_category_totals_respect_type_filter(ledger: Ledger):
    ledger.add(make_entry(category="Food and Groceries", amount="30"))
    ledger.set_filters(type_filter="income")
    assert ledger.category_totals() == {}


# ---- trend_series() ----------------------------------------------------------


def test_yearly_trend_places_march_expense_at_index_two(ledger: Ledger):
    ledger.add(make_entry(amount="120", date="2025-03-15"))
    ledger.add(make_entry(amount="999", date="2024-03-15"))
    ledger.set_filters(time_frame="yearly")

    series = ledger.trend_series()

    assert series.labels == MONTH_LABELS
    assert len(series.expense) == 12
    assert series.expense[2] == 120
    assert all(v == 0 for i, v in enumerate(series.expense) if i != 2)
    assert all(v == 0 for v in series.income)


def test_weekly_trend_has_seven_daily_buckets_ending_today(ledger: Ledger):
    ledger.add(make_entry(type="income", amount="50", date="2025-06-10"))
    ledger.add(make_entry(type="income", amount="25", date="2025-06-10"))
    ledger.add(make_entry(type="expense", amount="20", date="2025-06-04"))
    ledger.add(make_entry(type="expense", amount="70", date="2025-06-03"))

    series = ledger.trend_series("weekly")

    assert series.labels[0] == "04/06/2025"
    assert series.labels[-1] == "10/06/2025"
    assert len(series.labels) == len(series.income) == len(series.expense) == 7
    assert series.income[-1] == 75
    assert series.expense[0] == 20
    assert sum(series.expense) == 20


def test_monthly_trend_spreads_totals_evenly_over_four_weeks(ledger: Ledger):
    ledger.add(make_entry(type="income", amount="400", date="2025-06-02"))
    ledger.add(make_entry(type="expense", amount="10", date="2025-06-28"))
    ledger.add(make_entry(type="expense", amount="50", date="2025-05-20"))
    ledger.set_filters(time_frame="monthly", month=5)

    series = ledger.trend_series()

    assert series.labels == WEEK_LABELS
    assert series.income == (100, 100, 100, 100)
    assert series.expense == (Decimal("2.5"),) * 4


def test_trend_for_all_time_frame_is_empty(ledger: Ledger):
    ledger.add(make_entry())
    series = ledger.trend_series(TimeFrame.ALL)
    assert series.labels == series.income == series.expense == ()


def test_trend_argument_overrides_active_time_frame(ledger: Ledger):
    ledger.add(make_entry(amount="10", date="2025-02-01"))
    ledger.add(make_entry(amount="10", date="2024-02-01"))

    series = ledger.trend_series("yearly")

    assert ledger.filters.time_frame is TimeFrame.ALL
    assert series.expense[1] == 10


@pytest.mark.parametrize("bad", ["daily", ""])
def test_trend_rejects_unknown_time_frame(ledger: Ledger, bad):
    with pytest.raises(ValueError):
        ledger.trend_series(bad)


# ---- exactness ---------------------------------------------------------------


def test_sums_beyond_default_precision_stay_exact(ledger: Ledger):
    ledger.add(make_entry(type="income", amount="1e30"))
    ledger.add(make_entry(type="income", amount="1"))
    ledger.add(make_entry(type="expense", amount="0.5"))

    summary = ledger.summary()

    assert summary.total_income == Decimal("1000000000000000000000000000001")
    assert summary.balance == Decimal("1000000000000000000000000000000.5")
    assert ledger.category_totals() == {Category.FOOD: Decimal("0.5")}


def test_monthly_quarters_of_huge_totals_are_exact(ledger: Ledger):
    ledger.add(make_entry(type="income", amount="1e30", date="2025-06-02"))
    ledger.add(make_entry(type="income", amount="1", date="2025-06-03"))
    ledger.set_filters(time_frame="monthly", month=5)

    series = ledger.trend_series()

    assert series.income == (Decimal("250000000000000000000000000000.25"),) * 4
