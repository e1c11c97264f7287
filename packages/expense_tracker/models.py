"""Data models and filter/result types for ``expense_tracker``.

Transactions are validated at the boundary with Pydantic: :class:`NewEntry`
describes what a caller supplies to :meth:`expense_tracker.ledger.Ledger.add`,
and :class:`Transaction` is the stored, immutable record (the entry plus the
``id`` and ``timestamp`` assigned by the ledger). The same field validators
accept the legacy browser storage shape (numeric amounts, emoji-prefixed
category labels, empty-string notes).
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Context, Decimal, getcontext, localcontext
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .categories import Category, parse_category

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


class TimeFrame(StrEnum):
    ALL = "all"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TypeFilter(StrEnum):
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class _EntryFields(BaseModel):
    """Fields shared by caller-supplied entries and stored transactions."""

    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    category: Category
    item: str = ""
    amount: Decimal
    note: str | None = None
    date: dt.date

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_category(v)
        return v

    @field_validator("amount")
    @classmethod
    def _amount_finite_non_negative(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be a finite number")
        if v < 0:
            raise ValueError("amount must not be negative")
        return v

    @field_validator("item", mode="before")
    @classmethod
    def _item_none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("note")
    @classmethod
    def _blank_note_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v


class NewEntry(_EntryFields):
    """A transaction as supplied by the caller, before ``id``/``timestamp``."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class Transaction(_EntryFields):
    """A stored transaction. Immutable once created."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    id: str
    timestamp: dt.datetime

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("id must be non-empty")
        return v

    @field_validator("timestamp")
    @classmethod
    def _timestamp_aware(cls, v: dt.datetime) -> dt.datetime:
        # Stored instants are UTC; naive values are taken as already UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=dt.UTC)
        return v.astimezone(dt.UTC)

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE


type Transactions = Sequence[Transaction]
"""An ordered collection of stored transactions (insertion order)."""


# ---------------------------------------------------------------------------
# Filter state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Filters:
    """The three independent filter selections applied by ``filtered()``.

    ``month`` is a 0-based month index (January = 0) or ``None`` for "all".
    It is only consulted when ``time_frame`` is :attr:`TimeFrame.MONTHLY`.
    """

    time_frame: TimeFrame = TimeFrame.ALL
    type_filter: TypeFilter = TypeFilter.ALL
    month: int | None = None

    def __post_init__(self) -> None:
        # Coerce raw strings so callers may pass "weekly" / "expense".
        object.__setattr__(self, "time_frame", TimeFrame(self.time_frame))
        object.__setattr__(self, "type_filter", TypeFilter(self.type_filter))
        m = self.month
        if m is None:
            return
        if isinstance(m, bool) or not isinstance(m, int) or not 0 <= m <= 11:
            raise ValueError("Filters.month must be an integer in 0..11 or None")


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


def exact_context(amounts: Iterable[Decimal], *, headroom: int = 4) -> Context:
    """Return a context wide enough that sums of ``amounts`` are exact.

    Never narrower than the current context. ``headroom`` covers the two extra
    fraction digits of a division by 4.
    """

    values = list(amounts)
    prec = getcontext().prec
    if values:
        top = max(a.adjusted() for a in values)
        bottom = min(a.as_tuple().exponent for a in values)
        prec = max(prec, top - bottom + 1 + len(str(len(values))) + headroom)
    return Context(prec=prec)


@dataclass(frozen=True, slots=True)
class Summary:
    total_income: Decimal
    total_expense: Decimal

    @property
    def balance(self) -> Decimal:
        with localcontext(exact_context((self.total_income, self.total_expense))):
            return self.total_income - self.total_expense


@dataclass(frozen=True, slots=True)
class TrendSeries:
    """Time-bucketed income/expense series aligned to a time frame.

    ``labels``, ``income`` and ``expense`` always have the same length.
    """

    labels: tuple[str, ...]
    income: tuple[Decimal, ...]
    expense: tuple[Decimal, ...]


__all__ = [
    "TransactionType",
    "TimeFrame",
    "TypeFilter",
    "NewEntry",
    "Transaction",
    "Transactions",
    "Filters",
    "Summary",
    "TrendSeries",
    "exact_context",
]
