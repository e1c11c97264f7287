"""The :class:`Ledger`: transaction collection, filter state and derived queries.

A ledger is constructed explicitly with its storage collaborator and an
optional clock; there is no module-level instance. Callers (CLI commands, UI
handlers) hold a reference and pass it around.

Mutations (``add``/``delete``) build the new collection, write it through the
store, and only then swap it in. Any store failure surfaces as
:class:`~expense_tracker.errors.PersistenceError` and leaves the in-memory
collection untouched, so no caller ever observes a partial update.
"""

from __future__ import annotations

import datetime as dt
import threading
import uuid
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from . import aggregation
from .categories import Category
from .errors import (
    CorruptDataError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .logging_setup import get_logger
from .models import Filters, NewEntry, Summary, TimeFrame, Transaction, TrendSeries, TypeFilter
from .persistence import STORAGE_KEY, dump_transactions, load_transactions
from .storage import KeyValueStore

_logger = get_logger("expense_tracker.ledger")

type Clock = Callable[[], dt.datetime]

_UNCHANGED: Any = object()


def _new_id() -> str:
    return uuid.uuid4().hex


def _validation_errors(err: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in err.errors():
        field = ".".join(str(p) for p in item.get("loc", ())) or "entry"
        errors.setdefault(field, str(item.get("msg", "invalid value")))
    return errors


class Ledger:
    """Owns the transaction list and answers filtering/aggregation queries.

    Parameters
    ----------
    store:
        Key-value collaborator holding the serialized collection.
    clock:
        Returns the current local ``datetime``. Defaults to ``datetime.now``.
    reference_year:
        Year kept by the yearly time frame. ``None`` follows the clock.
    storage_key:
        Key under which the collection is stored.
    id_factory:
        Produces candidate ids for new transactions (uuid4 hex by default).
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock | None = None,
        reference_year: int | None = None,
        storage_key: str = STORAGE_KEY,
        filters: Filters | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._clock: Clock = clock or dt.datetime.now
        self._reference_year = reference_year
        self._key = storage_key
        self._new_id = id_factory or _new_id
        self._lock = threading.Lock()
        self._transactions: tuple[Transaction, ...] = ()
        self.filters = filters or Filters()
        self.load_warning: str | None = None
        self.load()

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """(Re)load the collection from the store.

        An absent key yields an empty collection. Undecodable data also yields
        an empty collection and sets :attr:`load_warning`.
        """

        try:
            raw = self._store.get(self._key)
        except LedgerError:
            raise
        except Exception as e:
            raise PersistenceError(f"failed to read transactions: {e}") from e
        self.load_warning = None
        if raw is None:
            self._transactions = ()
            _logger.debug("ledger:load key=%s empty", self._key)
            return
        try:
            loaded = load_transactions(raw)
        except CorruptDataError as e:
            self._transactions = ()
            self.load_warning = f"Stored transactions could not be read and were ignored: {e}"
            _logger.warning("ledger:load_corrupt key=%s error=%s", self._key, e)
            return
        self._transactions = tuple(loaded)
        _logger.debug("ledger:load key=%s count=%d", self._key, len(loaded))

    def _persist(self, transactions: tuple[Transaction, ...]) -> None:
        payload = dump_transactions(transactions)
        try:
            self._store.set(self._key, payload)
        except LedgerError:
            raise
        except Exception as e:
            raise PersistenceError(f"failed to write transactions: {e}") from e

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def now(self) -> dt.datetime:
        return self._clock()

    def today(self) -> dt.date:
        return self._clock().date()

    @property
    def reference_year(self) -> int:
        if self._reference_year is not None:
            return self._reference_year
        return self._clock().year

    # ------------------------------------------------------------------
    # Collection access
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions in insertion order."""

        return self._transactions

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    def get(self, transaction_id: str) -> Transaction | None:
        for tx in self._transactions:
            if tx.id == transaction_id:
                return tx
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, entry: NewEntry | Mapping[str, Any]) -> Transaction:
        """Validate ``entry``, store it with a fresh id/timestamp, and return it."""

        if isinstance(entry, NewEntry):
            fields = entry
        else:
            try:
                fields = NewEntry.model_validate(entry)
            except PydanticValidationError as e:
                raise ValidationError(_validation_errors(e)) from e

        with self._lock:
            existing = {tx.id for tx in self._transactions}
            tx_id = self._new_id()
            while tx_id in existing:
                tx_id = self._new_id()
            tx = Transaction(
                id=tx_id,
                timestamp=self._clock().astimezone(dt.UTC),
                **fields.model_dump(),
            )
            updated = (*self._transactions, tx)
            self._persist(updated)
            self._transactions = updated

        _logger.info(
            "ledger:add id=%s type=%s category=%s amount=%s date=%s",
            tx.id,
            tx.type,
            tx.category,
            tx.amount,
            tx.date.isoformat(),
        )
        return tx

    def delete(self, transaction_id: str) -> Transaction:
        """Remove the transaction with ``transaction_id`` and return it.

        Raises :class:`NotFoundError` (without writing) when the id is absent.
        """

        with self._lock:
            removed: Transaction | None = None
            kept: list[Transaction] = []
            for tx in self._transactions:
                if removed is None and tx.id == transaction_id:
                    removed = tx
                else:
                    kept.append(tx)
            if removed is None:
                raise NotFoundError(transaction_id)
            updated = tuple(kept)
            self._persist(updated)
            self._transactions = updated

        _logger.info("ledger:delete id=%s", transaction_id)
        return removed

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_filters(
        self,
        *,
        time_frame: TimeFrame | str | None = None,
        type_filter: TypeFilter | str | None = None,
        month: int | None = _UNCHANGED,
    ) -> Filters:
        """Replace any subset of the filter selections and return the result.

        ``month=None`` selects all months; omitting it keeps the current value.
        """

        changes: dict[str, Any] = {}
        if time_frame is not None:
            changes["time_frame"] = time_frame
        if type_filter is not None:
            changes["type_filter"] = type_filter
        if month is not _UNCHANGED:
            changes["month"] = month
        self.filters = replace(self.filters, **changes)
        return self.filters

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _filtered_with(self, filters: Filters) -> list[Transaction]:
        return aggregation.filter_transactions(
            self._transactions,
            filters,
            now=self._clock(),
            reference_year=self.reference_year,
        )

    def filtered(self) -> list[Transaction]:
        """Transactions passing the active filters (insertion order)."""

        return self._filtered_with(self.filters)

    def table(self) -> list[Transaction]:
        """``filtered()`` sorted by date, newest first."""

        return aggregation.sort_for_table(self.filtered())

    def summary(self) -> Summary:
        return aggregation.summarize(self.filtered())

    def category_totals(self) -> dict[Category, Decimal]:
        return aggregation.category_totals(self.filtered())

    def trend_series(self, time_frame: TimeFrame | str | None = None) -> TrendSeries:
        """Trend buckets for ``time_frame`` (the active one when omitted).

        The series is computed over the active filters with the time frame
        swapped for ``time_frame``, so a yearly series is always restricted to
        the reference year.
        """

        tf = self.filters.time_frame if time_frame is None else TimeFrame(time_frame)
        selection = self._filtered_with(replace(self.filters, time_frame=tf))
        return aggregation.trend_series(selection, tf, today=self.today())


__all__ = ["Ledger", "Clock"]
