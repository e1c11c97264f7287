"""Public interface for the ``expense_tracker`` package.

This module re-exports the ledger, its models and the storage collaborators as
the stable import surface. There is no runtime logic here.
"""

from .categories import CATEGORY_LABELS, Category, parse_category
from .errors import (
    CorruptDataError,
    LedgerError,
    NotFoundError,
    NothingToExportError,
    PersistenceError,
    ValidationError,
)
from .ledger import Ledger
from .models import (
    Filters,
    NewEntry,
    Summary,
    TimeFrame,
    Transaction,
    Transactions,
    TransactionType,
    TrendSeries,
    TypeFilter,
)
from .persistence import STORAGE_KEY
from .storage import JsonFileStore, KeyValueStore, MemoryStore, SqlStore, open_store

__all__ = [
    # Ledger
    "Ledger",
    # Models / types
    "Category",
    "CATEGORY_LABELS",
    "parse_category",
    "Filters",
    "NewEntry",
    "Summary",
    "TimeFrame",
    "Transaction",
    "Transactions",
    "TransactionType",
    "TrendSeries",
    "TypeFilter",
    # Storage
    "STORAGE_KEY",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "SqlStore",
    "open_store",
    # Errors
    "LedgerError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "CorruptDataError",
    "NothingToExportError",
]
