"""Serialization of the transaction collection.

The whole collection is stored under a single key as a JSON array of records
with the fields ``id, type, category, item, amount, note, date, timestamp``.
Writes always replace the full array; there is no incremental persistence.

``amount`` is written as a decimal string to keep sums exact across reloads.
Decoding also accepts the legacy browser shape (numeric amounts, emoji
category labels, empty-string notes).
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import CorruptDataError, PersistenceError
from .models import Transaction

STORAGE_KEY = "expenseTrackerTransactions"

_COLLECTION = TypeAdapter(list[Transaction])


def dump_transactions(transactions: Iterable[Transaction]) -> str:
    """Serialize ``transactions`` to the stored JSON text."""

    try:
        payload = _COLLECTION.dump_python(list(transactions), mode="json")
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"failed to serialize transactions: {e}") from e


def load_transactions(text: str) -> list[Transaction]:
    """Decode stored JSON text; raise :class:`CorruptDataError` on any defect."""

    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise CorruptDataError(f"stored transactions are not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise CorruptDataError("stored transactions must be a JSON array")

    try:
        transactions = _COLLECTION.validate_python(raw)
    except PydanticValidationError as e:
        raise CorruptDataError(
            f"stored transactions failed validation ({e.error_count()} errors)"
        ) from e

    seen: set[str] = set()
    for tx in transactions:
        if tx.id in seen:
            raise CorruptDataError(f"duplicate transaction id in storage: {tx.id}")
        seen.add(tx.id)
    return transactions


__all__ = ["STORAGE_KEY", "dump_transactions", "load_transactions"]
