"""Exception types raised by the ``expense_tracker`` package.

Every error derives from :class:`LedgerError` so entrypoints (the CLI or a host
application) can catch one type and render a user-visible message. Nothing here
is retried automatically; errors are surfaced synchronously to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping


class LedgerError(Exception):
    """Base class for all ledger failures."""


class ValidationError(LedgerError):
    """An entry was rejected by :meth:`Ledger.add`.

    ``errors`` maps a field name (``amount``, ``date``, ...) to a short human
    readable reason. The message lists them in field order.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: dict[str, str] = dict(errors)
        detail = "; ".join(f"{field}: {reason}" for field, reason in self.errors.items())
        super().__init__(f"Invalid transaction: {detail}" if detail else "Invalid transaction")


class NotFoundError(LedgerError):
    """No transaction with the given id exists."""

    def __init__(self, transaction_id: str) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class PersistenceError(LedgerError):
    """Reading from or writing to the storage collaborator failed."""


class CorruptDataError(LedgerError):
    """The stored collection could not be decoded."""


class NothingToExportError(LedgerError):
    """The CSV exporter was asked to export an empty selection."""

    def __init__(self) -> None:
        super().__init__("No data to export!")


__all__ = [
    "LedgerError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "CorruptDataError",
    "NothingToExportError",
]
