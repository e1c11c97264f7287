"""Environment-driven configuration.

Values are read from the process environment at call time, so a ``.env`` file
loaded by the CLI (python-dotenv, ``override=False``) is honored as long as it
is loaded first.

- ``EXPENSE_TRACKER_STORE``: store URL or directory (see
  :func:`expense_tracker.storage.open_store`). Default: ``./.expense_tracker``.
- ``EXPENSE_TRACKER_REFERENCE_YEAR``: year used by the yearly time frame.
  Default: unset, meaning the current year of the ledger's clock.
- ``EXPENSE_TRACKER_LOG_LEVEL``: read by :mod:`expense_tracker.logging_setup`.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_STORE_DIRNAME = ".expense_tracker"


def store_location() -> str:
    raw = os.getenv("EXPENSE_TRACKER_STORE")
    if raw and raw.strip():
        return raw.strip()
    return os.fspath(Path.cwd() / DEFAULT_STORE_DIRNAME)


def reference_year() -> int | None:
    """Return the configured reference year, or ``None`` to follow the clock."""

    raw = os.getenv("EXPENSE_TRACKER_REFERENCE_YEAR")
    if not raw or not raw.strip():
        return None
    try:
        year = int(raw.strip())
    except ValueError:
        raise ValueError(
            f"EXPENSE_TRACKER_REFERENCE_YEAR must be an integer year, got {raw!r}"
        ) from None
    if not 1 <= year <= 9999:
        raise ValueError(f"EXPENSE_TRACKER_REFERENCE_YEAR out of range: {year}")
    return year


__all__ = ["store_location", "reference_year", "DEFAULT_STORE_DIRNAME"]
