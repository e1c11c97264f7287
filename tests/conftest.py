"""Pytest configuration for test isolation.

- ``packages/`` and the repo root are put on ``sys.path`` so
  ``expense_tracker`` and ``tests.helpers`` import without an editable
  install.
- The default store location and reference year come from the environment;
  an autouse fixture points the store at the test's temporary directory and
  clears the year so tests never touch a real ``./.expense_tracker``.
- The CLI configures logging once per process and binds the handler to the
  current ``sys.stderr``. Under ``CliRunner`` that stream is temporary, so
  tests mark logging as already configured.
"""

from __future__ import annotations

import datetime as dt
import os
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from expense_tracker import logging_setup  # noqa: E402
from expense_tracker.ledger import Ledger  # noqa: E402
from expense_tracker.storage import MemoryStore  # noqa: E402

from tests.helpers.ledger import FixedClock  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXPENSE_TRACKER_STORE", os.fspath(tmp_path / "store"))
    monkeypatch.delenv("EXPENSE_TRACKER_REFERENCE_YEAR", raising=False)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", True)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(dt.datetime(2025, 6, 10, 12, 0, 0))


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ledger(store: MemoryStore, clock: FixedClock) -> Ledger:
    return Ledger(store, clock=clock)
