"""Key-value storage collaborators.

The ledger persists its whole collection as one string under one key. Any
object with ``get(key) -> str | None`` and ``set(key, value) -> None`` works;
this module ships three:

- :class:`MemoryStore`: dict-backed, process-local.
- :class:`JsonFileStore`: one ``<key>.json`` file per key under a directory.
  Writes target ``.tmp`` first and then ``os.replace`` into place.
- :class:`SqlStore`: a ``kv_entries`` row per key via SQLAlchemy.

Stores raise :class:`~expense_tracker.errors.PersistenceError` for any
underlying I/O or database failure.
"""

from __future__ import annotations

import contextlib
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError

from .db import KvEntry, session_scope
from .errors import PersistenceError
from .logging_setup import get_logger

MEMORY_URL = "memory:"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")

_logger = get_logger("expense_tracker.storage")


@runtime_checkable
class KeyValueStore(Protocol):
    """Key-value collaborator holding the serialized collection.

    The ledger wraps any failure that is not a ``LedgerError`` in
    ``PersistenceError``.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-memory store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"MemoryStore(keys={sorted(self._data)!r})"


class JsonFileStore:
    """Directory-backed store with atomic whole-file replacement."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).expanduser()

    def _path(self, key: str) -> Path:
        # Keys become file names; reject anything that could escape the root.
        if not _KEY_RE.fullmatch(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"failed to read {os.fspath(path)}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise PersistenceError(f"failed to write {os.fspath(path)}: {e}") from e
        _logger.debug("file_store:write key=%s bytes=%d path=%s", key, len(value), path)

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"JsonFileStore(root={os.fspath(self.root)!r})"


class SqlStore:
    """Store backed by the ``kv_entries`` table of any SQLAlchemy database."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url

    def get(self, key: str) -> str | None:
        try:
            with session_scope(database_url=self.database_url) as session:
                row = session.get(KvEntry, key)
                return row.value if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to read key {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with session_scope(database_url=self.database_url) as session:
                row = session.get(KvEntry, key)
                if row is None:
                    session.add(KvEntry(key=key, value=value))
                else:
                    row.value = value
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to write key {key!r}: {e}") from e
        _logger.debug("sql_store:write key=%s bytes=%d", key, len(value))

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"SqlStore(database_url={self.database_url!r})"


def open_store(location: str | os.PathLike[str]) -> KeyValueStore:
    """Open a store from a URL or path.

    - ``memory:`` opens a :class:`MemoryStore`.
    - Anything containing ``://`` (``sqlite:///tracker.db``,
      ``postgresql+psycopg://...``) opens a :class:`SqlStore`.
    - Everything else is a directory for a :class:`JsonFileStore`.
    """

    s = os.fspath(location)
    if s == MEMORY_URL:
        return MemoryStore()
    if "://" in s:
        return SqlStore(s)
    return JsonFileStore(s)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "SqlStore",
    "open_store",
    "MEMORY_URL",
]
