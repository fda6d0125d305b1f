"""Key/value storage backends for the inventory store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from stockroom.errors import PersistenceError
from stockroom.extensions import db
from stockroom.models import StorageEntry


class MemoryStorage:
    """Process-local storage, used by tests and when persistence is disabled."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class DatabaseStorage:
    """Stores each value as a row of ``storage_entry``.

    Calls must happen inside an application context. Database failures are
    rolled back and re-raised as :class:`PersistenceError`.
    """

    def get(self, key: str) -> str | None:
        try:
            entry = db.session.get(StorageEntry, key)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f"Unable to read {key}: {exc}", key) from exc
        if entry is None:
            return None
        return entry.value

    def set(self, key: str, value: str) -> None:
        try:
            entry = db.session.get(StorageEntry, key)
            if entry is None:
                entry = StorageEntry(key=key)
                db.session.add(entry)
            entry.value = value
            entry.updated_at = datetime.utcnow()
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(f"Unable to write {key}: {exc}", key) from exc

