"""SQLModel implementation of the key-value store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.kv import StoredRecord


class SQLModelKeyValueStore:
    """Stores serialized aggregates as rows of the ``kv_store`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            record = session.exec(select(StoredRecord).where(StoredRecord.key == key)).first()
            return record.value if record else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            record = session.exec(select(StoredRecord).where(StoredRecord.key == key)).first()
            if record:
                record.value = value
                record.updated_at = datetime.now(timezone.utc)
            else:
                record = StoredRecord(key=key, value=value)
            session.add(record)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            record = session.exec(select(StoredRecord).where(StoredRecord.key == key)).first()
            if record:
                session.delete(record)
                session.commit()

    def keys(self) -> list[str]:
        """Return every stored key, sorted."""
        with self.session_factory() as session:
            return sorted(session.exec(select(StoredRecord.key)).all())


__all__ = ["SQLModelKeyValueStore"]
