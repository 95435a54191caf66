"""Key-value byte stores backing ledger persistence."""

from typing import Dict, Optional, Protocol

from sqlalchemy.orm import Session, sessionmaker

from qa_matrix.models.kv_entry import KeyValueEntryModel
from qa_matrix.repositories.base import BaseRepository


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[bytes]: ...

    def save(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> bool: ...


class KeyValueRepository(BaseRepository[KeyValueEntryModel]):
    def __init__(self, db: Session):
        super().__init__(db, KeyValueEntryModel)

    def upsert(self, key: str, value: bytes) -> KeyValueEntryModel:
        """Insert or overwrite the payload under *key* (caller must commit)."""
        row = self.get(key)
        if row is None:
            return self.create(KeyValueEntryModel(key=key, value=value))
        row.value = value
        self.db.flush()
        return row


class SqlKeyValueStore:
    """Key-value store over the ``kv_entries`` table, one session per call."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def load(self, key: str) -> Optional[bytes]:
        with self._session_factory() as db:
            row = KeyValueRepository(db).get(key)
            return bytes(row.value) if row is not None else None

    def save(self, key: str, value: bytes) -> None:
        with self._session_factory() as db:
            try:
                KeyValueRepository(db).upsert(key, value)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def delete(self, key: str) -> bool:
        with self._session_factory() as db:
            deleted = KeyValueRepository(db).delete(key)
            db.commit()
            return deleted


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._data: Dict[str, bytes] = {}

    def load(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def save(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None
