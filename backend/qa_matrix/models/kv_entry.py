"""Key-value entry ORM model — opaque payloads stored under a string key."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, LargeBinary, String

from qa_matrix.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueEntryModel(Base):
    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<KeyValueEntry key={self.key} bytes={len(self.value or b'')}>"
