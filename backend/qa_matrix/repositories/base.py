"""Generic base repository with reusable CRUD operations."""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from qa_matrix.database import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Thin data-access layer over SQLAlchemy.

    Subclasses add domain-specific queries.
    Repositories only modify the session (add/delete/flush) - the caller
    controls when to commit or rollback, enabling multi-step transactions.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    # ── reads ────────────────────────────────────────────────────────

    def get(self, pk: Any) -> Optional[T]:
        return self.db.get(self.model, pk)

    def count(self) -> int:
        return self.db.query(self.model).count()

    # ── writes ───────────────────────────────────────────────────────

    def create(self, obj: T) -> T:
        """Add object to session (caller must commit)."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, pk: Any) -> bool:
        """Mark object for deletion (caller must commit)."""
        obj = self.get(pk)
        if obj:
            self.db.delete(obj)
            self.db.flush()
            return True
        return False
