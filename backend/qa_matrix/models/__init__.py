"""SQLAlchemy ORM models — imported here so Base.metadata sees them."""

from qa_matrix.models.kv_entry import KeyValueEntryModel

__all__ = [
    "KeyValueEntryModel",
]
