"""Data-access layer."""

from qa_matrix.repositories.base import BaseRepository
from qa_matrix.repositories.kv_store import (
    InMemoryKeyValueStore,
    KeyValueRepository,
    KeyValueStore,
    SqlKeyValueStore,
)
from qa_matrix.repositories.ledger_repo import LedgerRepository

__all__ = [
    "BaseRepository",
    "KeyValueStore",
    "KeyValueRepository",
    "SqlKeyValueStore",
    "InMemoryKeyValueStore",
    "LedgerRepository",
]
