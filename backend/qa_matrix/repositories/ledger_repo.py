"""Ledger repository — the concern list as one JSON payload in a key-value store."""

import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from qa_matrix.domain.status import recalculate
from qa_matrix.repositories.kv_store import KeyValueStore
from qa_matrix.schemas.concern import Concern

logger = logging.getLogger(__name__)

_LEDGER = TypeAdapter(List[Concern])

DEFAULT_KEY = "qa-matrix-data"


class LedgerRepository:
    """Serialize / deserialize the full ledger.

    Loading always re-derives computed fields, so a stale or hand-edited
    cache in storage can never leak into the ledger.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_KEY):
        self.store = store
        self.key = key

    @staticmethod
    def dumps(concerns: List[Concern]) -> bytes:
        return _LEDGER.dump_json(concerns)

    @staticmethod
    def loads(payload: bytes) -> List[Concern]:
        return [recalculate(c) for c in _LEDGER.validate_json(payload)]

    def load(self) -> Optional[List[Concern]]:
        """Return the stored ledger, or *None* when nothing usable is stored."""
        payload = self.store.load(self.key)
        if payload is None:
            return None
        try:
            return self.loads(payload)
        except ValidationError as exc:
            logger.warning(
                "Discarding unreadable ledger under %r: %d errors", self.key, exc.error_count(),
            )
            return None

    def save(self, concerns: List[Concern]) -> None:
        self.store.save(self.key, self.dumps(concerns))

    def clear(self) -> bool:
        return self.store.delete(self.key)
