"""Dependency injection / factory functions for FastAPI.

The facade carries the ledger and the pending report batch, so every
request must see the same instance: it lives in one lazily created
container.
"""

from functools import lru_cache
from typing import Optional

from qa_matrix.config import Settings
from qa_matrix.container import AppContainer
from qa_matrix.facade import QAMatrixFacade


@lru_cache
def get_settings() -> Settings:
    return Settings()


_container: Optional[AppContainer] = None


def get_container() -> AppContainer:
    global _container
    if _container is None:
        _container = AppContainer()
    return _container


def get_facade() -> QAMatrixFacade:
    return get_container().facade()
