"""Dependency Injection Container.

Centralized definition of all application dependencies using dependency-injector.

Usage::

    from qa_matrix.container import AppContainer

    container = AppContainer()
    facade = container.facade()       # one facade per container

    # Or inject into functions
    @inject
    def my_function(facade: QAMatrixFacade = Provide[AppContainer.facade]):
        facade.rematch()
"""

from pathlib import Path

from dependency_injector import containers, providers

from qa_matrix.config import Settings
from qa_matrix.database import build_engine, build_session_factory, init_db
from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.repositories.kv_store import SqlKeyValueStore
from qa_matrix.repositories.ledger_repo import LedgerRepository


def _ensure_data_dir(database_url: str) -> str:
    """Create the parent directory of a file-backed SQLite database."""
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        Path(database_url.replace("sqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)
    return database_url


def _init_database(engine):
    """Initialize database schema."""
    init_db(engine)
    return engine


class AppContainer(containers.DeclarativeContainer):
    """Application Dependency Injection Container.

    - Configuration (Settings)
    - Database (engine, sessions, key-value store)
    - Repositories / engines
    - Facade (the long-lived ledger and report workflow)
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # ══════════════════════════════════════════════════════════════════
    # DATABASE
    # ══════════════════════════════════════════════════════════════════

    database_url = providers.Callable(
        _ensure_data_dir,
        database_url=settings.provided.database_url,
    )

    db_engine = providers.Singleton(
        build_engine,
        database_url=database_url,
        echo=settings.provided.debug,
    )

    db_initialized = providers.Singleton(
        _init_database,
        engine=db_engine,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=db_initialized,
    )

    kv_store = providers.Singleton(
        SqlKeyValueStore,
        session_factory=session_factory,
    )

    # ══════════════════════════════════════════════════════════════════
    # REPOSITORIES / ENGINES
    # ══════════════════════════════════════════════════════════════════

    ledger_repo = providers.Factory(
        LedgerRepository,
        store=kv_store,
        key=settings.provided.ledger_storage_key,
    )

    matcher = providers.Factory(
        FuzzyMatcher,
        threshold=settings.provided.match_threshold,
    )

    # ══════════════════════════════════════════════════════════════════
    # FACADE (holds ledger + reconciliation state across requests)
    # ══════════════════════════════════════════════════════════════════

    facade = providers.Singleton(
        QAMatrixFacade,
        settings=settings,
        ledger_repo=ledger_repo,
        matcher=matcher,
    )
