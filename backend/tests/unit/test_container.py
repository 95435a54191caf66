"""Tests for dependency injection container.

Verifies that the DI container correctly wires all dependencies and provides
proper isolation for testing.
"""

import pytest
from dependency_injector import providers

from qa_matrix.config import Settings
from qa_matrix.container import AppContainer
from qa_matrix.engines.fuzzy_matcher import FuzzyMatcher
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.repositories.kv_store import SqlKeyValueStore
from qa_matrix.repositories.ledger_repo import LedgerRepository


@pytest.fixture()
def container():
    c = AppContainer()
    c.settings.override(providers.Object(Settings(database_url="sqlite://", match_threshold=0.2)))
    yield c
    c.settings.reset_override()


class TestContainerConfiguration:
    """Test container configuration and wiring."""

    def test_container_creates_settings(self):
        """Container provides Settings singleton."""
        container = AppContainer()
        settings = container.settings()

        assert isinstance(settings, Settings)
        assert settings.app_name == "qa-matrix"

        # Singleton: same instance returned
        assert settings is container.settings()

    def test_kv_store_is_sql_backed_singleton(self, container):
        store = container.kv_store()
        assert isinstance(store, SqlKeyValueStore)
        assert store is container.kv_store()

    def test_kv_store_tables_created(self, container):
        store = container.kv_store()
        store.save("k", b"v")
        assert store.load("k") == b"v"

    def test_ledger_repo_uses_configured_key(self, container):
        repo = container.ledger_repo()
        assert isinstance(repo, LedgerRepository)
        assert repo.key == "qa-matrix-data"
        assert repo.store is container.kv_store()

    def test_matcher_uses_configured_threshold(self, container):
        matcher = container.matcher()
        assert isinstance(matcher, FuzzyMatcher)
        assert matcher.threshold == 0.2

    def test_facade_singleton(self, container):
        facade = container.facade()
        assert isinstance(facade, QAMatrixFacade)
        assert facade is container.facade()

    def test_facade_persists_through_container_store(self, container, sample_concerns):
        container.facade().bulk_import(sample_concerns)
        assert len(container.ledger_repo().load()) == 3

    def test_facade_matches_with_configured_threshold(self, container):
        assert container.facade().match_threshold == 0.2

    def test_facade_threshold_override(self, container):
        container.matcher.override(providers.Factory(FuzzyMatcher, threshold=0.5))
        try:
            assert container.facade().match_threshold == 0.5
        finally:
            container.matcher.reset_override()
