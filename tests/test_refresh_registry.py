"""Tests for the refresh token registries."""
import threading

import pytest

from models.db_storage import DBStorage
from models.refresh_registry import (
    DatabaseRefreshTokenRegistry,
    InMemoryRefreshTokenRegistry,
    token_digest,
)
from models.refresh_token import RefreshToken


@pytest.fixture
def db_registry():
    storage = DBStorage("sqlite://")
    storage.reload()
    yield DatabaseRefreshTokenRegistry(storage)
    storage.close()


@pytest.fixture(params=["memory", "database"])
def any_registry(request):
    if request.param == "memory":
        return InMemoryRefreshTokenRegistry()
    return request.getfixturevalue("db_registry")


class TestRegistryContract:
    def test_add_then_contains(self, any_registry):
        any_registry.add("rt-123")

        assert any_registry.contains("rt-123")
        assert "rt-123" in any_registry
        assert not any_registry.contains("rt-456")

    def test_remove(self, any_registry):
        any_registry.add("rt-123")
        any_registry.remove("rt-123")

        assert not any_registry.contains("rt-123")

    def test_remove_absent_is_noop(self, any_registry):
        any_registry.add("rt-123")
        any_registry.remove("unknown")
        any_registry.remove("unknown")

        assert any_registry.contains("rt-123")

    def test_add_is_idempotent(self, any_registry):
        any_registry.add("rt-123")
        any_registry.add("rt-123")
        any_registry.remove("rt-123")

        assert not any_registry.contains("rt-123")


def test_registries_are_independent():
    first = InMemoryRefreshTokenRegistry()
    second = InMemoryRefreshTokenRegistry()
    first.add("rt-123")

    assert not second.contains("rt-123")


def test_database_registry_stores_digest_only(db_registry):
    db_registry.add("rt-secret-value")
    session = db_registry._session()

    rows = session.query(RefreshToken).all()

    assert [r.token_hash for r in rows] == [token_digest("rt-secret-value")]


def test_concurrent_contains_and_remove():
    registry = InMemoryRefreshTokenRegistry(f"rt-{i}" for i in range(200))
    errors = []

    def worker():
        try:
            for i in range(200):
                token = f"rt-{i}"
                if registry.contains(token):
                    registry.remove(token)
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(registry) == 0


def test_database_concurrent_contains_and_remove(tmp_path):
    storage = DBStorage(f"sqlite:///{tmp_path / 'registry.db'}")
    storage.reload()
    registry = DatabaseRefreshTokenRegistry(storage)
    tokens = [f"rt-{i}" for i in range(40)]
    for token in tokens:
        registry.add(token)
    storage.close()
    errors = []

    def worker():
        try:
            for token in tokens:
                if registry.contains(token):
                    registry.remove(token)
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)
        finally:
            storage.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert not any(registry.contains(token) for token in tokens)
    assert storage.get_session().query(RefreshToken).count() == 0
    storage.close()
