"""Tests pour les chemins de configuration du container.

Ce module vérifie le choix du stockage (mémoire, SQLite, base hébergée avec repli) et du backend
de limitation de débit selon les settings.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from fortune_backend.core import container as container_mod
from fortune_backend.core.container import Container
from fortune_backend.infra.rate_limit import InMemoryRateLimiter, RedisRateLimiter
from fortune_backend.infra.repo.fortune_repo import InMemoryFortuneRepo, SQLFortuneRepo
from tests.fakes import make_settings


def _unreachable(*_args, **_kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_container_memory_path(tables) -> None:
    c = Container(make_settings(), tables)
    assert c.storage_backend == "memory"
    assert isinstance(c.fortune_repo, InMemoryFortuneRepo)
    assert c.rate_limit_backend == "memory"
    assert isinstance(c.rate_limiters["fortune"], InMemoryRateLimiter)


def test_container_sqlite_path(tmp_path, tables) -> None:
    db = tmp_path / "data" / "local.db"
    c = Container(make_settings(STORAGE_BACKEND="sqlite", SQLITE_PATH=str(db)), tables)
    assert c.storage_backend == "sqlite"
    assert isinstance(c.fortune_repo, SQLFortuneRepo)
    assert db.exists()


def test_container_falls_back_to_sqlite(monkeypatch, tmp_path, tables) -> None:
    original = container_mod.get_engine

    def engine_for(url=None):
        if url and url.startswith("postgresql"):
            _unreachable()
        return original(url)

    monkeypatch.setattr(container_mod, "get_engine", engine_for)
    settings = make_settings(
        STORAGE_BACKEND="auto",
        DATABASE_URL="postgresql://u:p@db.invalid/fortunes",
        SQLITE_PATH=str(tmp_path / "fallback.db"),
    )
    c = Container(settings, tables)
    assert c.storage_backend == "sqlite-fallback"
    assert c.fortune_repo.ping() == "SUCCESS"


def test_container_require_database_raises(monkeypatch, tables) -> None:
    monkeypatch.setattr(container_mod, "get_engine", _unreachable)
    settings = make_settings(
        STORAGE_BACKEND="sql",
        DATABASE_URL="postgresql://u:p@db.invalid/fortunes",
        REQUIRE_DATABASE=True,
    )
    with pytest.raises(RuntimeError):
        Container(settings, tables)


def test_container_redis_rate_limiters(tables) -> None:
    c = Container(make_settings(REDIS_URL="redis://localhost:6379/0"), tables)
    assert c.rate_limit_backend == "redis"
    assert isinstance(c.rate_limiters["admin_login"], RedisRateLimiter)


def test_container_loads_bundled_tables() -> None:
    c = Container(make_settings())
    assert c.tables.relationship_messages["Monday"]
