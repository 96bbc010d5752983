"""DB utilities for SQLAlchemy sessions/engine.

Uses `DATABASE_URL` env var or falls back to `sqlite+pysqlite:///:memory:` for tests.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def sqlite_url(path: str) -> str:
    """URL SQLAlchemy d'une base SQLite fichier."""
    return f"sqlite+pysqlite:///{path}"


def get_engine(url: str | None = None) -> Engine:
    """Crée un moteur SQLAlchemy à partir de l'URL de base de données.

    Pour SQLite, le répertoire parent du fichier est créé au besoin ; une base `:memory:` partage
    une connexion unique afin que toutes les sessions voient les mêmes tables.
    """
    db_url = url or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, future=True, echo=False, pool_pre_ping=True)

    database = make_url(db_url).database
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if not database or database == ":memory:":
        kwargs["poolclass"] = StaticPool
    else:
        parent = os.path.dirname(os.path.abspath(database))
        os.makedirs(parent, exist_ok=True)
    return create_engine(db_url, future=True, echo=False, **kwargs)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Contexte de session SQLAlchemy avec gestion automatique des transactions.

    Commit en sortie normale, rollback puis propagation de l'exception sinon.
    """
    SessionLocal = get_session_factory(engine)
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
