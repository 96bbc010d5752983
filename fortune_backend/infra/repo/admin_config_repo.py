"""Dépôts de configuration administrateur (hash du mot de passe)."""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine

from .db import session_scope
from .models import AdminConfigORM, Base


class SQLAdminConfigRepo:
    """Configuration administrateur en base : une seule ligne active."""

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            Base.metadata.create_all(engine)

    def get_password_hash(self) -> str | None:
        """Hash le plus récent, ou None si aucun n'a été enregistré."""
        stmt = select(AdminConfigORM.password_hash).order_by(AdminConfigORM.created_at.desc())
        with session_scope(self.engine) as session:
            return session.execute(stmt.limit(1)).scalars().first()

    def set_password_hash(self, password_hash: str) -> None:
        """Remplace la configuration existante par un nouveau hash."""
        with session_scope(self.engine) as session:
            session.execute(delete(AdminConfigORM))
            session.add(AdminConfigORM(id=str(uuid.uuid4()), password_hash=password_hash))


class InMemoryAdminConfigRepo:
    """Configuration administrateur en mémoire (dev/tests)."""

    def __init__(self, password_hash: str | None = None) -> None:
        self._hash = password_hash

    def get_password_hash(self) -> str | None:
        return self._hash

    def set_password_hash(self, password_hash: str) -> None:
        self._hash = password_hash
