# ============================================================
# Module : fortune_backend/infra/repo/fortune_repo.py
# Objet  : Dépôts de fortunes (SQL et mémoire), clé d'unicité = email.
# ============================================================

from __future__ import annotations

import threading
import uuid
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...domain.entities import FortuneQuery, FortuneRecord, FortuneResult, UserData
from ...domain.errors import DuplicateEmailError
from .db import session_scope
from .models import Base, FortuneORM

_ORDER_COLUMNS = {
    "generated_at": FortuneORM.generated_at,
    "email": FortuneORM.email,
    "lucky_number": FortuneORM.lucky_number,
}


def _to_record(row: FortuneORM) -> FortuneRecord:
    return FortuneRecord(
        id=row.id,
        user_data=UserData(
            email=row.email,
            age_range=row.age_range,
            birth_day=row.birth_day,
            blood_group=row.blood_group,
        ),
        fortune=FortuneResult(
            lucky_number=row.lucky_number,
            relationship=row.relationship,
            work=row.work,
            health=row.health,
            generated_at=row.generated_at,
        ),
        timestamp=row.generated_at,
    )


def _new_record(user_data: UserData, fortune: FortuneResult) -> FortuneRecord:
    return FortuneRecord(
        id=str(uuid.uuid4()),
        user_data=user_data,
        fortune=fortune,
        timestamp=fortune.generated_at,
    )


class SQLFortuneRepo:
    """Dépôt SQLAlchemy (Postgres hébergé ou SQLite local)."""

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        """Construit le dépôt ; crée les tables manquantes si `create_schema`."""
        self.engine = engine
        if create_schema:
            Base.metadata.create_all(engine)

    def _filtered(self, stmt, query: FortuneQuery):
        if query.email:
            stmt = stmt.where(
                func.lower(FortuneORM.email).contains(query.email.lower(), autoescape=True)
            )
        if query.age_range:
            stmt = stmt.where(FortuneORM.age_range == query.age_range)
        if query.birth_day:
            stmt = stmt.where(FortuneORM.birth_day == query.birth_day)
        if query.blood_group:
            stmt = stmt.where(FortuneORM.blood_group == query.blood_group)
        return stmt

    def save(self, user_data: UserData, fortune: FortuneResult) -> FortuneRecord:
        """Insère une fortune. Lève DuplicateEmailError si l'email existe déjà."""
        record = _new_record(user_data, fortune)
        row = FortuneORM(
            id=record.id,
            email=user_data.email,
            age_range=user_data.age_range,
            birth_day=user_data.birth_day,
            blood_group=user_data.blood_group,
            lucky_number=fortune.lucky_number,
            relationship=fortune.relationship,
            work=fortune.work,
            health=fortune.health,
            generated_at=fortune.generated_at,
        )
        try:
            with session_scope(self.engine) as session:
                session.add(row)
        except IntegrityError as err:
            raise DuplicateEmailError(user_data.email) from err
        return record

    def get(self, fortune_id: str) -> FortuneRecord | None:
        """Retourne une fortune par identifiant."""
        with session_scope(self.engine) as session:
            row = session.get(FortuneORM, fortune_id)
            return _to_record(row) if row else None

    def get_by_email(self, email: str) -> FortuneRecord | None:
        """Retourne la fortune associée à un email."""
        stmt = select(FortuneORM).where(FortuneORM.email == email)
        with session_scope(self.engine) as session:
            row = session.execute(stmt).scalars().first()
            return _to_record(row) if row else None

    def list(self, query: FortuneQuery) -> list[FortuneRecord]:
        """Page de fortunes triée et filtrée."""
        column = _ORDER_COLUMNS[query.order_by]
        ordering = column.desc() if query.order == "desc" else column.asc()
        stmt = (
            self._filtered(select(FortuneORM), query)
            .order_by(ordering, FortuneORM.id)
            .limit(query.limit)
            .offset(query.offset)
        )
        with session_scope(self.engine) as session:
            return [_to_record(r) for r in session.execute(stmt).scalars().all()]

    def count(self, query: FortuneQuery | None = None) -> int:
        """Nombre de fortunes correspondant aux filtres."""
        stmt = select(func.count()).select_from(FortuneORM)
        if query is not None:
            stmt = self._filtered(stmt, query)
        with session_scope(self.engine) as session:
            return int(session.execute(stmt).scalar_one())

    def all(self) -> list[FortuneRecord]:
        """Toutes les fortunes, plus récentes d'abord."""
        stmt = select(FortuneORM).order_by(FortuneORM.generated_at.desc(), FortuneORM.id)
        with session_scope(self.engine) as session:
            return [_to_record(r) for r in session.execute(stmt).scalars().all()]

    def delete(self, fortune_id: str) -> bool:
        """Supprime une fortune ; False si absente."""
        with session_scope(self.engine) as session:
            result = session.execute(delete(FortuneORM).where(FortuneORM.id == fortune_id))
            return result.rowcount > 0

    def clear(self) -> int:
        """Supprime toutes les fortunes et retourne le nombre de lignes supprimées."""
        with session_scope(self.engine) as session:
            return session.execute(delete(FortuneORM)).rowcount

    def ping(self) -> str:
        """Teste la connexion : `SUCCESS` ou `ERROR: ...`."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as err:
            return f"ERROR: {err.__class__.__name__}"
        return "SUCCESS"


class InMemoryFortuneRepo:
    """
    Dépôt de fortunes en mémoire (utilisé pour dev/tests).

    Stocke les enregistrements dans un dict local, non persistant.
    """

    def __init__(self) -> None:
        """Initialise une base mémoire vide."""
        self._db: dict[str, FortuneRecord] = {}
        self._lock = threading.Lock()

    def _matches(self, r: FortuneRecord, query: FortuneQuery) -> bool:
        u = r.user_data
        if query.email and query.email.lower() not in u.email.lower():
            return False
        if query.age_range and u.age_range != query.age_range:
            return False
        if query.birth_day and u.birth_day != query.birth_day:
            return False
        return not (query.blood_group and u.blood_group != query.blood_group)

    @staticmethod
    def _sort_key(query: FortuneQuery):
        def key(r: FortuneRecord) -> Any:
            if query.order_by == "email":
                return r.user_data.email
            if query.order_by == "lucky_number":
                return r.fortune.lucky_number
            return r.fortune.generated_at

        return key

    def save(self, user_data: UserData, fortune: FortuneResult) -> FortuneRecord:
        """Enregistre une fortune. Lève DuplicateEmailError si l'email existe déjà."""
        with self._lock:
            if self.get_by_email(user_data.email) is not None:
                raise DuplicateEmailError(user_data.email)
            record = _new_record(user_data, fortune)
            self._db[record.id] = record
        return record

    def get(self, fortune_id: str) -> FortuneRecord | None:
        """Retourne une fortune par id, ou None si absente."""
        return self._db.get(fortune_id)

    def get_by_email(self, email: str) -> FortuneRecord | None:
        """Recherche une fortune par email."""
        return next((r for r in self._db.values() if r.user_data.email == email), None)

    def list(self, query: FortuneQuery) -> list[FortuneRecord]:
        """Page de fortunes triée et filtrée."""
        rows = sorted(
            (r for r in self._db.values() if self._matches(r, query)), key=lambda r: r.id
        )
        rows.sort(key=self._sort_key(query), reverse=query.order == "desc")
        return rows[query.offset : query.offset + query.limit]

    def count(self, query: FortuneQuery | None = None) -> int:
        """Nombre de fortunes correspondant aux filtres."""
        if query is None:
            return len(self._db)
        return sum(1 for r in self._db.values() if self._matches(r, query))

    def all(self) -> list[FortuneRecord]:
        """Toutes les fortunes, plus récentes d'abord."""
        return sorted(self._db.values(), key=lambda r: r.fortune.generated_at, reverse=True)

    def delete(self, fortune_id: str) -> bool:
        """Supprime une fortune ; False si absente."""
        return self._db.pop(fortune_id, None) is not None

    def clear(self) -> int:
        """Vide la base et retourne le nombre d'enregistrements supprimés."""
        count = len(self._db)
        self._db.clear()
        return count

    def ping(self) -> str:
        """Toujours disponible."""
        return "SUCCESS"
