"""SQLAlchemy models for persistence layer (fortunes, admin config)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class FortuneORM(Base):
    """Fortune persistée ; l'email est unique (une fortune par email)."""

    __tablename__ = "fortunes"

    id = Column(String(36), primary_key=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    age_range = Column(String(16), nullable=False)
    birth_day = Column(String(16), nullable=False)
    blood_group = Column(String(4), nullable=False)
    lucky_number = Column(Integer, nullable=False)
    relationship = Column(Text, nullable=False)
    work = Column(Text, nullable=False)
    health = Column(Text, nullable=False)
    generated_at = Column(String(32), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class AdminConfigORM(Base):
    """Configuration administrateur (hash du mot de passe)."""

    __tablename__ = "admin_config"

    id = Column(String(36), primary_key=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
