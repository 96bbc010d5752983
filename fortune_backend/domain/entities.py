"""
Entités du domaine métier.

Ce module définit les modèles de données manipulés par le générateur de fortune et la couche de
persistance : données utilisateur, résultat de fortune et enregistrement stocké.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AgeRange = Literal["<18", "18-25", "26-35", "36-45", "46-55", "55+"]
BirthDay = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
BloodGroup = Literal["A", "B", "AB", "O"]

AGE_RANGES: tuple[str, ...] = ("<18", "18-25", "26-35", "36-45", "46-55", "55+")
BIRTH_DAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
BLOOD_GROUPS: tuple[str, ...] = ("A", "B", "AB", "O")


class UserData(BaseModel):
    """Réponses d'un utilisateur au questionnaire.

    Les trois champs catégoriels restent des chaînes libres : la validation d'appartenance aux
    énumérations est faite par la couche HTTP, le générateur se contente d'appliquer ses valeurs
    par défaut.
    """

    email: str
    age_range: str
    birth_day: str
    blood_group: str


class FortuneResult(BaseModel):
    """Fortune calculée pour un triplet (tranche d'âge, jour de naissance, groupe sanguin)."""

    model_config = ConfigDict(frozen=True)

    lucky_number: int
    relationship: str
    work: str
    health: str
    generated_at: str


class FortuneRecord(BaseModel):
    """Fortune persistée, indexée par email."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_data: UserData
    fortune: FortuneResult
    timestamp: str


def normalize_email(email: str) -> str:
    """Forme canonique d'un email utilisée comme clé d'unicité."""
    return email.strip().lower()


OrderBy = Literal["generated_at", "email", "lucky_number"]
SortOrder = Literal["asc", "desc"]


class FortuneQuery(BaseModel):
    """Critères de pagination, tri et filtre pour la liste d'administration."""

    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    order_by: OrderBy = "generated_at"
    order: SortOrder = "desc"
    email: str | None = None  # sous-chaîne, insensible à la casse
    age_range: str | None = None
    birth_day: str | None = None
    blood_group: str | None = None
