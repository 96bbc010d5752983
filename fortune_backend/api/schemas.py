# Schémas Pydantic exposés par l'API (requêtes et réponses).

from pydantic import BaseModel, EmailStr, Field

from fortune_backend.domain.entities import (
    AgeRange,
    BirthDay,
    BloodGroup,
    FortuneRecord,
    FortuneResult,
    UserData,
)


class FortuneRequest(BaseModel):
    """Formulaire de demande de fortune.

    Champs:
    - email: adresse email valide (clé d'unicité)
    - age_range: "<18" | "18-25" | "26-35" | "36-45" | "46-55" | "55+"
    - birth_day: jour de la semaine de naissance, en anglais ("Monday"...)
    - blood_group: "A" | "B" | "AB" | "O"
    """

    email: EmailStr
    age_range: AgeRange
    birth_day: BirthDay
    blood_group: BloodGroup

    def to_user_data(self) -> UserData:
        return UserData(**self.model_dump())


class FortuneCheckResponse(BaseModel):
    """Résultat de la recherche d'une fortune existante pour un email."""

    exists: bool
    fortune: FortuneRecord | None = None


class FortuneCreatedResponse(BaseModel):
    """Fortune nouvellement générée et enregistrée."""

    id: str
    fortune: FortuneResult


class LoginPayload(BaseModel):
    """Payload de connexion administrateur."""

    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    """Token de session administrateur."""

    token: str
    token_type: str = "bearer"
    storage_mode: str


class ChangePasswordPayload(BaseModel):
    """Changement du mot de passe administrateur."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class FortuneListResponse(BaseModel):
    """Page de fortunes pour le tableau de bord.

    Champs:
    - data: fortunes de la page
    - count: nombre total correspondant aux filtres
    - limit / offset: pagination appliquée
    - storage_mode: backend de stockage actif
    """

    data: list[FortuneRecord]
    count: int
    limit: int
    offset: int
    storage_mode: str


class DeleteAllResponse(BaseModel):
    deleted: int
