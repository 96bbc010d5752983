"""
Routes publiques de fortune : recherche par email et génération.

Une seule fortune par email : une seconde soumission ne régénère jamais, elle renvoie 409 avec
la fortune déjà enregistrée.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr, TypeAdapter, ValidationError

from fortune_backend.api.deps import container_dep, rate_limit
from fortune_backend.api.schemas import (
    FortuneCheckResponse,
    FortuneCreatedResponse,
    FortuneRequest,
)
from fortune_backend.apigw.errors import bad_request, conflict
from fortune_backend.app.metrics import FORTUNE_DUPLICATES, FORTUNES_GENERATED
from fortune_backend.core.container import Container
from fortune_backend.domain.errors import FortuneAlreadyExists

router = APIRouter(prefix="/fortune", tags=["fortune"])
fortune_rate_limit = Depends(rate_limit("fortune"))

_email_adapter = TypeAdapter(EmailStr)


@router.get("", response_model=FortuneCheckResponse)
def check_email(email: str | None = Query(None), container: Container = container_dep):
    """
    Indique si une fortune existe déjà pour un email et la renvoie le cas échéant.

    Paramètres:
    - email: adresse à rechercher (obligatoire, syntaxe validée).
    """
    if not email:
        raise bad_request("Email is required")
    try:
        _email_adapter.validate_python(email)
    except ValidationError as err:
        raise bad_request("Invalid email address") from err
    record = container.fortune_service.check_email(email)
    return FortuneCheckResponse(exists=record is not None, fortune=record)


@router.post("", response_model=FortuneCreatedResponse, dependencies=[fortune_rate_limit])
def create_fortune(payload: FortuneRequest, container: Container = container_dep):
    """
    Génère et enregistre la fortune d'un nouvel email.

    Retour: `FortuneCreatedResponse` (id et fortune). 409 si l'email a déjà une fortune, avec
    `details.existing_fortune`.
    """
    try:
        record = container.fortune_service.submit(payload.to_user_data())
    except FortuneAlreadyExists as exc:
        FORTUNE_DUPLICATES.inc()
        raise conflict(
            "A fortune already exists for this email",
            details={"existing_fortune": exc.record.model_dump()},
        ) from exc
    FORTUNES_GENERATED.inc()
    return FortuneCreatedResponse(id=record.id, fortune=record.fortune)
