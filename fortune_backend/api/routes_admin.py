"""
Routes d'administration : session, consultation et gestion des fortunes.

Toutes les routes sauf `/admin/login` exigent une session administrateur valide (cookie ou
Bearer) et passent par le limiteur `admin_ops`.
"""

import structlog
from fastapi import APIRouter, Depends, Query, Response

from fortune_backend.api.deps import container_dep, issue_session, rate_limit, require_admin
from fortune_backend.api.schemas import (
    ChangePasswordPayload,
    DeleteAllResponse,
    FortuneListResponse,
    LoginPayload,
    LoginResponse,
)
from fortune_backend.apigw.errors import (
    bad_request,
    not_found,
    service_unavailable,
    unauthorized,
)
from fortune_backend.app.metrics import ADMIN_LOGINS
from fortune_backend.core.container import Container
from fortune_backend.domain.analytics import FortuneStats
from fortune_backend.domain.auth import AdminTokenData
from fortune_backend.domain.entities import (
    AgeRange,
    BirthDay,
    BloodGroup,
    FortuneQuery,
    FortuneRecord,
    OrderBy,
    SortOrder,
)
from fortune_backend.domain.errors import (
    AdminPasswordNotConfigured,
    InvalidPasswordError,
    PasswordPolicyError,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

admin_dep = Depends(require_admin)
ops_rate_limit = Depends(rate_limit("admin_ops"))
login_rate_limit = Depends(rate_limit("admin_login"))


@router.post("/login", response_model=LoginResponse, dependencies=[login_rate_limit])
def login(payload: LoginPayload, response: Response, container: Container = container_dep):
    """
    Ouvre une session administrateur.

    Pose un cookie httponly et renvoie aussi le token pour les clients Bearer.
    401 si le mot de passe est incorrect, 503 si aucun mot de passe n'est configuré.
    """
    try:
        ok = container.admin_service.verify_password(payload.password)
    except AdminPasswordNotConfigured as exc:
        ADMIN_LOGINS.labels(result="unconfigured").inc()
        raise service_unavailable("Admin password is not configured") from exc
    if not ok:
        ADMIN_LOGINS.labels(result="failure").inc()
        log.warning("admin_login_failed")
        raise unauthorized("invalid_credentials")
    ADMIN_LOGINS.labels(result="success").inc()
    log.info("admin_login_succeeded")
    token = issue_session(response, container.settings)
    return LoginResponse(token=token, storage_mode=container.storage_backend)


@router.post("/logout")
def logout(response: Response, container: Container = container_dep):
    """Ferme la session en effaçant le cookie."""
    response.delete_cookie(container.settings.ADMIN_COOKIE_NAME, path="/")
    return {"ok": True}


@router.get("/verify", dependencies=[ops_rate_limit])
def verify(admin: AdminTokenData = admin_dep):
    """Confirme la validité de la session et renvoie son expiration."""
    return {"authenticated": True, "role": admin.role, "exp": admin.exp}


@router.get(
    "/fortunes", response_model=FortuneListResponse, dependencies=[ops_rate_limit, admin_dep]
)
def list_fortunes(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    order_by: OrderBy = Query("generated_at"),
    order: SortOrder = Query("desc"),
    email: str | None = Query(None),
    age_range: AgeRange | None = Query(None),
    birth_day: BirthDay | None = Query(None),
    blood_group: BloodGroup | None = Query(None),
    container: Container = container_dep,
):
    """
    Liste paginée et filtrée des fortunes.

    Paramètres:
    - limit / offset: pagination (1..500, défaut 50)
    - order_by: generated_at | email | lucky_number ; order: asc | desc
    - email: sous-chaîne insensible à la casse
    - age_range, birth_day, blood_group: égalité stricte
    """
    query = FortuneQuery(
        limit=limit,
        offset=offset,
        order_by=order_by,
        order=order,
        email=email,
        age_range=age_range,
        birth_day=birth_day,
        blood_group=blood_group,
    )
    records, count = container.admin_service.list_fortunes(query)
    return FortuneListResponse(
        data=records,
        count=count,
        limit=limit,
        offset=offset,
        storage_mode=container.storage_backend,
    )


@router.get(
    "/fortunes/recent",
    response_model=list[FortuneRecord],
    dependencies=[ops_rate_limit, admin_dep],
)
def recent_fortunes(
    limit: int = Query(10, ge=1, le=100), container: Container = container_dep
):
    return container.admin_service.recent(limit)


@router.delete("/fortunes/{fortune_id}", dependencies=[ops_rate_limit, admin_dep])
def delete_fortune(fortune_id: str, container: Container = container_dep):
    if not container.admin_service.delete(fortune_id):
        raise not_found(f"Fortune {fortune_id} not found")
    return {"deleted": fortune_id}


@router.delete(
    "/fortunes", response_model=DeleteAllResponse, dependencies=[ops_rate_limit, admin_dep]
)
def delete_all_fortunes(container: Container = container_dep):
    """Supprime toutes les fortunes (irréversible)."""
    return DeleteAllResponse(deleted=container.admin_service.clear_all())


@router.get("/export.csv", dependencies=[ops_rate_limit, admin_dep])
def export_csv(container: Container = container_dep) -> Response:
    """Export CSV de toutes les fortunes."""
    return Response(
        content=container.admin_service.export_csv(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="fortune-data.csv"'},
    )


@router.get("/analytics", response_model=FortuneStats, dependencies=[ops_rate_limit, admin_dep])
def analytics(container: Container = container_dep):
    return container.admin_service.analytics()


@router.post("/change-password", response_model=LoginResponse, dependencies=[ops_rate_limit])
def change_password(
    payload: ChangePasswordPayload,
    response: Response,
    admin: AdminTokenData = admin_dep,
    container: Container = container_dep,
):
    """
    Change le mot de passe administrateur et renouvelle la session.

    400 si le nouveau mot de passe est trop court, 401 si l'actuel est incorrect.
    """
    try:
        container.admin_service.change_password(payload.current_password, payload.new_password)
    except PasswordPolicyError as exc:
        raise bad_request(str(exc)) from exc
    except InvalidPasswordError as exc:
        raise unauthorized("invalid_current_password") from exc
    token = issue_session(response, container.settings)
    return LoginResponse(token=token, storage_mode=container.storage_backend)
