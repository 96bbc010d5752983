"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Donner accès au conteneur applicatif (remplaçable en test via `dependency_overrides`).
- Appliquer la limitation de débit par IP pour un limiteur nommé.
- Authentifier l'administrateur (cookie de session ou en-tête Bearer) et renouveler le token
  lorsqu'il approche de l'expiration (en-tête `X-New-Token`, cookie reposé pour une session
  cookie).
"""

from collections.abc import Callable

from fastapi import Depends, Request, Response

from fortune_backend.apigw.errors import rate_limited, unauthorized
from fortune_backend.app.metrics import RATE_LIMIT_BLOCKS
from fortune_backend.core.container import Container, get_container
from fortune_backend.core.settings import Settings
from fortune_backend.domain.auth import (
    AdminTokenData,
    create_admin_token,
    decode_admin_token,
    refresh_token_if_needed,
)
from fortune_backend.infra.rate_limit import rate_limit_identifier

container_dep = Depends(get_container)


def rate_limit(name: str) -> Callable:
    """Construit une dépendance appliquant le limiteur `name`."""

    def dependency(request: Request, container: Container = container_dep) -> None:
        if not container.settings.RATE_LIMIT_ENABLED:
            return
        limiter = container.rate_limiters[name]
        result = limiter.hit(rate_limit_identifier(request, name))
        if not result.allowed:
            RATE_LIMIT_BLOCKS.labels(limiter=name).inc()
            raise rate_limited(
                "Rate limit exceeded. Try again later.", retry_after=result.retry_after
            )

    return dependency


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    """Pose le cookie de session administrateur (httponly, SameSite strict)."""
    response.set_cookie(
        settings.ADMIN_COOKIE_NAME,
        token,
        max_age=settings.JWT_EXPIRES_MIN * 60,
        httponly=True,
        secure=settings.ADMIN_COOKIE_SECURE,
        samesite="strict",
        path="/",
    )


def issue_session(response: Response, settings: Settings) -> str:
    """Crée un nouveau token administrateur et le pose en cookie."""
    token = create_admin_token(settings.JWT_SECRET, settings.JWT_ALG, settings.JWT_EXPIRES_MIN)
    set_session_cookie(response, settings, token)
    return token


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Token depuis le cookie de session (prioritaire) ou l'en-tête Authorization."""
    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


def require_admin(
    request: Request, response: Response, container: Container = container_dep
) -> AdminTokenData:
    """Valide la session administrateur ; 401 sinon."""
    s = container.settings
    token = extract_token(request, s.ADMIN_COOKIE_NAME)
    if not token:
        raise unauthorized("missing_token")
    data = decode_admin_token(token, s.JWT_SECRET, s.JWT_ALG)
    if data is None:
        raise unauthorized("invalid_token")
    new_token = refresh_token_if_needed(
        data, s.JWT_SECRET, s.JWT_ALG, s.JWT_EXPIRES_MIN, s.JWT_REFRESH_THRESHOLD_MIN
    )
    if new_token:
        response.headers["X-New-Token"] = new_token
        if request.cookies.get(s.ADMIN_COOKIE_NAME):
            set_session_cookie(response, s, new_token)
    return data
