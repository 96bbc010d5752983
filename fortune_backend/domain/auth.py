"""
Module d'authentification administrateur.

Ce module fournit le hachage des mots de passe (PBKDF2 via passlib) et la création/validation des
tokens JWT de session administrateur, avec renouvellement lorsque l'expiration approche.
"""

from datetime import UTC, datetime, timedelta

import jwt
from jwt import InvalidTokenError
from passlib.context import CryptContext
from pydantic import BaseModel

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ADMIN_ROLE = "admin"


class AdminTokenData(BaseModel):
    """Données contenues dans un token JWT administrateur."""

    sub: str
    role: str
    iat: int
    exp: int


def hash_password(p: str) -> str:
    """Hache un mot de passe en utilisant PBKDF2."""
    return pwd_context.hash(p)


def verify_password(p: str, h: str) -> bool:
    """Vérifie un mot de passe contre son hash (False si le hash est illisible)."""
    try:
        return pwd_context.verify(p, h)
    except ValueError:
        return False


def create_admin_token(secret: str, alg: str, expires_min: int) -> str:
    """Crée un token JWT administrateur avec expiration."""
    now = datetime.now(UTC)
    payload = {
        "sub": ADMIN_ROLE,
        "role": ADMIN_ROLE,
        "iat": now,
        "exp": now + timedelta(minutes=expires_min),
    }
    return jwt.encode(payload, secret, algorithm=alg)


def decode_admin_token(token: str, secret: str, alg: str) -> AdminTokenData | None:
    """Décode et valide un token ; None s'il est invalide, expiré ou non administrateur."""
    try:
        data = jwt.decode(token, secret, algorithms=[alg])
    except InvalidTokenError:
        return None
    if data.get("role") != ADMIN_ROLE:
        return None
    return AdminTokenData(**data)


def is_token_expiring_soon(
    data: AdminTokenData, threshold_min: int, now: datetime | None = None
) -> bool:
    """Indique si le token expire dans moins de `threshold_min` minutes."""
    now_ts = int((now or datetime.now(UTC)).timestamp())
    return data.exp - now_ts < threshold_min * 60


def refresh_token_if_needed(
    data: AdminTokenData, secret: str, alg: str, expires_min: int, threshold_min: int
) -> str | None:
    """Retourne un nouveau token si l'actuel est proche de l'expiration, sinon None."""
    if is_token_expiring_soon(data, threshold_min):
        return create_admin_token(secret, alg, expires_min)
    return None
