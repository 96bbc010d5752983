"""Détection et validation de l'environnement d'exécution.

Résume la configuration effective (production ou non, secrets présents, base hébergée
configurée) et signale les combinaisons dangereuses au démarrage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fortune_backend.core.settings import DEFAULT_JWT_SECRET, Settings


@dataclass
class EnvironmentInfo:
    """Vue synthétique de l'environnement."""

    app_env: str
    is_production: bool
    has_jwt_secret: bool
    has_admin_password: bool
    has_database_url: bool
    has_redis: bool


@dataclass
class EnvironmentReport:
    """Résultat de la validation de l'environnement."""

    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def get_environment_info(settings: Settings) -> EnvironmentInfo:
    """Construit la vue synthétique à partir des settings."""
    return EnvironmentInfo(
        app_env=settings.APP_ENV,
        is_production=settings.is_production,
        has_jwt_secret=bool(settings.JWT_SECRET) and settings.JWT_SECRET != DEFAULT_JWT_SECRET,
        has_admin_password=bool(settings.ADMIN_PASSWORD or settings.ADMIN_PASSWORD_HASH),
        has_database_url=bool(settings.DATABASE_URL),
        has_redis=bool(settings.REDIS_URL),
    )


def validate_environment(settings: Settings) -> EnvironmentReport:
    """Vérifie la cohérence de la configuration.

    Erreurs (bloquantes en production): secret JWT par défaut.
    Avertissements: pas de source de mot de passe administrateur, production sans base hébergée,
    base hébergée ignorée par un stockage forcé.
    """
    info = get_environment_info(settings)
    report = EnvironmentReport()
    if not info.has_jwt_secret:
        msg = "JWT_SECRET is not set (using development default)"
        if info.is_production:
            report.errors.append(msg)
        else:
            report.warnings.append(msg)
    if not info.has_admin_password:
        report.warnings.append(
            "ADMIN_PASSWORD / ADMIN_PASSWORD_HASH not set; admin login needs a stored hash"
        )
    if info.is_production and not info.has_database_url:
        report.warnings.append("DATABASE_URL missing in production; using local SQLite")
    if info.has_database_url and settings.STORAGE_BACKEND in ("sqlite", "memory"):
        report.warnings.append(
            f"DATABASE_URL ignored because STORAGE_BACKEND={settings.STORAGE_BACKEND}"
        )
    return report


def resolve_storage_mode(settings: Settings) -> str:
    """Mode de stockage demandé : `sql`, `sqlite` ou `memory`."""
    if settings.STORAGE_BACKEND == "auto":
        return "sql" if settings.DATABASE_URL else "sqlite"
    if settings.STORAGE_BACKEND == "sql" and not settings.DATABASE_URL:
        return "sqlite"
    return settings.STORAGE_BACKEND
