"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-secret-change-me"


def resolve_env_file() -> Path:
    """Détermine le fichier .env à utiliser.

    Priorité:
    1) ENV_FILE (chemin explicite)
    2) .env.{APP_ENV} si présent
    3) .env (défaut)
    """
    env_file_from_env = os.getenv("ENV_FILE")
    if env_file_from_env:
        return Path(env_file_from_env)
    cwd = Path.cwd()
    candidate_specific = cwd / f".env.{os.getenv('APP_ENV', 'dev')}"
    if candidate_specific.exists():
        return candidate_specific
    return cwd / ".env"


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )
    APP_NAME: str = "fortune-backend"
    APP_ENV: str = "dev"  # dev | test | prod
    APP_DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    CORS_ORIGINS: list[AnyHttpUrl] | list[str] = []

    # Stockage
    STORAGE_BACKEND: Literal["auto", "sql", "sqlite", "memory"] = "auto"
    DATABASE_URL: str | None = None  # Postgres hébergé, ex. postgresql+psycopg://...
    SQLITE_PATH: str = "./data/local.db"
    REQUIRE_DATABASE: bool = False
    REDIS_URL: str | None = None
    FORTUNE_DATA_DIR: str | None = None

    # JWT/Auth
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MIN: int = 24 * 60
    JWT_REFRESH_THRESHOLD_MIN: int = 60
    ADMIN_PASSWORD: str | None = None
    ADMIN_PASSWORD_HASH: str | None = None
    ADMIN_PASSWORD_MIN_LENGTH: int = 6
    ADMIN_COOKIE_NAME: str = "admin_session"
    ADMIN_COOKIE_SECURE: bool = False

    # Rate limit (requêtes, fenêtre en secondes)
    RATE_LIMIT_ENABLED: bool = True
    RL_FORTUNE_MAX: int = 10
    RL_FORTUNE_WINDOW_S: int = 10
    RL_ADMIN_LOGIN_MAX: int = 5
    RL_ADMIN_LOGIN_WINDOW_S: int = 15 * 60
    RL_ADMIN_OPS_MAX: int = 30
    RL_ADMIN_OPS_WINDOW_S: int = 60

    # Logs
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def is_production(self) -> bool:
        """Vrai en environnement de production."""
        return self.APP_ENV.lower() in ("prod", "production")


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings(_env_file=resolve_env_file())
