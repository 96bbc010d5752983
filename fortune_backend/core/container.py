"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, tables de messages, générateur, dépôts, limiteurs)
et expose `get_container()` utilisé par les routes via `Depends`.
"""

from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError

from fortune_backend.core.environment import resolve_storage_mode
from fortune_backend.core.settings import Settings, get_settings
from fortune_backend.domain.fortune_generator import FortuneGenerator
from fortune_backend.domain.message_tables import MessageTables
from fortune_backend.domain.services import AdminService, FortuneService
from fortune_backend.infra.content_repo import JSONMessageTableRepository
from fortune_backend.infra.rate_limit import InMemoryRateLimiter, RedisRateLimiter
from fortune_backend.infra.repo.admin_config_repo import (
    InMemoryAdminConfigRepo,
    SQLAdminConfigRepo,
)
from fortune_backend.infra.repo.db import get_engine, sqlite_url
from fortune_backend.infra.repo.fortune_repo import InMemoryFortuneRepo, SQLFortuneRepo

log = structlog.get_logger(__name__)


class Container:
    def __init__(self, settings: Settings | None = None, tables: MessageTables | None = None):
        self.settings = settings or get_settings()
        self.tables = tables or JSONMessageTableRepository(self.settings.FORTUNE_DATA_DIR).load()
        self.generator = FortuneGenerator(self.tables)
        self._init_storage()
        self._init_rate_limiters()
        self.fortune_service = FortuneService(self.generator, self.fortune_repo)
        self.admin_service = AdminService(
            self.fortune_repo,
            self.admin_config_repo,
            password_min_length=self.settings.ADMIN_PASSWORD_MIN_LENGTH,
            bootstrap_password=self.settings.ADMIN_PASSWORD,
            bootstrap_hash=self.settings.ADMIN_PASSWORD_HASH,
        )

    def _use_sqlite(self) -> None:
        engine = get_engine(sqlite_url(self.settings.SQLITE_PATH))
        self.fortune_repo = SQLFortuneRepo(engine)
        self.admin_config_repo = SQLAdminConfigRepo(engine)

    def _init_storage(self) -> None:
        mode = resolve_storage_mode(self.settings)
        if mode == "memory":
            self.fortune_repo = InMemoryFortuneRepo()
            self.admin_config_repo = InMemoryAdminConfigRepo()
            self.storage_backend = "memory"
        elif mode == "sql":
            try:
                engine = get_engine(self.settings.DATABASE_URL)
                self.fortune_repo = SQLFortuneRepo(engine)
                self.admin_config_repo = SQLAdminConfigRepo(engine)
                self.storage_backend = "sql"
            except SQLAlchemyError as err:
                if self.settings.REQUIRE_DATABASE:
                    raise RuntimeError("Database required but unavailable") from err
                log.warning("database_unavailable_fallback_sqlite", error=str(err))
                self._use_sqlite()
                self.storage_backend = "sqlite-fallback"
        else:
            self._use_sqlite()
            self.storage_backend = "sqlite"
        log.info("storage_selected", backend=self.storage_backend)

    def _init_rate_limiters(self) -> None:
        s = self.settings
        specs = {
            "fortune": (s.RL_FORTUNE_MAX, s.RL_FORTUNE_WINDOW_S),
            "admin_login": (s.RL_ADMIN_LOGIN_MAX, s.RL_ADMIN_LOGIN_WINDOW_S),
            "admin_ops": (s.RL_ADMIN_OPS_MAX, s.RL_ADMIN_OPS_WINDOW_S),
        }
        if s.REDIS_URL:
            self.rate_limiters = {
                name: RedisRateLimiter.from_url(name, max_req, window, s.REDIS_URL)
                for name, (max_req, window) in specs.items()
            }
            self.rate_limit_backend = "redis"
        else:
            self.rate_limiters = {
                name: InMemoryRateLimiter(name, max_req, window)
                for name, (max_req, window) in specs.items()
            }
            self.rate_limit_backend = "memory"


_container: Container | None = None


def get_container() -> Container:
    """Retourne le conteneur de l'application, créé au premier appel."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container | None) -> None:
    """Remplace (ou réinitialise avec None) le conteneur global."""
    global _container
    _container = container
