"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares, gestion d'erreurs,
routes et métriques du service de fortunes.

Responsabilités du module:
- Initialiser le logging structuré
- Valider l'environnement (bloquant en production)
- Ajouter les middlewares (contexte de requête, métriques, CORS)
- Monter les routers (santé, fortune, administration, métriques)
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fortune_backend.api.routes_admin import router as admin_router
from fortune_backend.api.routes_fortune import router as fortune_router
from fortune_backend.api.routes_health import router as health_router
from fortune_backend.apigw.errors import register_error_handlers
from fortune_backend.app.metrics import PrometheusMiddleware, metrics_router
from fortune_backend.core.environment import validate_environment
from fortune_backend.core.logging import setup_logging
from fortune_backend.core.settings import Settings, get_settings
from fortune_backend.middlewares.request_context import RequestContextMiddleware

log = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit et valide les paramètres d'exécution
    - Ajoute les middlewares et les gestionnaires d'erreurs
    - Publie les routes

    Le conteneur (stockage, tables de messages) est créé à la première requête.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    report = validate_environment(settings)
    for warning in report.warnings:
        log.warning("environment_warning", message=warning)
    if not report.is_valid:
        for error in report.errors:
            log.error("environment_error", message=error)
        if settings.is_production:
            raise RuntimeError("Invalid production environment: " + "; ".join(report.errors))

    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(o).rstrip("/") for o in settings.CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-New-Token", "X-Request-ID"],
        )
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(fortune_router)
    app.include_router(admin_router)
    app.include_router(metrics_router)
    return app


app = create_app()
