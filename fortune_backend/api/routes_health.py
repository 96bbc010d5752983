"""
Endpoint de santé pour vérifier la disponibilité de l'API et du backend.

Expose `/health` pour signaler l'état général de l'application, du stockage et de la base.
"""

from dataclasses import asdict
from datetime import UTC, datetime

from fastapi import APIRouter

from fortune_backend.api.deps import container_dep
from fortune_backend.core.container import Container
from fortune_backend.core.environment import get_environment_info

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: Container = container_dep):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    database = container.fortune_repo.ping()
    return {
        "status": "ok" if database == "SUCCESS" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": asdict(get_environment_info(container.settings)),
        "storage": container.storage_backend,
        "rate_limit": container.rate_limit_backend,
        "database": database,
    }
