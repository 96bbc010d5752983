"""
Limitation de débit par fenêtre fixe.

Ce module fournit deux implémentations interchangeables :
- `InMemoryRateLimiter` pour le développement (non partagé entre processus);
- `RedisRateLimiter` pour la production multi-instances (INCR + PEXPIRE NX dans une même
  transaction MULTI/EXEC, Redis >= 7).

Chaque limiteur est nommé et appliqué par identifiant `"<nom>:<ip cliente>"`.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass

import redis
import structlog
from redis.exceptions import RedisError
from starlette.requests import Request

log = structlog.get_logger(__name__)


@dataclass
class RateLimitResult:
    """Résultat d'une vérification de rate limit."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int | None = None


def _result(count: int, limit: int, reset_at: float, now: float) -> RateLimitResult:
    allowed = count <= limit
    return RateLimitResult(
        allowed=allowed,
        limit=limit,
        remaining=max(0, limit - count),
        reset_at=reset_at,
        retry_after=None if allowed else max(1, math.ceil(reset_at - now)),
    )


class InMemoryRateLimiter:
    """Limiteur en mémoire : compteur par identifiant, remis à zéro à chaque fenêtre."""

    def __init__(self, name: str, max_requests: int, window_seconds: float) -> None:
        self.name = name
        self.max_requests = max(1, int(max_requests))
        self.window_seconds = float(window_seconds)
        # identifiant -> (compteur, fin de fenêtre)
        self._store: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _cleanup(self, now: float) -> None:
        expired = [k for k, (_, reset_at) in self._store.items() if now >= reset_at]
        for k in expired:
            del self._store[k]

    def hit(self, identifier: str) -> RateLimitResult:
        """Comptabilise une requête et indique si elle est autorisée."""
        now = time.time()
        with self._lock:
            self._cleanup(now)
            count, reset_at = self._store.get(identifier, (0, now + self.window_seconds))
            count += 1
            self._store[identifier] = (count, reset_at)
        return _result(count, self.max_requests, reset_at, now)

    def size(self) -> int:
        """Nombre d'identifiants suivis (diagnostic)."""
        return len(self._store)


class RedisRateLimiter:
    """Limiteur adossé à Redis (clé: `rl:{nom}:{identifiant}`).

    En cas d'erreur Redis la requête est autorisée et l'incident journalisé.
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: float,
        client: redis.Redis,
    ) -> None:
        self.name = name
        self.max_requests = max(1, int(max_requests))
        self.window_seconds = float(window_seconds)
        self.client = client

    @classmethod
    def from_url(
        cls, name: str, max_requests: int, window_seconds: float, url: str
    ) -> RedisRateLimiter:
        """Crée un limiteur à partir de l'URL Redis."""
        client = redis.Redis.from_url(url, decode_responses=True)
        return cls(name, max_requests, window_seconds, client)

    def hit(self, identifier: str) -> RateLimitResult:
        """Comptabilise une requête et indique si elle est autorisée."""
        now = time.time()
        window_ms = int(self.window_seconds * 1000)
        key = f"rl:{identifier}"
        try:
            pipe = self.client.pipeline()
            pipe.incr(key)
            # NX: la fenêtre démarre au premier hit et n'est jamais prolongée
            pipe.pexpire(key, window_ms, nx=True)
            pipe.pttl(key)
            count, _, ttl_ms = pipe.execute()
            count = int(count)
            ttl_ms = int(ttl_ms)
            if ttl_ms < 0:
                ttl_ms = window_ms
        except RedisError as err:
            log.warning("rate_limit_store_error", limiter=self.name, error=str(err))
            return RateLimitResult(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests,
                reset_at=now + self.window_seconds,
            )
        return _result(count, self.max_requests, now + ttl_ms / 1000, now)


def get_client_ip(request: Request) -> str:
    """Adresse IP cliente, en tenant compte des en-têtes de proxy usuels."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_identifier(request: Request, prefix: str) -> str:
    """Identifiant de limitation `"<prefix>:<ip>"`."""
    return f"{prefix}:{get_client_ip(request)}"
