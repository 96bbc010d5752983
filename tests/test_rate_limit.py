"""Tests de la limitation de débit (mémoire et Redis) et de l'identification du client."""

from __future__ import annotations

import time
from unittest.mock import Mock

from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request

from fortune_backend.infra.rate_limit import (
    InMemoryRateLimiter,
    RedisRateLimiter,
    get_client_ip,
    rate_limit_identifier,
)

LIMIT = 2


def _request(headers: dict[str, str] | None = None, client=("10.0.0.1", 1234)) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw, "client": client})


def test_in_memory_blocks_after_limit():
    limiter = InMemoryRateLimiter("fortune", LIMIT, 60)
    first = limiter.hit("fortune:1.2.3.4")
    assert first.allowed is True
    assert first.remaining == 1
    assert limiter.hit("fortune:1.2.3.4").allowed is True
    blocked = limiter.hit("fortune:1.2.3.4")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after is not None and blocked.retry_after >= 1


def test_in_memory_identifiers_are_independent():
    limiter = InMemoryRateLimiter("fortune", 1, 60)
    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed
    assert limiter.size() == 2  # noqa: PLR2004


def test_in_memory_window_expiry(monkeypatch):
    clock = {"now": 1000.0}
    monkeypatch.setattr("fortune_backend.infra.rate_limit.time.time", lambda: clock["now"])
    limiter = InMemoryRateLimiter("admin_login", 1, 10)
    assert limiter.hit("ip").allowed
    assert not limiter.hit("ip").allowed
    clock["now"] += 10
    assert limiter.hit("ip").allowed


def _redis_client(count: int, ttl_ms: int) -> Mock:
    client = Mock()
    pipe = Mock()
    pipe.execute.return_value = [count, ttl_ms > 0, ttl_ms]
    client.pipeline.return_value = pipe
    return client


def test_redis_expiry_is_set_inside_the_pipeline():
    client = _redis_client(count=1, ttl_ms=10_000)
    limiter = RedisRateLimiter("fortune", LIMIT, 10, client)
    result = limiter.hit("fortune:ip")
    assert result.allowed is True
    pipe = client.pipeline.return_value
    pipe.incr.assert_called_once_with("rl:fortune:ip")
    pipe.pexpire.assert_called_once_with("rl:fortune:ip", 10_000, nx=True)
    client.pexpire.assert_not_called()


def test_redis_missing_ttl_defaults_to_window():
    client = _redis_client(count=1, ttl_ms=-1)
    result = RedisRateLimiter("fortune", LIMIT, 10, client).hit("fortune:ip")
    assert result.allowed is True
    assert result.reset_at - time.time() <= 10  # noqa: PLR2004


def test_redis_blocks_over_limit():
    client = _redis_client(count=LIMIT + 1, ttl_ms=4_500)
    result = RedisRateLimiter("fortune", LIMIT, 10, client).hit("fortune:ip")
    assert result.allowed is False
    assert result.retry_after == 5  # noqa: PLR2004
    client.pexpire.assert_not_called()


def test_redis_error_fails_open():
    client = Mock()
    client.pipeline.side_effect = RedisConnectionError("down")
    result = RedisRateLimiter("fortune", LIMIT, 10, client).hit("fortune:ip")
    assert result.allowed is True
    assert result.remaining == LIMIT


def test_client_ip_resolution_order():
    assert get_client_ip(_request({"X-Forwarded-For": "1.1.1.1, 2.2.2.2"})) == "1.1.1.1"
    assert get_client_ip(_request({"X-Real-IP": "3.3.3.3"})) == "3.3.3.3"
    assert get_client_ip(_request({"CF-Connecting-IP": "4.4.4.4"})) == "4.4.4.4"
    assert get_client_ip(_request()) == "10.0.0.1"
    assert get_client_ip(_request(client=None)) == "unknown"


def test_rate_limit_identifier():
    assert rate_limit_identifier(_request(), "admin_ops") == "admin_ops:10.0.0.1"
