"""Tests du hachage des mots de passe et des tokens JWT administrateur."""

from datetime import UTC, datetime, timedelta

import jwt

from fortune_backend.domain.auth import (
    create_admin_token,
    decode_admin_token,
    hash_password,
    is_token_expiring_soon,
    refresh_token_if_needed,
    verify_password,
)

SECRET = "unit-secret"
ALG = "HS256"


def test_hash_and_verify():
    h = hash_password("hunter22")
    assert h != "hunter22"
    assert verify_password("hunter22", h)
    assert not verify_password("wrong", h)


def test_verify_with_unreadable_hash():
    assert verify_password("x", "not-a-hash") is False


def test_token_roundtrip():
    token = create_admin_token(SECRET, ALG, expires_min=60)
    data = decode_admin_token(token, SECRET, ALG)
    assert data is not None
    assert data.role == "admin"
    assert data.exp > data.iat


def test_token_wrong_secret():
    token = create_admin_token(SECRET, ALG, expires_min=60)
    assert decode_admin_token(token, "other", ALG) is None


def test_expired_token_rejected():
    token = create_admin_token(SECRET, ALG, expires_min=-1)
    assert decode_admin_token(token, SECRET, ALG) is None


def test_non_admin_role_rejected():
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "u", "role": "user", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm=ALG,
    )
    assert decode_admin_token(token, SECRET, ALG) is None


def test_expiring_soon():
    data = decode_admin_token(create_admin_token(SECRET, ALG, expires_min=30), SECRET, ALG)
    assert is_token_expiring_soon(data, threshold_min=60)
    assert not is_token_expiring_soon(data, threshold_min=10)


def test_refresh_only_when_needed():
    fresh = decode_admin_token(create_admin_token(SECRET, ALG, expires_min=600), SECRET, ALG)
    assert refresh_token_if_needed(fresh, SECRET, ALG, 600, 60) is None
    stale = decode_admin_token(create_admin_token(SECRET, ALG, expires_min=5), SECRET, ALG)
    new_token = refresh_token_if_needed(stale, SECRET, ALG, 600, 60)
    assert new_token
    renewed = decode_admin_token(new_token, SECRET, ALG)
    assert renewed.exp > stale.exp
