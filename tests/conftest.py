"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `fortune_backend` en ajoutant la racine du
projet au sys.path, et fournit les fixtures partagées : tables de messages de test, conteneur en
mémoire et clients HTTP.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from fortune_backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient  # noqa: E402

from fortune_backend.core.container import Container, get_container, set_container  # noqa: E402
from fortune_backend.core.http_constants import HTTP_OK  # noqa: E402
from fortune_backend.core.settings import Settings  # noqa: E402
from fortune_backend.domain.message_tables import MessageTables  # noqa: E402
from tests.fakes import TEST_ADMIN_PASSWORD, make_raw_tables, make_settings  # noqa: E402


@pytest.fixture
def raw_tables() -> dict:
    return make_raw_tables()


@pytest.fixture
def tables(raw_tables) -> MessageTables:
    return MessageTables.from_mapping(raw_tables).validate()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def container(settings, tables) -> Container:
    return Container(settings, tables=tables)


@pytest.fixture
def client(container):
    """Client HTTP branché sur un conteneur en mémoire neuf."""
    from fortune_backend.app.main import app

    app.dependency_overrides[get_container] = lambda: container
    set_container(container)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    set_container(None)


@pytest.fixture
def admin_password() -> str:
    return TEST_ADMIN_PASSWORD


@pytest.fixture
def admin_client(client, admin_password):
    """Client HTTP déjà authentifié (cookie de session administrateur)."""
    r = client.post("/admin/login", json={"password": admin_password})
    assert r.status_code == HTTP_OK
    return client
