"""Script de définition du mot de passe administrateur.

Écrit le hash PBKDF2 du mot de passe dans le stockage configuré (Postgres, SQLite) sans jamais
l'afficher. Avec `--print-hash`, affiche seulement le hash à placer dans ADMIN_PASSWORD_HASH.

Usage:
  python -m fortune_backend.scripts.set_admin_password
  python -m fortune_backend.scripts.set_admin_password --print-hash
"""

from __future__ import annotations

import argparse
import getpass
import sys

from fortune_backend.core.container import Container
from fortune_backend.core.logging import setup_logging
from fortune_backend.core.settings import get_settings
from fortune_backend.domain.auth import hash_password


def read_password(min_length: int) -> str:
    """Demande le mot de passe deux fois ; SystemExit si invalide."""
    password = getpass.getpass("New admin password: ")
    if len(password) < min_length:
        raise SystemExit(f"Password must be at least {min_length} characters")
    if getpass.getpass("Confirm password: ") != password:
        raise SystemExit("Passwords do not match")
    return password


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Set the admin password")
    parser.add_argument(
        "--print-hash",
        action="store_true",
        help="Only print the hash (for ADMIN_PASSWORD_HASH), do not store it",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    password = read_password(settings.ADMIN_PASSWORD_MIN_LENGTH)
    hashed = hash_password(password)
    if args.print_hash:
        sys.stdout.write(hashed + "\n")
        return
    container = Container(settings)
    if container.storage_backend == "memory":
        raise SystemExit("STORAGE_BACKEND=memory: nothing to persist")
    container.admin_config_repo.set_password_hash(hashed)
    sys.stdout.write(f"Admin password stored ({container.storage_backend})\n")


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
