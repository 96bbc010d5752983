"""Exceptions métier levées par le domaine et la couche de persistance."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fortune_backend.domain.entities import FortuneRecord


class MessageTableError(ValueError):
    """Table de messages absente, illisible ou incomplète."""


class DuplicateEmailError(Exception):
    """Une fortune existe déjà pour cet email (contrainte d'unicité)."""

    def __init__(self, email: str) -> None:
        super().__init__("email_exists")
        self.email = email


class FortuneAlreadyExists(Exception):
    """Soumission pour un email qui possède déjà une fortune enregistrée."""

    def __init__(self, record: FortuneRecord) -> None:
        super().__init__("fortune_exists")
        self.record = record


class InvalidPasswordError(Exception):
    """Mot de passe administrateur incorrect."""


class PasswordPolicyError(ValueError):
    """Nouveau mot de passe refusé par la politique (longueur minimale)."""


class AdminPasswordNotConfigured(RuntimeError):
    """Aucune source de mot de passe administrateur n'est configurée."""
