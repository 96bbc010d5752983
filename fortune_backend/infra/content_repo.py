"""Dépôt des tables de messages basé sur fichiers JSON.

Ce module charge les six tables de messages livrées avec le paquet (ou depuis un répertoire
configuré), construit un `MessageTables` immuable et le valide avant qu'aucune requête ne soit
servie.
"""

import json
import os

import structlog

from fortune_backend.domain.errors import MessageTableError
from fortune_backend.domain.message_tables import MessageTables

log = structlog.get_logger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "fortunes")

# nom de table -> fichier JSON
TABLE_FILES: dict[str, str] = {
    "relationship_messages": "relationship.json",
    "relationship_modifiers": "relationship-modifiers.json",
    "work_messages": "work.json",
    "work_modifiers": "work-modifiers.json",
    "health_messages": "health.json",
    "health_modifiers": "health-modifiers.json",
}


class JSONMessageTableRepository:
    """Dépôt de tables de messages basé sur un répertoire de fichiers JSON.

    Chaque fichier est un objet `{clé d'énumération: [phrases...]}`.
    """

    def __init__(self, path: str | None = None):
        """Initialise le dépôt.

        Paramètres:
        - path: répertoire contenant les fichiers JSON (par défaut, les données du paquet).
        """
        self.path = path or DEFAULT_DATA_DIR

    def _read(self, filename: str):
        full = os.path.join(self.path, filename)
        try:
            with open(full, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as err:
            raise MessageTableError(f"message table file not found: {full}") from err
        except json.JSONDecodeError as err:
            raise MessageTableError(f"invalid JSON in {full}: {err}") from err

    def load(self) -> MessageTables:
        """Charge et valide les six tables.

        Raises:
            MessageTableError: fichier manquant, JSON invalide ou clé absente/vide.
        """
        raw = {name: self._read(filename) for name, filename in TABLE_FILES.items()}
        tables = MessageTables.from_mapping(raw).validate()
        log.info("message_tables_loaded", path=self.path)
        return tables
