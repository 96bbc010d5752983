"""
Contrat des tables de messages consommées par le générateur.

Six tables statiques associent une valeur d'énumération à une liste ordonnée de phrases. L'ordre
compte : les indices sont calculés modulo la longueur de la liste, donc modifier une liste change
les fortunes de tous les utilisateurs qui n'ont pas encore été persistés.

Les chaînes sont conservées telles qu'écrites (pas de `strip`), les modificateurs de relation
portant leur propre espace ou ponctuation de tête.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from fortune_backend.domain.entities import AGE_RANGES, BIRTH_DAYS, BLOOD_GROUPS
from fortune_backend.domain.errors import MessageTableError

Table = Mapping[str, tuple[str, ...]]

# nom de table -> clés requises
TABLE_KEYS: dict[str, tuple[str, ...]] = {
    "relationship_messages": BIRTH_DAYS,
    "relationship_modifiers": BLOOD_GROUPS,
    "work_messages": AGE_RANGES,
    "work_modifiers": BIRTH_DAYS,
    "health_messages": BLOOD_GROUPS,
    "health_modifiers": AGE_RANGES,
}


def _freeze(name: str, raw: Any) -> Table:
    if not isinstance(raw, Mapping):
        raise MessageTableError(f"{name}: expected an object keyed by category")
    frozen: dict[str, tuple[str, ...]] = {}
    for key, values in raw.items():
        if isinstance(values, str) or not isinstance(values, Sequence):
            raise MessageTableError(f"{name}[{key!r}]: expected a list of strings")
        if not all(isinstance(v, str) for v in values):
            raise MessageTableError(f"{name}[{key!r}]: expected a list of strings")
        frozen[str(key)] = tuple(values)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class MessageTables:
    """Les six tables de messages, immuables une fois construites."""

    relationship_messages: Table
    relationship_modifiers: Table
    work_messages: Table
    work_modifiers: Table
    health_messages: Table
    health_modifiers: Table

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MessageTables:
        """Construit les tables à partir de dictionnaires simples (forme JSON).

        Raises:
            MessageTableError: table absente ou de forme invalide.
        """
        tables = {}
        for name in TABLE_KEYS:
            if name not in raw:
                raise MessageTableError(f"missing table: {name}")
            tables[name] = _freeze(name, raw[name])
        return cls(**tables)

    def validate(self) -> MessageTables:
        """Vérifie que chaque clé d'énumération est présente avec une liste non vide.

        Retourne l'instance pour permettre le chaînage au chargement.
        """
        for name, keys in TABLE_KEYS.items():
            table: Table = getattr(self, name)
            for key in keys:
                if not table.get(key):
                    raise MessageTableError(f"{name}[{key!r}] is missing or empty")
        return self
