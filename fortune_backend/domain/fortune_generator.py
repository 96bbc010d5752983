"""
Générateur de fortune déterministe.

Objectif du module
------------------
À partir des trois réponses catégorielles d'un utilisateur, produire:
- un nombre porte-bonheur à deux chiffres;
- trois prédictions (relation, travail, santé), chacune composée d'un message de base et d'un
  modificateur tirés de deux tables indexées par des dimensions différentes.

Le calcul est pur (hors horodatage) : même triplet, mêmes contenus. Une valeur inconnue est
redirigée vers la clé par défaut de chaque table au lieu de lever une erreur.

Attribution des slots du sélecteur (figée, ne jamais réordonner):
- 0: relation, message du jour de naissance
- 1: relation, modificateur du groupe sanguin
- 2: travail, message de la tranche d'âge
- 3: travail, modificateur du jour de naissance
- 4: santé, message du groupe sanguin
- 5: santé, conseil de la tranche d'âge
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from fortune_backend.domain.entities import FortuneResult, UserData
from fortune_backend.domain.message_tables import MessageTables, Table
from fortune_backend.domain.multipliers import (
    age_multiplier,
    blood_multiplier,
    day_multiplier,
)
from fortune_backend.domain.selector import SeededSelector

log = structlog.get_logger(__name__)

SLOT_RELATIONSHIP_BASE = 0
SLOT_RELATIONSHIP_MODIFIER = 1
SLOT_WORK_BASE = 2
SLOT_WORK_MODIFIER = 3
SLOT_HEALTH_BASE = 4
SLOT_HEALTH_MODIFIER = 5

FALLBACK_BIRTH_DAY = "Monday"
FALLBACK_AGE_RANGE = "26-35"
FALLBACK_RELATIONSHIP_BLOOD = "A"
FALLBACK_HEALTH_BLOOD = "O"


def lucky_number(age_range: str, birth_day: str, blood_group: str) -> int:
    """Nombre porte-bonheur dans [10, 99].

    Double transformation : la première passe ramène la somme des multiplicateurs dans [10, 99],
    la seconde la redistribue (`* 17 mod 90`).
    """
    seed = (
        age_multiplier(age_range) + day_multiplier(birth_day) + blood_multiplier(blood_group)
    ) % 90 + 10
    return ((seed * 17) % 90) + 10


def utc_now_iso() -> str:
    """Horodatage UTC ISO-8601 à la milliseconde, suffixe `Z`."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _lookup(table: Table, key: str, fallback: str) -> tuple[str, ...]:
    return table.get(key) or table[fallback]


class FortuneGenerator:
    """Génère des fortunes à partir de tables de messages injectées.

    Les tables doivent avoir été validées (voir `MessageTables.validate`) : une liste vide est la
    seule configuration qui ferait échouer le calcul.
    """

    def __init__(self, tables: MessageTables, clock: Callable[[], str] = utc_now_iso):
        """Initialise le générateur.

        Paramètres:
        - tables: les six tables de messages.
        - clock: fonction retournant l'horodatage `generated_at`.
        """
        self.tables = tables
        self.clock = clock

    def relationship(self, birth_day: str, blood_group: str, selector: SeededSelector) -> str:
        """Message du jour + modificateur du groupe sanguin, concaténés sans séparateur."""
        day_messages = _lookup(self.tables.relationship_messages, birth_day, FALLBACK_BIRTH_DAY)
        blood_modifiers = _lookup(
            self.tables.relationship_modifiers, blood_group, FALLBACK_RELATIONSHIP_BLOOD
        )
        base = day_messages[selector.select_index(SLOT_RELATIONSHIP_BASE, len(day_messages))]
        modifier = blood_modifiers[
            selector.select_index(SLOT_RELATIONSHIP_MODIFIER, len(blood_modifiers))
        ]
        return base + modifier

    def work(self, age_range: str, birth_day: str, selector: SeededSelector) -> str:
        """Message de la tranche d'âge + modificateur du jour, séparés par une espace."""
        age_templates = _lookup(self.tables.work_messages, age_range, FALLBACK_AGE_RANGE)
        day_modifiers = _lookup(self.tables.work_modifiers, birth_day, FALLBACK_BIRTH_DAY)
        base = age_templates[selector.select_index(SLOT_WORK_BASE, len(age_templates))]
        modifier = day_modifiers[selector.select_index(SLOT_WORK_MODIFIER, len(day_modifiers))]
        return f"{base} {modifier}"

    def health(self, blood_group: str, age_range: str, selector: SeededSelector) -> str:
        """Message du groupe sanguin + conseil de la tranche d'âge, séparés par une espace."""
        blood_templates = _lookup(self.tables.health_messages, blood_group, FALLBACK_HEALTH_BLOOD)
        age_advice = _lookup(self.tables.health_modifiers, age_range, FALLBACK_AGE_RANGE)
        base = blood_templates[selector.select_index(SLOT_HEALTH_BASE, len(blood_templates))]
        advice = age_advice[selector.select_index(SLOT_HEALTH_MODIFIER, len(age_advice))]
        return f"{base} {advice}"

    def generate(self, user_data: UserData) -> FortuneResult:
        """Calcule la fortune d'un utilisateur.

        Ne lève jamais d'erreur sur une valeur catégorielle inconnue et ne valide pas l'email.
        """
        age, day, blood = user_data.age_range, user_data.birth_day, user_data.blood_group
        selector = SeededSelector.for_inputs(age, day, blood)
        number = lucky_number(age, day, blood)
        result = FortuneResult(
            lucky_number=number,
            relationship=self.relationship(day, blood, selector),
            work=self.work(age, day, selector),
            health=self.health(blood, age, selector),
            generated_at=self.clock(),
        )
        log.debug(
            "fortune_generated",
            age_range=age,
            birth_day=day,
            blood_group=blood,
            lucky_number=number,
        )
        return result


def generate_fortune(user_data: UserData, tables: MessageTables) -> FortuneResult:
    """Raccourci fonctionnel autour de `FortuneGenerator.generate`."""
    return FortuneGenerator(tables).generate(user_data)
