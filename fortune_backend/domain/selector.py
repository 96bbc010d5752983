"""
Sélecteur pseudo-aléatoire déterministe.

Objectif: à partir des trois multiplicateurs d'un utilisateur, dériver une graine unique puis un
indice reproductible pour chaque couple (slot, longueur de liste). Aucune dépendance à l'horloge ni
à un générateur aléatoire : le même triplet donne les mêmes indices, quel que soit le processus.

Ce n'est pas un générateur cryptographique ; il sert uniquement à varier les contenus.
"""

from __future__ import annotations

from dataclasses import dataclass

from fortune_backend.domain.multipliers import (
    age_multiplier,
    blood_multiplier,
    day_multiplier,
)

SEED_MODULUS = 1000
SLOT_STRIDE = 23
SLOT_MODULUS = 997  # plus grand nombre premier < 1000


def base_seed(age_range: str, birth_day: str, blood_group: str) -> int:
    """Graine de base: (âge*31 + jour*17 + sang*13) mod 1000."""
    return (
        age_multiplier(age_range) * 31
        + day_multiplier(birth_day) * 17
        + blood_multiplier(blood_group) * 13
    ) % SEED_MODULUS


@dataclass(frozen=True)
class SeededSelector:
    """Valeur immuable portant la graine d'une génération."""

    base_seed: int

    @classmethod
    def for_inputs(cls, age_range: str, birth_day: str, blood_group: str) -> SeededSelector:
        """Construit le sélecteur associé au triplet d'un utilisateur."""
        return cls(base_seed=base_seed(age_range, birth_day, blood_group))

    def select_index(self, slot: int, length: int) -> int:
        """Indice déterministe dans une liste de `length` éléments pour le slot donné.

        Raises:
            ValueError: si `length` n'est pas strictement positif.
        """
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        return ((self.base_seed + slot * SLOT_STRIDE) % SLOT_MODULUS) % length
