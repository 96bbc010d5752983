"""Tables de multiplicateurs utilisées pour dériver la graine d'une fortune.

Chaque dimension catégorielle est associée à un petit nombre premier. Une valeur inconnue ne lève
jamais d'erreur : elle prend la valeur par défaut de sa table.
"""

AGE_MULTIPLIERS: dict[str, int] = {
    "<18": 5,
    "18-25": 7,
    "26-35": 11,
    "36-45": 13,
    "46-55": 17,
    "55+": 19,
}
DAY_MULTIPLIERS: dict[str, int] = {
    "Monday": 2,
    "Tuesday": 3,
    "Wednesday": 5,
    "Thursday": 7,
    "Friday": 11,
    "Saturday": 13,
    "Sunday": 17,
}
BLOOD_MULTIPLIERS: dict[str, int] = {"A": 3, "B": 5, "AB": 7, "O": 11}

DEFAULT_AGE_MULTIPLIER = 11
DEFAULT_DAY_MULTIPLIER = 7
DEFAULT_BLOOD_MULTIPLIER = 7


def age_multiplier(age_range: str) -> int:
    """Multiplicateur de la tranche d'âge (11 si inconnue)."""
    return AGE_MULTIPLIERS.get(age_range, DEFAULT_AGE_MULTIPLIER)


def day_multiplier(birth_day: str) -> int:
    """Multiplicateur du jour de naissance (7 si inconnu)."""
    return DAY_MULTIPLIERS.get(birth_day, DEFAULT_DAY_MULTIPLIER)


def blood_multiplier(blood_group: str) -> int:
    """Multiplicateur du groupe sanguin (7 si inconnu)."""
    return BLOOD_MULTIPLIERS.get(blood_group, DEFAULT_BLOOD_MULTIPLIER)
