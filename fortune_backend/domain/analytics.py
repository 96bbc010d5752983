"""
Statistiques agrégées pour le tableau de bord administrateur.

Objectif: à partir des fortunes stockées, compter les volumes récents (aujourd'hui, 7 et 30 jours)
et les distributions par dimension, et calculer la moyenne des nombres porte-bonheur.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel

from fortune_backend.domain.entities import FortuneRecord


class FortuneStats(BaseModel):
    """Indicateurs affichés par le panneau d'analyse."""

    total: int
    today_count: int
    last_7_days: int
    last_30_days: int
    blood_group_distribution: dict[str, int]
    age_range_distribution: dict[str, int]
    birth_day_distribution: dict[str, int]
    average_lucky_number: int


def parse_timestamp(value: str) -> datetime | None:
    """Parse un horodatage ISO-8601 (suffixe `Z` accepté) ; None si illisible."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def compute_stats(records: Iterable[FortuneRecord], now: datetime | None = None) -> FortuneStats:
    """
    Calcule les statistiques sur un ensemble de fortunes.

    - Les fenêtres partent de minuit UTC du jour courant.
    - La moyenne est arrondie au plus proche (demi vers le haut), 0 si aucun enregistrement.
    """
    now = now or datetime.now(UTC)
    today = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
    seven_days_ago = today - timedelta(days=7)
    thirty_days_ago = today - timedelta(days=30)

    total = today_count = last_7 = last_30 = lucky_sum = 0
    blood: Counter[str] = Counter()
    ages: Counter[str] = Counter()
    days: Counter[str] = Counter()

    for record in records:
        total += 1
        ts = parse_timestamp(record.timestamp)
        if ts is not None:
            if ts >= today:
                today_count += 1
            if ts >= seven_days_ago:
                last_7 += 1
            if ts >= thirty_days_ago:
                last_30 += 1
        blood[record.user_data.blood_group] += 1
        ages[record.user_data.age_range] += 1
        days[record.user_data.birth_day] += 1
        lucky_sum += record.fortune.lucky_number

    average = int(lucky_sum / total + 0.5) if total else 0
    return FortuneStats(
        total=total,
        today_count=today_count,
        last_7_days=last_7,
        last_30_days=last_30,
        blood_group_distribution=dict(blood),
        age_range_distribution=dict(ages),
        birth_day_distribution=dict(days),
        average_lucky_number=average,
    )
