"""Export CSV des fortunes stockées."""

import csv
import io
from collections.abc import Iterable

from fortune_backend.domain.entities import FortuneRecord

CSV_HEADER = [
    "ID",
    "Email",
    "Age Range",
    "Birth Day",
    "Blood Group",
    "Lucky Number",
    "Relationship",
    "Work",
    "Health",
    "Generated At",
]


def records_to_csv(records: Iterable[FortuneRecord]) -> str:
    """Sérialise les fortunes en CSV (en-tête seul si aucun enregistrement)."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow(
            [
                r.id,
                r.user_data.email,
                r.user_data.age_range,
                r.user_data.birth_day,
                r.user_data.blood_group,
                r.fortune.lucky_number,
                r.fortune.relationship,
                r.fortune.work,
                r.fortune.health,
                r.timestamp,
            ]
        )
    return buf.getvalue()
