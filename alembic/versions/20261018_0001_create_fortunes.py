# mypy: ignore-errors
"""
Migration Alembic initiale : tables fortunes et admin_config.

La table fortunes porte une contrainte d'unicité sur l'email (une fortune par adresse) et un index
sur generated_at pour le tri du tableau de bord.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée les tables fortunes et admin_config."""
    op.create_table(
        "fortunes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("age_range", sa.String(length=16), nullable=False),
        sa.Column("birth_day", sa.String(length=16), nullable=False),
        sa.Column("blood_group", sa.String(length=4), nullable=False),
        sa.Column("lucky_number", sa.Integer(), nullable=False),
        sa.Column("relationship", sa.Text(), nullable=False),
        sa.Column("work", sa.Text(), nullable=False),
        sa.Column("health", sa.Text(), nullable=False),
        sa.Column("generated_at", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_fortunes_email", "fortunes", ["email"], unique=True)
    op.create_index("ix_fortunes_generated_at", "fortunes", ["generated_at"])
    op.create_table(
        "admin_config",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Supprime les tables créées par upgrade."""
    op.drop_table("admin_config")
    op.drop_index("ix_fortunes_generated_at", table_name="fortunes")
    op.drop_index("ix_fortunes_email", table_name="fortunes")
    op.drop_table("fortunes")
