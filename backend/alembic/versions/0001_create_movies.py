"""create movies table

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "movies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("rated", sa.String(length=10), nullable=False),
        sa.Column("released", sa.Date(), nullable=False),
        sa.Column("run_time", sa.Integer(), nullable=False),
        sa.Column("director", sa.String(length=100), nullable=False),
        sa.Column("writer", sa.String(length=100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("run_time > 0", name=op.f("ck_movies_run_time_positive")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_movies")),
        sa.UniqueConstraint("external_id", name=op.f("uq_movies_external_id")),
        sa.UniqueConstraint("title", "released", name="uq_movie_title_released"),
    )


def downgrade() -> None:
    op.drop_table("movies")
