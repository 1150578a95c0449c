# ruff: noqa: I001
"""Statement import core tables.

Revision ID: 0001_si_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_si_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # si_categories
    op.create_table(
        "si_categories",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("keywords", sa.JSON(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("type in ('income','expense')", name="ck_si_categories_type"),
        sa.UniqueConstraint("type", "name", name="uq_si_categories_type_name"),
    )

    # si_transactions
    op.create_table(
        "si_transactions",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("fingerprint_sha256", sa.CHAR(64), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default=sa.text("''")),
        sa.Column("ignored", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_si_transactions_date", "si_transactions", ["date"])
    op.create_index("ix_si_transactions_category", "si_transactions", ["category"])


def downgrade() -> None:
    op.drop_index("ix_si_transactions_category", table_name="si_transactions")
    op.drop_index("ix_si_transactions_date", table_name="si_transactions")
    op.drop_table("si_transactions")
    op.drop_table("si_categories")
