"""card_data, sync_runs and sync_locks tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


CLEAR_ALL_DATA = """
CREATE OR REPLACE FUNCTION clear_all_data() RETURNS void
LANGUAGE plpgsql AS $$
BEGIN
    TRUNCATE TABLE card_data;
END;
$$;
"""


def upgrade() -> None:
    op.create_table(
        "card_data",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=300), nullable=True),
        sa.Column(
            "cardmarket_id",
            sa.BigInteger(),
            nullable=True,
            comment="CardMarket idProduct used to join the price guide",
        ),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_card_data_name", "card_data", ["name"])
    op.create_index("ix_card_data_cardmarket_id", "card_data", ["cardmarket_id"])

    op.create_table(
        "sync_runs",
        sa.Column("run_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("state", sa.String(), nullable=False),
        sa.Column("progress", sa.String(), nullable=True),
        sa.Column("clear_first", sa.Boolean(), nullable=False),
        sa.Column("imported", sa.Integer(), nullable=False),
        sa.Column("errors", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Float(), nullable=True),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("result", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("run_id"),
    )

    op.create_table(
        "sync_locks",
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("run_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("name"),
    )

    op.execute(CLEAR_ALL_DATA)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS clear_all_data()")
    op.drop_table("sync_locks")
    op.drop_table("sync_runs")
    op.drop_index("ix_card_data_cardmarket_id", table_name="card_data")
    op.drop_index("ix_card_data_name", table_name="card_data")
    op.drop_table("card_data")
