"""Initial document collections.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

COLLECTIONS = ("users", "policies", "applications", "transactions", "claims")

# (index name, table, indexed expressions)
UNIQUE_KEYS = (
    ("uq_users_email", "users", "(doc->>'email')"),
    ("uq_claims_policy_customer", "claims", "(doc->>'policy_id'), (doc->>'customerEmail')"),
    ("uq_transactions_transaction_id", "transactions", "(doc->>'transactionId')"),
)


def upgrade() -> None:
    """Create one JSONB table per collection plus the unique keys."""
    for name in COLLECTIONS:
        op.create_table(
            name,
            sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column("seq", sa.BigInteger(), sa.Identity(always=False), nullable=False),
            sa.Column(
                "doc",
                postgresql.JSONB(),
                nullable=False,
                server_default=sa.text("'{}'::jsonb"),
            ),
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
            sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{name}")),
        )
        op.create_index(op.f(f"ix_{name}_seq"), name, ["seq"], unique=True)
        op.execute(f"CREATE INDEX ix_{name}_doc ON {name} USING gin (doc jsonb_path_ops)")

    for index, table, expressions in UNIQUE_KEYS:
        op.execute(f"CREATE UNIQUE INDEX {index} ON {table} ({expressions})")


def downgrade() -> None:
    """Drop every collection."""
    for name in reversed(COLLECTIONS):
        op.drop_table(name)
