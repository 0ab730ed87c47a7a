"""create user, sweet and revoked_token tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('user', 'admin')", name="check_user_role"),
    )
    op.create_index("ix_user_id", "user", ["id"])
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "sweet",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("quantity >= 0", name="check_sweet_quantity_positive"),
        sa.CheckConstraint("price >= 0", name="check_sweet_price_positive"),
    )
    op.create_index("ix_sweet_id", "sweet", ["id"])
    op.create_index("ix_sweet_name", "sweet", ["name"], unique=True)
    op.create_index("ix_sweet_category", "sweet", ["category"])
    op.create_index("ix_sweet_created_at", "sweet", ["created_at"])
    op.create_index("idx_sweet_name_category", "sweet", ["name", "category"])

    op.create_table(
        "revoked_token",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("jti", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_revoked_token_id", "revoked_token", ["id"])
    op.create_index("ix_revoked_token_jti", "revoked_token", ["jti"], unique=True)
    op.create_index("ix_revoked_token_expires_at", "revoked_token", ["expires_at"])

    # Trigram indexes for the case-insensitive substring search
    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
        op.execute("CREATE INDEX idx_sweet_name_trgm ON sweet USING gin (name gin_trgm_ops)")
        op.execute("CREATE INDEX idx_sweet_category_trgm ON sweet USING gin (category gin_trgm_ops)")


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP INDEX IF EXISTS idx_sweet_category_trgm")
        op.execute("DROP INDEX IF EXISTS idx_sweet_name_trgm")

    op.drop_table("revoked_token")
    op.drop_table("sweet")
    op.drop_table("user")
