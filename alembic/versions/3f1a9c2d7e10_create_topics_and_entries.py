"""create_topics_and_entries

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2025-11-03 10:12:41.218034

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7e10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create topics and entries tables."""
    op.create_table(
        "topics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_topics_is_active"), "topics", ["is_active"], unique=False)
    op.create_index(op.f("ix_topics_created_at"), "topics", ["created_at"], unique=False)

    op.create_table(
        "entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("topic_id", sa.Uuid(), nullable=False),
        sa.Column("topic_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column(
            "telegram_username", sqlmodel.sql.sqltypes.AutoString(length=33), nullable=False
        ),
        sa.Column(
            "platform_username", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False
        ),
        sa.Column("wallet_address", sqlmodel.sql.sqltypes.AutoString(length=42), nullable=False),
        sa.Column("discord_username", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=True),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=254), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["topic_id"], ["topics.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("topic_id", "wallet_address", name="uq_entries_topic_wallet"),
        sa.UniqueConstraint("topic_id", "email", name="uq_entries_topic_email"),
        sa.UniqueConstraint(
            "topic_id",
            "telegram_username",
            "platform_username",
            name="uq_entries_topic_telegram_platform",
        ),
    )
    op.create_index(op.f("ix_entries_topic_id"), "entries", ["topic_id"], unique=False)
    op.create_index(op.f("ix_entries_topic_name"), "entries", ["topic_name"], unique=False)
    op.create_index(op.f("ix_entries_wallet_address"), "entries", ["wallet_address"], unique=False)
    op.create_index(op.f("ix_entries_email"), "entries", ["email"], unique=False)
    op.create_index(op.f("ix_entries_created_at"), "entries", ["created_at"], unique=False)


def downgrade() -> None:
    """Drop entries and topics tables."""
    op.drop_table("entries")
    op.drop_table("topics")
