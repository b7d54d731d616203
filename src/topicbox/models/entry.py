"""Entry entity - one user's submission for a topic."""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from topicbox.core.timezone import current_millis

# Constraint names are matched when the store rejects a racing duplicate
UQ_TOPIC_WALLET = "uq_entries_topic_wallet"
UQ_TOPIC_EMAIL = "uq_entries_topic_email"
UQ_TOPIC_USER = "uq_entries_topic_telegram_platform"


class Entry(SQLModel, table=True):
    """Entry represents a validated submission tied to exactly one topic.

    Uniqueness per topic (wallet, email, telegram+platform pair) is checked by the
    uniqueness enforcer and backed by table constraints for concurrent writers.
    """

    __tablename__ = "entries"  # type: ignore[assignment]
    __table_args__ = (
        UniqueConstraint("topic_id", "wallet_address", name=UQ_TOPIC_WALLET),
        UniqueConstraint("topic_id", "email", name=UQ_TOPIC_EMAIL),
        UniqueConstraint(
            "topic_id", "telegram_username", "platform_username", name=UQ_TOPIC_USER
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    topic_id: UUID = Field(foreign_key="topics.id", ondelete="CASCADE", index=True)
    topic_name: str = Field(max_length=100, index=True)
    telegram_username: str = Field(max_length=33)  # "@" + up to 32 characters
    platform_username: str = Field(max_length=20)
    wallet_address: str = Field(max_length=42, index=True)
    discord_username: Optional[str] = Field(default=None, max_length=32)
    email: str = Field(max_length=254, index=True)
    created_at: int = Field(
        default_factory=current_millis,
        sa_column=Column(BigInteger, nullable=False, index=True),
    )
