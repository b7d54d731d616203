"""Topic entity - named campaign that entries are submitted against."""

from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Column
from sqlmodel import Field, SQLModel

from topicbox.core.timezone import current_millis


class Topic(SQLModel, table=True):
    """Topic curated by administrators.

    Only is_active may change after creation; deletion cascades to entries.
    """

    __tablename__ = "topics"  # type: ignore[assignment]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: str = Field(max_length=500)
    is_active: bool = Field(default=True, index=True)
    created_at: int = Field(
        default_factory=current_millis,
        sa_column=Column(BigInteger, nullable=False, index=True),
    )
