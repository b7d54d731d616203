"""Topic repository for topicbox.

Provides data access methods for Topic entities with active-only filtering.
"""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from topicbox.models.topic import Topic


class TopicRepository:
    """Repository for Topic entities.

    Methods:
    - get_by_id: Retrieve topic by UUID
    - add: Persist new topic
    - list_paginated: Ordered page of topics plus total count
    - set_active: Update the is_active flag
    - delete: Remove topic row (entries are handled by the caller's UoW)
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def get_by_id(self, topic_id: UUID) -> Topic | None:
        """Retrieve topic by UUID.

        Args:
            topic_id: Topic's unique identifier

        Returns:
            Topic if found, None otherwise
        """
        result = await self.session.execute(select(Topic).where(Topic.id == topic_id))  # type: ignore[arg-type]
        return result.scalar_one_or_none()

    async def add(self, topic: Topic) -> Topic:
        """Persist new topic to database.

        Args:
            topic: Topic entity to persist

        Returns:
            Persisted topic with generated ID
        """
        self.session.add(topic)
        await self.session.flush()
        return topic

    async def list_paginated(
        self, active_only: bool = False, offset: int = 0, limit: int = 10
    ) -> tuple[list[Topic], int]:
        """Retrieve an ordered page of topics together with the total count.

        Topics are ordered newest first (created_at DESC) with id ASC as a
        deterministic tie-breaker, so consecutive pages never overlap.

        Args:
            active_only: Only include topics with is_active = true
            offset: Number of topics to skip (default: 0)
            limit: Maximum number of topics to return (default: 10)

        Returns:
            Tuple of (topics for the page, total matching topics)
        """
        count_stmt = select(func.count(Topic.id))  # type: ignore[arg-type]
        data_stmt = select(Topic)
        if active_only:
            count_stmt = count_stmt.where(Topic.is_active == True)  # noqa: E712
            data_stmt = data_stmt.where(Topic.is_active == True)  # noqa: E712

        total = (await self.session.execute(count_stmt)).scalar() or 0
        if offset >= total:
            # Past the last row; OFFSET must stay within bigint for huge page numbers
            return [], total

        data_stmt = (
            data_stmt.order_by(Topic.created_at.desc(), Topic.id.asc())  # type: ignore[attr-defined]
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(data_stmt)
        return list(result.scalars().all()), total

    async def set_active(self, topic: Topic, is_active: bool) -> Topic:
        """Update the topic's is_active flag.

        Args:
            topic: Topic entity to update
            is_active: New flag value

        Returns:
            Updated topic
        """
        topic.is_active = is_active
        self.session.add(topic)
        await self.session.flush()
        return topic

    async def delete(self, topic_id: UUID) -> int:
        """Delete topic row by id.

        Args:
            topic_id: Topic's unique identifier

        Returns:
            Number of deleted rows (0 or 1)
        """
        result = await self.session.execute(delete(Topic).where(Topic.id == topic_id))  # type: ignore[arg-type]
        return result.rowcount or 0
