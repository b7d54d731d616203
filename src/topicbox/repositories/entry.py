"""Entry repository for topicbox.

Provides data access methods for Entry entities: uniqueness candidates,
store-assisted pagination, full ordered scans and bulk deletion by topic.
"""

from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from topicbox.models.entry import Entry

# Every listing uses the same order so pagination is reproducible across requests
ENTRY_ORDERING = (Entry.created_at.desc(), Entry.id.asc())  # type: ignore[attr-defined]


class EntryRepository:
    """Repository for Entry entities."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self.session = session

    async def get_by_id(self, entry_id: UUID) -> Entry | None:
        """Retrieve entry by UUID.

        Args:
            entry_id: Entry's unique identifier

        Returns:
            Entry if found, None otherwise
        """
        result = await self.session.execute(select(Entry).where(Entry.id == entry_id))  # type: ignore[arg-type]
        return result.scalar_one_or_none()

    async def add(self, entry: Entry) -> Entry:
        """Persist new entry to database.

        Flushing here surfaces unique-constraint violations inside the caller's
        transaction, before the Unit of Work commits.

        Args:
            entry: Entry entity to persist

        Returns:
            Persisted entry with generated ID
        """
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_by_topic(self, topic_id: UUID) -> list[Entry]:
        """Retrieve every entry submitted for a topic (uniqueness scan input).

        Args:
            topic_id: Topic's unique identifier

        Returns:
            All entries of the topic, ordered newest first
        """
        result = await self.session.execute(
            select(Entry).where(Entry.topic_id == topic_id).order_by(*ENTRY_ORDERING)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def list_outside_topic_matching(
        self, topic_id: UUID, wallet_address: str, email: str
    ) -> list[Entry]:
        """Retrieve entries of other topics sharing the wallet or the email.

        Only used by the global uniqueness policy.

        Args:
            topic_id: Topic to exclude
            wallet_address: Canonical (checksummed) wallet address
            email: Email address

        Returns:
            Matching entries from other topics, ordered newest first
        """
        result = await self.session.execute(
            select(Entry)
            .where(Entry.topic_id != topic_id)  # type: ignore[arg-type]
            .where(or_(Entry.wallet_address == wallet_address, Entry.email == email))  # type: ignore[arg-type]
            .order_by(*ENTRY_ORDERING)
        )
        return list(result.scalars().all())

    async def list_paginated(
        self, topic_id: UUID | None = None, offset: int = 0, limit: int = 10
    ) -> tuple[list[Entry], int]:
        """Retrieve a page of entries and the total count (store-assisted).

        Query 1 counts matching rows, query 2 fetches the ordered page with
        LIMIT/OFFSET pushed to the database.

        Args:
            topic_id: Restrict to one topic, or None for all entries
            offset: Number of entries to skip (default: 0)
            limit: Maximum number of entries to return (default: 10)

        Returns:
            Tuple of (entries for the page, total matching entries)
        """
        count_stmt = select(func.count(Entry.id))  # type: ignore[arg-type]
        data_stmt = select(Entry)
        if topic_id is not None:
            count_stmt = count_stmt.where(Entry.topic_id == topic_id)  # type: ignore[arg-type]
            data_stmt = data_stmt.where(Entry.topic_id == topic_id)  # type: ignore[arg-type]

        total = (await self.session.execute(count_stmt)).scalar() or 0
        if offset >= total:
            # Past the last row; OFFSET must stay within bigint for huge page numbers
            return [], total

        data_stmt = data_stmt.order_by(*ENTRY_ORDERING).offset(offset).limit(limit)
        result = await self.session.execute(data_stmt)
        return list(result.scalars().all()), total

    async def list_all(self) -> list[Entry]:
        """Retrieve the whole collection in listing order.

        Returns:
            All entries, newest first with id ASC as tie-breaker
        """
        result = await self.session.execute(select(Entry).order_by(*ENTRY_ORDERING))
        return list(result.scalars().all())

    async def delete(self, entry: Entry) -> None:
        """Delete a single entry.

        Args:
            entry: Entry entity to delete
        """
        await self.session.delete(entry)
        await self.session.flush()

    async def delete_by_topic(self, topic_id: UUID) -> int:
        """Bulk delete every entry referencing a topic.

        Args:
            topic_id: Topic's unique identifier

        Returns:
            Number of deleted entries
        """
        result = await self.session.execute(delete(Entry).where(Entry.topic_id == topic_id))  # type: ignore[arg-type]
        return result.rowcount or 0
