"""Entry listing query router.

Chooses how an entry listing is answered:

- Store-assisted: no filter or a topicId filter. Count and ordered LIMIT/OFFSET
  are pushed to the database.
- Topic-name search: the store has no substring operator for this query, so the
  TopicNameSearch strategy answers it. The default strategy fetches the whole
  ordered collection, keeps entries whose topic name contains the term
  (case-insensitive), and paginates the filtered list in memory.

topicId wins when both filters are given. A search backend with native text
search can replace InMemoryTopicNameSearch without touching callers.
"""

from typing import Protocol
from uuid import UUID

import structlog

from topicbox.models.entry import Entry
from topicbox.services.pagination import Page, PageRequest, PaginationInfo, paginate_in_memory
from topicbox.uow import UnitOfWork

logger = structlog.get_logger()


class TopicNameSearch(Protocol):
    async def search(self, uow: UnitOfWork, term: str) -> list[Entry]:
        """Return every entry whose topic name matches, in listing order."""
        ...


class InMemoryTopicNameSearch:
    """Case-insensitive substring match over the full entry collection."""

    async def search(self, uow: UnitOfWork, term: str) -> list[Entry]:
        needle = term.casefold()
        entries = await uow.entries.list_all()
        return [entry for entry in entries if needle in entry.topic_name.casefold()]


class EntryQueryRouter:
    """Answers entry listings and exports through the cheapest available path."""

    def __init__(self, topic_name_search: TopicNameSearch | None = None):
        self.topic_name_search = topic_name_search or InMemoryTopicNameSearch()

    async def list_entries(
        self,
        uow: UnitOfWork,
        request: PageRequest,
        topic_id: UUID | None = None,
        topic_name: str | None = None,
    ) -> Page[Entry]:
        """Return one page of entries.

        Args:
            uow: Unit of Work for the request
            request: Normalized pagination parameters
            topic_id: Exact topic filter (store-assisted)
            topic_name: Substring filter on the denormalized topic name

        Returns:
            Page with the entries and pagination metadata
        """
        if topic_name and topic_id is None:
            matches = await self.topic_name_search.search(uow, topic_name)
            logger.debug("entries.query_in_memory", term=topic_name, matched=len(matches))
            return paginate_in_memory(matches, request)

        entries, total = await uow.entries.list_paginated(
            topic_id=topic_id, offset=request.offset, limit=request.limit
        )
        logger.debug("entries.query_store", topic_id=str(topic_id) if topic_id else None)
        return Page(items=entries, pagination=PaginationInfo.build(request, total))

    async def list_all_matching(
        self,
        uow: UnitOfWork,
        topic_id: UUID | None = None,
        topic_name: str | None = None,
    ) -> list[Entry]:
        """Return every matching entry in listing order (used by CSV export)."""
        if topic_name and topic_id is None:
            return await self.topic_name_search.search(uow, topic_name)
        if topic_id is not None:
            return await uow.entries.list_by_topic(topic_id)
        return await uow.entries.list_all()
