"""Topic administration and cascading deletion.

Deleting a topic removes the topic row and every entry referencing it inside a
single Unit of Work: entries first, then the topic, then one commit. A failure
at any step rolls the whole transaction back, so a half-deleted topic is never
observable, and re-running the deletion afterwards is safe.
"""

from typing import Mapping, Optional
from uuid import UUID

import structlog

from topicbox.models.topic import Topic
from topicbox.services.entry_service import parse_id
from topicbox.services.exceptions import NotFound, ValidationError
from topicbox.services.pagination import Page, PageRequest, PaginationInfo
from topicbox.services.validators import validate_topic_fields

logger = structlog.get_logger()


class TopicService:
    """Topic operations. Every call opens its own Unit of Work."""

    def __init__(self, uow_factory, require_existing_on_delete: bool = False):
        """Initialize service.

        Args:
            uow_factory: Factory producing UnitOfWork instances
            require_existing_on_delete: Report NotFound when deleting a missing
                topic instead of treating it as an idempotent no-op
        """
        self.uow_factory = uow_factory
        self.require_existing_on_delete = require_existing_on_delete

    async def list_page(self, request: PageRequest, active_only: bool = False) -> Page[Topic]:
        async with await self.uow_factory() as uow:
            topics, total = await uow.topics.list_paginated(
                active_only=active_only, offset=request.offset, limit=request.limit
            )
        return Page(items=topics, pagination=PaginationInfo.build(request, total))

    async def get(self, raw_id: str) -> Topic:
        topic_id = parse_id(raw_id, "TOPIC_NOT_FOUND", "Topic not found")
        async with await self.uow_factory() as uow:
            topic = await uow.topics.get_by_id(topic_id)
        if topic is None:
            raise NotFound("Topic not found", code="TOPIC_NOT_FOUND")
        return topic

    async def create(self, form: Mapping[str, Optional[str]]) -> Topic:
        """Create an active topic.

        Raises:
            ValidationError: name or description missing or too long
        """
        errors = validate_topic_fields(form)
        if errors:
            raise ValidationError(errors)

        async with await self.uow_factory() as uow:
            topic = await uow.topics.add(
                Topic(name=form["name"], description=form["description"], is_active=True)
            )

        logger.info("topic.created", topic_id=str(topic.id))
        return topic

    async def set_active(self, raw_id: Optional[str], is_active: Optional[bool]) -> Topic:
        """Toggle a topic's is_active flag; nothing else is mutable.

        Raises:
            ValidationError: id or isActive missing
            NotFound: topic does not exist
        """
        errors = {}
        if not raw_id:
            errors["id"] = "Topic ID is required"
        if is_active is None:
            errors["isActive"] = "isActive is required"
        if errors:
            raise ValidationError(errors)

        topic_id = parse_id(raw_id, "TOPIC_NOT_FOUND", "Topic not found")
        async with await self.uow_factory() as uow:
            topic = await uow.topics.get_by_id(topic_id)
            if topic is None:
                raise NotFound("Topic not found", code="TOPIC_NOT_FOUND")
            await uow.topics.set_active(topic, is_active)

        logger.info("topic.status_updated", topic_id=str(topic_id), is_active=is_active)
        return topic

    async def delete(self, raw_id: Optional[str]) -> int:
        """Delete a topic together with all of its entries, atomically.

        Args:
            raw_id: Topic id

        Returns:
            Number of entries removed with the topic

        Raises:
            ValidationError: id missing
            NotFound: topic missing and require_existing_on_delete is set
        """
        if not raw_id:
            raise ValidationError({"id": "Topic ID is required"}, message="Topic ID is required")

        try:
            topic_id = UUID(str(raw_id))
        except ValueError:
            topic_id = None

        if topic_id is None:
            return self._missing(raw_id)

        async with await self.uow_factory() as uow:
            removed_entries = await uow.entries.delete_by_topic(topic_id)
            removed_topics = await uow.topics.delete(topic_id)
            if removed_topics == 0 and self.require_existing_on_delete:
                # Raising inside the UoW rolls back the entry deletion as well
                raise NotFound("Topic not found", code="TOPIC_NOT_FOUND")

        if removed_topics == 0:
            logger.info("topic.delete_noop", topic_id=str(topic_id), entries_removed=removed_entries)
        else:
            logger.info("topic.deleted", topic_id=str(topic_id), entries_removed=removed_entries)
        return removed_entries

    def _missing(self, raw_id: str) -> int:
        if self.require_existing_on_delete:
            raise NotFound("Topic not found", code="TOPIC_NOT_FOUND")
        logger.info("topic.delete_noop", topic_id=raw_id)
        return 0
