"""Topic API endpoints.

- GET /api/topics - Paginated topics, type=active|all (public)
- GET /api/topics/{topic_id} - Single topic, used by the submission page (public)
- POST /api/topics - Create an active topic (admin)
- PATCH /api/topics - Toggle isActive (admin)
- DELETE /api/topics - Delete a topic and all of its entries atomically (admin)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field, StrictBool

from topicbox.api.dependencies import get_topic_service, require_admin
from topicbox.api.schemas import CamelModel, MessageResponse
from topicbox.services.pagination import PageRequest, PaginationInfo
from topicbox.services.topic_service import TopicService

router = APIRouter(prefix="/api/topics", tags=["topics"])


# Request/Response Models


class CreateTopicRequest(BaseModel):
    name: str | None = None
    description: str | None = None


class UpdateTopicRequest(CamelModel):
    id: str | None = None
    is_active: StrictBool | None = None


class DeleteTopicRequest(BaseModel):
    id: str | None = None


class TopicDTO(CamelModel):
    """Data Transfer Object for topics in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    is_active: bool
    created_at: int = Field(..., description="Creation time, milliseconds since epoch")


class TopicsResponse(BaseModel):
    topics: list[TopicDTO]
    pagination: PaginationInfo


# API Endpoints


@router.get("", response_model=TopicsResponse)
async def list_topics(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    type: str | None = Query(default=None),
    service: TopicService = Depends(get_topic_service),
) -> TopicsResponse:
    """List topics newest first.

    type=active restricts to active topics; any other value (or none) lists all.
    """
    result = await service.list_page(
        PageRequest.from_query(page, limit), active_only=type == "active"
    )
    return TopicsResponse(
        topics=[TopicDTO.model_validate(topic) for topic in result.items],
        pagination=result.pagination,
    )


@router.get("/{topic_id}", response_model=TopicDTO)
async def get_topic(
    topic_id: str,
    service: TopicService = Depends(get_topic_service),
) -> TopicDTO:
    """Fetch one topic. 404 TOPIC_NOT_FOUND when it does not exist."""
    return TopicDTO.model_validate(await service.get(topic_id))


@router.post(
    "",
    response_model=TopicDTO,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_topic(
    request: CreateTopicRequest,
    service: TopicService = Depends(get_topic_service),
) -> TopicDTO:
    """Create a topic. isActive is always true for new topics."""
    topic = await service.create(request.model_dump())
    return TopicDTO.model_validate(topic)


@router.patch("", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def update_topic(
    request: UpdateTopicRequest,
    service: TopicService = Depends(get_topic_service),
) -> MessageResponse:
    """Update the isActive flag only."""
    await service.set_active(request.id, request.is_active)
    return MessageResponse(message="Topic status updated")


@router.delete("", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_topic(
    request: DeleteTopicRequest,
    service: TopicService = Depends(get_topic_service),
) -> MessageResponse:
    """Delete a topic and every entry referencing it in one transaction.

    Deleting a topic that does not exist succeeds (idempotent) unless
    TOPIC_DELETE_REQUIRE_EXISTS is enabled.
    """
    await service.delete(request.id)
    return MessageResponse(message="Topic and related entries deleted successfully")
