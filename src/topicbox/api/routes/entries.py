"""Entry API endpoints.

This module implements REST endpoints for entry submission and auditing:
- POST /api/entries - Public submission (validation, platform check, uniqueness)
- GET /api/entries - Paginated listing filtered by topicId or topicName (admin)
- GET /api/entries/export - CSV export of the filtered set (admin)
- DELETE /api/entries - Delete one entry by id (admin)

Error responses share the body {"error", "code", "details"?}; see api/errors.py.
"""

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from topicbox.api.dependencies import get_entry_service, require_admin
from topicbox.api.schemas import CamelModel, MessageResponse
from topicbox.services.entry_service import EntryService
from topicbox.services.pagination import PageRequest, PaginationInfo

router = APIRouter(prefix="/api/entries", tags=["entries"])


# Request/Response Models


class CreateEntryRequest(CamelModel):
    """Candidate entry as submitted by the public form.

    Every field is optional at the schema level so that missing values are
    reported by the field validators with their specific messages.
    """

    topic_id: str | None = None
    topic_name: str | None = Field(
        default=None, description="Ignored; the stored topic's name is recorded"
    )
    telegram_username: str | None = None
    platform_username: str | None = None
    wallet_address: str | None = None
    discord_username: str | None = None
    email: str | None = None

    def to_form(self) -> dict[str, str | None]:
        return self.model_dump(by_alias=True)


class DeleteEntryRequest(BaseModel):
    id: str | None = None


class EntryDTO(CamelModel):
    """Data Transfer Object for entries in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    topic_id: UUID
    topic_name: str
    telegram_username: str
    platform_username: str
    wallet_address: str = Field(..., description="Checksummed (EIP-55) wallet address")
    discord_username: str | None = None
    email: str
    created_at: int = Field(..., description="Submission time, milliseconds since epoch")


class EntriesResponse(BaseModel):
    """Response model for paginated entry listings."""

    entries: list[EntryDTO]
    pagination: PaginationInfo


# API Endpoints


@router.post("", response_model=EntryDTO, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: CreateEntryRequest,
    service: EntryService = Depends(get_entry_service),
) -> EntryDTO:
    """Submit an entry for a topic.

    Responses:
        201: Stored entry with generated id and createdAt
        400: VALIDATION_FAILED (details per field), DUPLICATE_WALLET, DUPLICATE_EMAIL,
            DUPLICATE_SUBMISSION, INVALID_PLATFORM_USERNAME, TOPIC_INACTIVE
        404: TOPIC_NOT_FOUND
        502: EXTERNAL_CHECK_FAILED (verification service unavailable)

    Example:
        POST /api/entries
        {
            "topicId": "5b0c...",
            "telegramUsername": "@alice",
            "platformUsername": "alice.dev",
            "walletAddress": "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
            "discordUsername": "",
            "email": "alice@example.com"
        }
    """
    entry = await service.submit(request.to_form())
    return EntryDTO.model_validate(entry)


@router.get(
    "",
    response_model=EntriesResponse,
    dependencies=[Depends(require_admin)],
)
async def list_entries(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    topic_id: str | None = Query(default=None, alias="topicId"),
    topic_name: str | None = Query(default=None, alias="topicName"),
    service: EntryService = Depends(get_entry_service),
) -> EntriesResponse:
    """List entries newest first.

    topicId filters exactly (count and page computed by the database); topicName
    filters by case-insensitive substring. topicId wins when both are given.
    """
    result = await service.list_page(
        PageRequest.from_query(page, limit), topic_id=topic_id, topic_name=topic_name
    )
    return EntriesResponse(
        entries=[EntryDTO.model_validate(entry) for entry in result.items],
        pagination=result.pagination,
    )


@router.get("/export", dependencies=[Depends(require_admin)])
async def export_entries(
    topic_id: str | None = Query(default=None, alias="topicId"),
    topic_name: str | None = Query(default=None, alias="topicName"),
    service: EntryService = Depends(get_entry_service),
) -> Response:
    """Download every matching entry as CSV (same filters as the listing)."""
    filename, csv_text = await service.export_csv(topic_id=topic_id, topic_name=topic_name)
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    disposition = f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": disposition},
    )


@router.delete(
    "",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_entry(
    request: DeleteEntryRequest,
    service: EntryService = Depends(get_entry_service),
) -> MessageResponse:
    """Delete one entry. 404 ENTRY_NOT_FOUND when it does not exist."""
    await service.delete(request.id)
    return MessageResponse(message="Entry deleted successfully")
