"""FastAPI dependencies for request validation and common operations.

This module provides reusable FastAPI dependencies for:
- Settings access
- Admin authorization (per-request boolean from the configured authorizer)
- Service construction from app.state collaborators
"""

from typing import Callable

from fastapi import Depends, Request

from topicbox.core.config import Settings
from topicbox.services.entry_service import EntryService
from topicbox.services.exceptions import Unauthorized
from topicbox.services.platform_username import PlatformUsernameChecker
from topicbox.services.topic_service import TopicService
from topicbox.uow import UnitOfWork


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance loaded from environment variables.
    """
    return Settings()  # type: ignore[call-arg]  # Pydantic loads from env vars


def get_uow_factory(request: Request) -> Callable[[], UnitOfWork]:
    """Get UnitOfWork factory from app state.

    Example:
        >>> @router.post("/endpoint")
        >>> async def endpoint(uow_factory=Depends(get_uow_factory)):
        ...     async with await uow_factory() as uow:
        ...         await uow.topics.get_by_id(topic_id)
    """
    return request.app.state.uow_factory


def get_platform_checker(request: Request) -> PlatformUsernameChecker:
    """Get the platform username checker configured at startup."""
    return request.app.state.platform_checker


async def require_admin(request: Request) -> None:
    """Reject the request unless the authorizer vouches for the caller.

    Raises:
        Unauthorized: 401 when the authorizer answers False
    """
    authorizer = request.app.state.authorizer
    if not authorizer.is_authorized(request):
        raise Unauthorized("Unauthorized")


def get_entry_service(
    request: Request,
    settings: Settings = Depends(get_settings),
    uow_factory=Depends(get_uow_factory),
    platform_checker: PlatformUsernameChecker = Depends(get_platform_checker),
) -> EntryService:
    """Build the entry service from per-app collaborators."""
    return EntryService(
        uow_factory=uow_factory,
        platform_checker=platform_checker,
        settings=settings,
        topic_locks=request.app.state.topic_locks,
    )


def get_topic_service(
    settings: Settings = Depends(get_settings),
    uow_factory=Depends(get_uow_factory),
) -> TopicService:
    """Build the topic service honoring the delete-existence policy."""
    return TopicService(
        uow_factory=uow_factory,
        require_existing_on_delete=settings.topic_delete_require_exists,
    )
