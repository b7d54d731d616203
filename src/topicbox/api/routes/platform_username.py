"""Platform username verification endpoint.

POST /api/validate-platform-username lets the submission form check a username
before submitting the whole entry. Entry creation runs the same check again
server-side, so this endpoint is advisory.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from topicbox.api.dependencies import get_platform_checker
from topicbox.services.exceptions import ValidationError
from topicbox.services.platform_username import PlatformUsernameChecker

router = APIRouter(prefix="/api", tags=["validation"])


class ValidateUsernameRequest(BaseModel):
    username: str | None = None


class ValidateUsernameResponse(BaseModel):
    isValid: bool


@router.post("/validate-platform-username", response_model=ValidateUsernameResponse)
async def validate_platform_username(
    request: ValidateUsernameRequest,
    checker: PlatformUsernameChecker = Depends(get_platform_checker),
) -> ValidateUsernameResponse:
    """Return {"isValid": bool}; 400 when username is missing, 502 when the checker is down."""
    if not request.username:
        raise ValidationError({"username": "Username is required"}, message="Username is required")
    return ValidateUsernameResponse(isValid=await checker.is_valid(request.username))
