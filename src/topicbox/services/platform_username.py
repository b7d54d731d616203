"""Platform username verification against an external predicate.

A username that passed the local format rules is still checked by a
verification service before an entry is accepted. Two checkers share the same
async interface (``await checker.is_valid(username) -> bool``):

- HttpPlatformUsernameChecker: POSTs {"username": ...} to a remote service that
  answers {"isValid": bool}
- LocalPlatformUsernameChecker: applies the verification rules in-process, used
  when no remote service is configured

Unreachable or misbehaving services raise ExternalCheckFailure; they are never
reported as a valid or invalid username.
"""

import re
from typing import Protocol

import httpx
import structlog

from topicbox.services.exceptions import ExternalCheckFailure

logger = structlog.get_logger()

_SPECIAL_CHARS_RE = re.compile(r"[^a-zA-Z0-9_.]")


class PlatformUsernameChecker(Protocol):
    async def is_valid(self, username: str) -> bool: ...


class LocalPlatformUsernameChecker:
    """Rule-based verification: 3-20 chars, no leading digit, [A-Za-z0-9_.] only."""

    async def is_valid(self, username: str) -> bool:
        has_special_chars = bool(_SPECIAL_CHARS_RE.search(username))
        is_invalid_length = len(username) < 3 or len(username) > 20
        starts_with_number = username[:1].isdigit()
        return not has_special_chars and not is_invalid_length and not starts_with_number


class HttpPlatformUsernameChecker:
    """Verification through a remote HTTP service.

    Example:
        >>> checker = HttpPlatformUsernameChecker("https://verify.example.com/usernames")
        >>> await checker.is_valid("alice.dev")
        True
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize checker.

        Args:
            url: Verification endpoint accepting POST {"username": ...}
            timeout_seconds: Total request timeout
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def is_valid(self, username: str) -> bool:
        """Ask the remote service whether the username is acceptable.

        Raises:
            ExternalCheckFailure: Network error, timeout, non-2xx status or a body
                without a boolean "isValid"
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(self.url, json={"username": username})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "platform_check.bad_status",
                url=self.url,
                status_code=e.response.status_code,
            )
            raise ExternalCheckFailure(
                f"Verification service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "platform_check.unreachable",
                url=self.url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ExternalCheckFailure(f"Verification service unreachable: {e}") from e
        except ValueError as e:
            logger.error("platform_check.malformed_body", url=self.url, error=str(e))
            raise ExternalCheckFailure("Verification service returned invalid JSON") from e

        is_valid = payload.get("isValid") if isinstance(payload, dict) else None
        if not isinstance(is_valid, bool):
            logger.error("platform_check.malformed_body", url=self.url, payload=str(payload)[:200])
            raise ExternalCheckFailure("Verification service response lacks 'isValid'")

        logger.debug("platform_check.completed", is_valid=is_valid)
        return is_valid


def build_platform_checker(url: str, timeout_seconds: float) -> PlatformUsernameChecker:
    """Select the remote checker when a URL is configured, the local one otherwise."""
    if url:
        return HttpPlatformUsernameChecker(url, timeout_seconds=timeout_seconds)
    return LocalPlatformUsernameChecker()
