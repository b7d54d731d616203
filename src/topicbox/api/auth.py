"""Admin authorization collaborator.

Identity and token issuance live outside this service. Admin endpoints only ask
an AdminAuthorizer one question per request: is this caller authorized? The
answer is a plain boolean; no session object is kept between requests.
"""

import hmac
from typing import Protocol

from fastapi import Request


class AdminAuthorizer(Protocol):
    def is_authorized(self, request: Request) -> bool: ...


class BearerTokenAuthorizer:
    """Accepts requests carrying `Authorization: Bearer <ADMIN_API_TOKEN>`.

    Uses constant-time comparison to prevent timing attacks. An empty configured
    token authorizes nobody.
    """

    def __init__(self, token: str):
        self.token = token

    def is_authorized(self, request: Request) -> bool:
        if not self.token:
            return False
        header = request.headers.get("authorization", "")
        scheme, _, credentials = header.partition(" ")
        if scheme.lower() != "bearer" or not credentials:
            return False
        return hmac.compare_digest(credentials.strip().encode(), self.token.encode())


class StaticAuthorizer:
    """Fixed answer, for wiring an upstream gateway that already authenticated the caller."""

    def __init__(self, authorized: bool):
        self.authorized = authorized

    def is_authorized(self, request: Request) -> bool:
        return self.authorized
