"""Pagination engine shared by topic and entry listings.

Raw query parameters are parsed leniently: a missing or unparsable page falls
back to 1 and a missing or unparsable limit to 10; page is floored at 1 and
limit clamped to [1, 100]. Numeric prefixes are honored ("3abc" -> 3).
"""

import math
import re
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")

T = TypeVar("T")


def _parse_int(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    match = _INT_PREFIX_RE.match(raw)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class PageRequest:
    """Normalized page/limit with the derived offset."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_query(cls, page: str | int | None = None, limit: str | int | None = None):
        """Build a page request from raw query parameters.

        A parsed value of 0 counts as "not provided", matching the behavior of
        the public API clients rely on (limit=0 means the default of 10).
        """
        parsed_page = _parse_int(page) or 1
        parsed_limit = _parse_int(limit) or DEFAULT_PAGE_SIZE
        return cls(
            page=max(1, parsed_page),
            limit=min(MAX_PAGE_SIZE, max(1, parsed_limit)),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationInfo(BaseModel):
    """Pagination block returned with every listing."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(..., description="Total number of matching items (across all pages)")
    page: int = Field(..., description="Requested page (1-based)")
    limit: int = Field(..., description="Maximum number of items per page")
    total_pages: int = Field(
        ..., alias="totalPages", description="ceil(total / limit), 0 when empty"
    )

    @classmethod
    def build(cls, request: PageRequest, total: int) -> "PaginationInfo":
        return cls(
            total=total,
            page=request.page,
            limit=request.limit,
            total_pages=total_pages(total, request.limit),
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items plus its pagination metadata."""

    items: list[T]
    pagination: PaginationInfo


def total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / limit)


def paginate_in_memory(items: Sequence[T], request: PageRequest) -> Page[T]:
    """Slice an already filtered and ordered sequence.

    The total is the length of the sequence given, so callers must pass the
    filtered list, never the unfiltered collection.
    """
    window = list(items[request.offset : request.offset + request.limit])
    return Page(items=window, pagination=PaginationInfo.build(request, len(items)))
