"""Page/limit arithmetic shared by the list endpoints."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from tasktracker.db.models import MAX_ID
from tasktracker.errors import BadRequest

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> PaginationMeta:
        return PaginationMeta(
            total=total,
            page=self.page,
            limit=self.limit,
            total_pages=total_pages(total, self.limit),
        )


def total_pages(total: int, limit: int) -> int:
    """ceil(total / limit) in integer arithmetic."""
    return -(-total // limit)


def page_request(page: Optional[int] = None, limit: Optional[int] = None) -> PageRequest:
    """Normalize query params: page clamps to >= 1, limit must be >= 1.

    The resulting OFFSET has to fit a BIGINT, otherwise the request is
    rejected instead of reaching the driver.
    """
    page = DEFAULT_PAGE if page is None else max(page, 1)
    limit = DEFAULT_LIMIT if limit is None else limit
    if limit < 1:
        raise BadRequest("limit must be at least 1")
    req = PageRequest(page=page, limit=limit)
    if req.offset > MAX_ID:
        raise BadRequest("page out of range")
    return req
