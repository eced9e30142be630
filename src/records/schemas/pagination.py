"""Generic pagination types shared by all list endpoints.

PageResponse[T]: Pydantic model for HTTP responses (serializable).
Paginated[T]:    plain dataclass for service-layer returns (not serializable).
"""

import math
from dataclasses import dataclass

from pydantic import BaseModel

from records.schemas.base import ApiModel


class PageResponse[T](ApiModel):
    """Page envelope returned by collection endpoints.

    Wire shape: ``{content, totalElements, totalPages, size, number}`` where
    ``number`` is the zero-based page index. Use this in **routers** only.
    """

    content: list[T]
    total_elements: int
    total_pages: int
    size: int
    number: int


@dataclass
class Paginated[T]:
    """Plain dataclass for paginated results inside the service layer.

    Services shouldn't know about serialization, they just pass data up to
    the router, which converts it with ``to_response``.
    """

    items: list[T]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    def to_response[R: BaseModel](self, schema: type[R]) -> PageResponse[R]:
        """Build the HTTP envelope, validating each item into `schema`."""
        return PageResponse[schema](  # type: ignore[valid-type]
            content=[schema.model_validate(item) for item in self.items],
            total_elements=self.total,
            total_pages=self.total_pages,
            size=self.size,
            number=self.page,
        )
