"""Repository contract shared by every storage backend.

A repository exposes the same six operations regardless of how it talks to
the database. Callers type against the protocol, so the SQL and ORM
implementations are interchangeable at wiring time.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from records.exceptions import DomainValidationError
from records.models import MAX_INT


class CrudRepository[T](Protocol):
    """Persistence operations over a single entity type.

    - find_by_id returns None for a missing row, it never raises
      (ids outside the column range count as missing)
    - delete of a missing row is a no-op
    - exists_by_id(x) == (find_by_id(x) is not None) at the same point in time
    """

    async def save(self, entity: T) -> T: ...

    async def find_by_id(self, entity_id: int) -> T | None: ...

    async def find_all(self) -> list[T]: ...

    async def count(self) -> int: ...

    async def delete(self, entity: T) -> None: ...

    async def exists_by_id(self, entity_id: int) -> bool: ...


def in_id_range(entity_id: int) -> bool:
    """Whether the key fits the Integer primary key column at all."""
    return 1 <= entity_id <= MAX_INT


class Direction(StrEnum):
    ASC = "asc"
    DESC = "desc"


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class Sort:
    """Ordering for page queries, parsed from Spring-style ``field,direction`` strings."""

    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def parse(cls, raw: str) -> "Sort":
        """Parse ``"name"``, ``"price,desc"`` or ``"createdAt,asc"``.

        camelCase field names are converted to column names. Raises
        DomainValidationError for an empty field or an unknown direction.
        """
        name, _, direction = raw.partition(",")
        name = name.strip()
        if not name:
            raise DomainValidationError("sort", raw, "Sort field must not be empty")
        column = _CAMEL_BOUNDARY.sub("_", name).lower()
        direction = direction.strip().lower() or Direction.ASC
        try:
            return cls(column, Direction(direction))
        except ValueError:
            raise DomainValidationError(
                "sort", raw, f"Sort direction must be 'asc' or 'desc', got '{direction}'"
            ) from None


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page number, page size and ordering."""

    page: int = 0
    size: int = 20
    sort: Sort = field(default_factory=lambda: Sort("id"))

    @property
    def offset(self) -> int:
        return self.page * self.size


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern with LIKE wildcards escaped (escape char ``\\``)."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
