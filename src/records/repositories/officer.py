"""Officer data-access layer.

Two implementations of the same contract: one issuing hand-written SQL and
mapping rows by hand, one going through the ORM. No business logic, no HTTP
concerns.
"""

from typing import Any, Protocol

from sqlalchemy import Row, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from records.models import Officer, Rank
from records.repositories.base import CrudRepository, in_id_range

_COLUMNS = "id, rank, first_name, last_name"


class OfficerRepository(CrudRepository[Officer], Protocol):
    async def find_by_rank(self, rank: Rank) -> list[Officer]: ...


def _map_officer(row: Row[Any]) -> Officer:
    return Officer(
        id=row.id,
        rank=Rank(row.rank),
        first_name=row.first_name,
        last_name=row.last_name,
    )


class SqlOfficerRepository:
    """Officers through parameterised SQL statements."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, officer: Officer) -> Officer:
        params = {
            "rank": Rank(officer.rank).value,
            "first_name": officer.first_name,
            "last_name": officer.last_name,
        }
        if officer.id is None:
            result = await self.session.execute(
                text(
                    "INSERT INTO officers (rank, first_name, last_name) "
                    "VALUES (:rank, :first_name, :last_name) RETURNING id"
                ),
                params,
            )
            officer.id = result.scalar_one()
        else:
            await self.session.execute(
                text(
                    "UPDATE officers SET rank = :rank, first_name = :first_name, "
                    "last_name = :last_name WHERE id = :id"
                ),
                {**params, "id": officer.id},
            )
        return officer

    async def find_by_id(self, officer_id: int) -> Officer | None:
        if not in_id_range(officer_id):
            return None
        result = await self.session.execute(
            text(f"SELECT {_COLUMNS} FROM officers WHERE id = :id"), {"id": officer_id}
        )
        row = result.first()
        return _map_officer(row) if row is not None else None

    async def find_all(self) -> list[Officer]:
        result = await self.session.execute(text(f"SELECT {_COLUMNS} FROM officers ORDER BY id"))
        return [_map_officer(row) for row in result]

    async def find_by_rank(self, rank: Rank) -> list[Officer]:
        result = await self.session.execute(
            text(f"SELECT {_COLUMNS} FROM officers WHERE rank = :rank ORDER BY id"),
            {"rank": rank.value},
        )
        return [_map_officer(row) for row in result]

    async def count(self) -> int:
        result = await self.session.execute(text("SELECT count(*) FROM officers"))
        return int(result.scalar_one())

    async def delete(self, officer: Officer) -> None:
        await self.session.execute(text("DELETE FROM officers WHERE id = :id"), {"id": officer.id})

    async def exists_by_id(self, officer_id: int) -> bool:
        if not in_id_range(officer_id):
            return False
        result = await self.session.execute(
            text("SELECT EXISTS (SELECT 1 FROM officers WHERE id = :id)"), {"id": officer_id}
        )
        return bool(result.scalar_one())


class OrmOfficerRepository:
    """Officers through the ORM unit of work."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, officer: Officer) -> Officer:
        if officer.id is None:
            self.session.add(officer)
        else:
            officer = await self.session.merge(officer)
        await self.session.flush()
        return officer

    async def find_by_id(self, officer_id: int) -> Officer | None:
        if not in_id_range(officer_id):
            return None
        return await self.session.get(Officer, officer_id)

    async def find_all(self) -> list[Officer]:
        result = await self.session.execute(select(Officer).order_by(Officer.id))
        return list(result.scalars().all())

    async def find_by_rank(self, rank: Rank) -> list[Officer]:
        stmt = select(Officer).where(Officer.rank == rank).order_by(Officer.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Officer.id)))
        return result.scalar_one()

    async def delete(self, officer: Officer) -> None:
        if officer.id is None:
            return
        persistent = await self.session.get(Officer, officer.id)
        if persistent is not None:
            await self.session.delete(persistent)
            await self.session.flush()

    async def exists_by_id(self, officer_id: int) -> bool:
        if not in_id_range(officer_id):
            return False
        stmt = select(func.count(Officer.id)).where(Officer.id == officer_id)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0
