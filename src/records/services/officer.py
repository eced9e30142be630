"""Officer roster operations."""

from dataclasses import dataclass

from records.exceptions import NotFoundError
from records.logging import get_logger
from records.models import Officer, Rank
from records.repositories.officer import OfficerRepository
from records.timing import timed

logger = get_logger(__name__)


@dataclass(frozen=True)
class OfficerFields:
    rank: Rank
    last_name: str
    first_name: str | None = None


class OfficerService:
    def __init__(self, repository: OfficerRepository) -> None:
        self.repository = repository

    @timed()
    async def list_officers(self, rank: Rank | None = None) -> list[Officer]:
        if rank is None:
            return await self.repository.find_all()
        return await self.repository.find_by_rank(rank)

    @timed()
    async def count_officers(self) -> int:
        return await self.repository.count()

    @timed()
    async def get_officer(self, officer_id: int) -> Officer:
        officer = await self.repository.find_by_id(officer_id)
        if officer is None:
            raise NotFoundError("Officer", officer_id)
        return officer

    @timed()
    async def create_officer(self, fields: OfficerFields) -> Officer:
        officer = await self.repository.save(
            Officer(rank=fields.rank, first_name=fields.first_name, last_name=fields.last_name)
        )
        logger.info("officer_created", officer_id=officer.id)
        return officer

    @timed()
    async def delete_officer(self, officer_id: int) -> None:
        officer = await self.get_officer(officer_id)
        await self.repository.delete(officer)
        logger.info("officer_deleted", officer_id=officer_id)
