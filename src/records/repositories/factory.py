"""Repository selection.

One function per entity maps the configured backend to a concrete
implementation. Called from the wiring layer with the backend passed in
explicitly, so tests can build either one without touching settings.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from records.config import RepositoryBackend
from records.repositories.officer import (
    OfficerRepository,
    OrmOfficerRepository,
    SqlOfficerRepository,
)
from records.repositories.product import (
    OrmProductRepository,
    ProductRepository,
    SqlProductRepository,
)


def build_officer_repository(
    backend: RepositoryBackend, session: AsyncSession
) -> OfficerRepository:
    match RepositoryBackend(backend):
        case RepositoryBackend.SQL:
            return SqlOfficerRepository(session)
        case RepositoryBackend.ORM:
            return OrmOfficerRepository(session)


def build_product_repository(
    backend: RepositoryBackend, session: AsyncSession
) -> ProductRepository:
    match RepositoryBackend(backend):
        case RepositoryBackend.SQL:
            return SqlProductRepository(session)
        case RepositoryBackend.ORM:
            return OrmProductRepository(session)
