"""Shared FastAPI dependencies.

This is the wiring layer: each service is constructed here with its
repository, and each repository with the request's session, using the
backend named in settings. Routers only ever ask for the finished service.
Defined here (not in main.py) to avoid circular imports when routers are
registered in main.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from records.config import RepositoryBackend, settings
from records.db.session import get_db
from records.repositories.factory import build_officer_repository, build_product_repository
from records.services.officer import OfficerService
from records.services.product import ProductService

DB = Annotated[AsyncSession, Depends(get_db)]


def get_repository_backend() -> RepositoryBackend:
    """Configured repository backend. Tests override this to run against both."""
    return settings.dao_backend


Backend = Annotated[RepositoryBackend, Depends(get_repository_backend)]


def get_product_service(db: DB, backend: Backend) -> ProductService:
    return ProductService(build_product_repository(backend, db))


def get_officer_service(db: DB, backend: Backend) -> OfficerService:
    return OfficerService(build_officer_repository(backend, db))


Products = Annotated[ProductService, Depends(get_product_service)]
Officers = Annotated[OfficerService, Depends(get_officer_service)]
