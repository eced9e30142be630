"""Sample data for local runs.

Loaded at startup when SEED_SAMPLE_DATA is set. Goes through the configured
repositories, and leaves a table alone if it already has rows.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from records.config import RepositoryBackend
from records.logging import get_logger
from records.models import Officer, Product, Rank
from records.repositories.factory import build_officer_repository, build_product_repository

logger = get_logger(__name__)

SAMPLE_OFFICERS: list[tuple[Rank, str, str]] = [
    (Rank.CAPTAIN, "James", "Kirk"),
    (Rank.CAPTAIN, "Jean-Luc", "Picard"),
    (Rank.CAPTAIN, "Benjamin", "Sisko"),
    (Rank.CAPTAIN, "Kathryn", "Janeway"),
    (Rank.CAPTAIN, "Jonathan", "Archer"),
]

# name, price, description, quantity, sku, contact email
SAMPLE_PRODUCTS: list[tuple[str, str, str, int, str, str]] = [
    ('MacBook Pro 16"', "2499.99", "High-performance laptop for professionals", 15, "APP-000001", "sales@tech.com"),
    ("iPhone 15 Pro", "999.99", "Latest flagship smartphone with advanced camera system", 50, "APP-000002", "sales@tech.com"),
    ("AirPods Pro", "249.99", "Premium wireless earbuds with active noise cancellation", 100, "APP-000003", "sales@tech.com"),
    ("iPad Air", "599.99", "Versatile tablet for work and play", 30, "APP-000004", "sales@tech.com"),
    ("Apple Watch Series 9", "399.99", "Advanced health and fitness tracking smartwatch", 25, "APP-000005", "sales@tech.com"),
    ("Magic Keyboard", "299.99", "Wireless keyboard with Touch ID", 40, "APP-000006", "accessories@tech.com"),
    ("Studio Display", "1599.99", "27-inch 5K Retina display", 8, "APP-000007", "displays@tech.com"),
    ("Mac Mini", "599.99", "Compact desktop computer with M2 chip", 20, "APP-000008", "sales@tech.com"),
    ("HomePod mini", "99.99", "Compact smart speaker with amazing sound", 60, "APP-000009", "audio@tech.com"),
    ("Apple TV 4K", "179.99", "Stream and watch in brilliant 4K HDR", 35, "APP-000010", "entertainment@tech.com"),
    ("USB-C Cable", "19.99", "2-meter charging cable", 200, "ACC-000001", "accessories@tech.com"),
    ("MagSafe Charger", "39.99", "Wireless charging made simple", 150, "ACC-000002", "accessories@tech.com"),
    ("Leather Case", "59.99", "Premium leather case for iPhone", 80, "ACC-000003", "accessories@tech.com"),
    ("Screen Protector", "9.99", "Tempered glass screen protection", 300, "ACC-000004", "accessories@tech.com"),
    ("External SSD 1TB", "149.99", "High-speed portable storage", 5, "STG-000001", "storage@tech.com"),
]  # fmt: skip


async def seed_sample_data(session: AsyncSession, backend: RepositoryBackend) -> None:
    officers = build_officer_repository(backend, session)
    existing = await officers.count()
    if existing:
        logger.info("seed_skipped", table="officers", rows=existing)
    else:
        for rank, first, last in SAMPLE_OFFICERS:
            await officers.save(Officer(rank=rank, first_name=first, last_name=last))
        logger.info("seed_loaded", table="officers", rows=len(SAMPLE_OFFICERS))

    products = build_product_repository(backend, session)
    existing = await products.count()
    if existing:
        logger.info("seed_skipped", table="products", rows=existing)
        return
    for name, price, description, quantity, sku, email in SAMPLE_PRODUCTS:
        await products.save(
            Product(
                name=name,
                price=Decimal(price),
                description=description,
                quantity=quantity,
                sku=sku,
                contact_email=email,
            )
        )
    logger.info("seed_loaded", table="products", rows=len(SAMPLE_PRODUCTS))


async def seed_database(
    session_factory: async_sessionmaker[AsyncSession], backend: RepositoryBackend
) -> None:
    """Seed in its own transaction."""
    async with session_factory() as session, session.begin():
        await seed_sample_data(session, backend)
