"""Product business logic.

Enforces the catalogue rules the repositories know nothing about: unique
SKUs checked up front, prices with at most two decimals, stock that never
goes negative. Every operation runs inside the caller's transaction.
"""

from dataclasses import dataclass
from decimal import Decimal

from records.exceptions import (
    DomainValidationError,
    DuplicateKeyError,
    InsufficientStockError,
    NotFoundError,
)
from records.logging import get_logger
from records.models import MAX_INT, Product
from records.repositories.base import PageRequest
from records.repositories.product import SORTABLE_FIELDS, ProductRepository
from records.schemas.pagination import Paginated
from records.timing import timed

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductFields:
    """Validated input for creating or replacing a product."""

    name: str
    price: Decimal
    quantity: int
    sku: str
    description: str | None = None
    contact_email: str | None = None


def _check_price_scale(price: Decimal) -> None:
    exponent = price.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -2:
        raise DomainValidationError("price", price, "Price can have at most 2 decimal places")


class ProductService:
    def __init__(self, repository: ProductRepository) -> None:
        self.repository = repository

    async def _require(self, product_id: int, *, for_update: bool = False) -> Product:
        product = await self.repository.find_by_id(product_id, for_update=for_update)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    @timed()
    async def get_product(self, product_id: int) -> Product:
        return await self._require(product_id)

    @timed()
    async def list_products(self, page_request: PageRequest) -> Paginated[Product]:
        if page_request.sort.field not in SORTABLE_FIELDS:
            raise DomainValidationError(
                "sort",
                page_request.sort.field,
                f"Cannot sort by '{page_request.sort.field}'. "
                f"Allowed: {', '.join(sorted(SORTABLE_FIELDS))}",
            )
        items = await self.repository.find_page(page_request)
        total = await self.repository.count()
        return Paginated(items=items, total=total, page=page_request.page, size=page_request.size)

    @timed()
    async def search_by_name(self, name: str) -> list[Product]:
        return await self.repository.search_by_name(name)

    @timed()
    async def find_by_price_range(self, min_price: Decimal, max_price: Decimal) -> list[Product]:
        if min_price > max_price:
            raise DomainValidationError(
                "minPrice", min_price, "Min price cannot be greater than max price"
            )
        return await self.repository.find_by_price_between(min_price, max_price)

    @timed()
    async def low_stock(self, threshold: int) -> list[Product]:
        return await self.repository.find_low_stock(threshold)

    @timed()
    async def expensive(self, min_price: Decimal) -> list[Product]:
        return await self.repository.find_expensive(min_price)

    @timed()
    async def create_product(self, fields: ProductFields) -> Product:
        _check_price_scale(fields.price)
        # Pre-check the business key; the unique index still covers the race window.
        if await self.repository.exists_by_sku(fields.sku):
            raise DuplicateKeyError("Product", "sku", fields.sku)

        product = await self.repository.save(
            Product(
                name=fields.name,
                price=fields.price,
                description=fields.description,
                quantity=fields.quantity,
                sku=fields.sku,
                contact_email=fields.contact_email,
            )
        )
        logger.info("product_created", product_id=product.id, sku=product.sku)
        return product

    @timed()
    async def update_product(self, product_id: int, fields: ProductFields) -> Product:
        product = await self._require(product_id)
        _check_price_scale(fields.price)
        if product.sku != fields.sku and await self.repository.exists_by_sku(fields.sku):
            raise DuplicateKeyError("Product", "sku", fields.sku)

        product.name = fields.name
        product.price = fields.price
        product.description = fields.description
        product.quantity = fields.quantity
        product.sku = fields.sku
        product.contact_email = fields.contact_email

        product = await self.repository.save(product)
        logger.info("product_updated", product_id=product_id)
        return product

    @timed()
    async def delete_product(self, product_id: int) -> None:
        product = await self._require(product_id)
        await self.repository.delete(product)
        logger.info("product_deleted", product_id=product_id)

    @timed()
    async def update_stock(self, product_id: int, quantity: int) -> Product:
        """Set the stock level to an absolute value (not additive)."""
        product = await self._require(product_id, for_update=True)
        if quantity < 0:
            raise DomainValidationError("quantity", quantity, "Stock quantity cannot be negative")

        previous = product.quantity
        product.quantity = quantity
        product = await self.repository.save(product)
        logger.info("stock_updated", product_id=product_id, previous=previous, current=quantity)
        return product

    @timed()
    async def reserve_stock(self, product_id: int, quantity: int) -> Product:
        """Take `quantity` units out of stock.

        The row is locked for the rest of the transaction, so concurrent
        reservations against the same product serialize and cannot oversell.
        """
        product = await self._require(product_id, for_update=True)
        if quantity <= 0:
            raise DomainValidationError("quantity", quantity, "Quantity to reserve must be positive")
        if not product.has_stock(quantity):
            raise InsufficientStockError(product_id, quantity, product.quantity)

        product.decrement_stock(quantity)
        product = await self.repository.save(product)
        logger.info(
            "stock_reserved", product_id=product_id, quantity=quantity, remaining=product.quantity
        )
        return product

    @timed()
    async def add_stock(self, product_id: int, quantity: int) -> Product:
        product = await self._require(product_id, for_update=True)
        if quantity <= 0:
            raise DomainValidationError("quantity", quantity, "Quantity to add must be positive")
        if product.quantity + quantity > MAX_INT:
            raise DomainValidationError(
                "quantity",
                quantity,
                f"Stock cannot exceed {MAX_INT}, currently {product.quantity} on hand",
            )

        product.increment_stock(quantity)
        product = await self.repository.save(product)
        logger.info("stock_added", product_id=product_id, quantity=quantity, total=product.quantity)
        return product
