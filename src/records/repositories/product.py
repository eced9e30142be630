"""Product data-access layer.

Pure query code, no business rules. SqlProductRepository writes its own
statements and maps rows by hand; OrmProductRepository lets the ORM build
them. Both satisfy ProductRepository and are exercised by the same tests.
"""

from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy import Row, TextClause, bindparam, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from records.models import Product, utcnow
from records.repositories.base import (
    CrudRepository,
    Direction,
    PageRequest,
    in_id_range,
    like_pattern,
)

SORTABLE_FIELDS = frozenset(
    {"id", "name", "price", "quantity", "sku", "created_at", "updated_at"}
)

_TABLE = Product.__table__
_COLUMNS = ", ".join(column.name for column in _TABLE.columns)
# Result and bind types for textual SQL, so Numeric and DateTime values are
# converted the same way the ORM converts them (SQLite stores both as text/float).
_TYPES = {column.name: column.type for column in _TABLE.columns}


class ProductRepository(CrudRepository[Product], Protocol):
    async def find_by_id(self, product_id: int, *, for_update: bool = False) -> Product | None: ...

    async def find_page(self, request: PageRequest) -> list[Product]: ...

    async def find_by_sku(self, sku: str) -> Product | None: ...

    async def exists_by_sku(self, sku: str) -> bool: ...

    async def search_by_name(self, name: str) -> list[Product]: ...

    async def find_by_price_between(self, min_price: Decimal, max_price: Decimal) -> list[Product]: ...

    async def find_low_stock(self, threshold: int) -> list[Product]: ...

    async def find_expensive(self, min_price: Decimal) -> list[Product]: ...


def _statement(sql: str, *params: str) -> TextClause:
    """Textual statement with typed bind parameters for the named product columns."""
    return text(sql).bindparams(*(bindparam(name, type_=_TYPES[name]) for name in params))


def _select(where: str = "", order_by: str = "id", *params: str) -> Any:
    sql = f"SELECT {_COLUMNS} FROM products"
    if where:
        sql += f" WHERE {where}"
    sql += f" ORDER BY {order_by}"
    return _statement(sql, *params).columns(**_TYPES)


def _map_product(row: Row[Any]) -> Product:
    return Product(**{name: getattr(row, name) for name in _TYPES})


def _check_sortable(field: str) -> None:
    if field not in SORTABLE_FIELDS:
        raise ValueError(f"Cannot sort products by {field!r}")


class SqlProductRepository:
    """Products through parameterised SQL statements."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _supports_row_locks(self) -> bool:
        return self.session.get_bind().dialect.name != "sqlite"

    async def _fetch(self, stmt: Any, params: dict[str, Any] | None = None) -> list[Product]:
        result = await self.session.execute(stmt, params or {})
        return [_map_product(row) for row in result]

    async def save(self, product: Product) -> Product:
        now = utcnow()
        params: dict[str, Any] = {
            "name": product.name,
            "price": product.price,
            "description": product.description,
            "quantity": product.quantity,
            "sku": product.sku,
            "contact_email": product.contact_email,
            "updated_at": now,
        }
        if product.id is None:
            params["created_at"] = now
            stmt = _statement(
                "INSERT INTO products "
                "(name, price, description, quantity, sku, contact_email, created_at, updated_at) "
                "VALUES (:name, :price, :description, :quantity, :sku, :contact_email, "
                ":created_at, :updated_at) RETURNING id",
                "price",
                "created_at",
                "updated_at",
            )
            result = await self.session.execute(stmt, params)
            product.id = result.scalar_one()
            product.created_at = now
        else:
            params["id"] = product.id
            stmt = _statement(
                "UPDATE products SET name = :name, price = :price, description = :description, "
                "quantity = :quantity, sku = :sku, contact_email = :contact_email, "
                "updated_at = :updated_at WHERE id = :id",
                "price",
                "updated_at",
            )
            await self.session.execute(stmt, params)
        product.updated_at = now
        return product

    async def find_by_id(self, product_id: int, *, for_update: bool = False) -> Product | None:
        if not in_id_range(product_id):
            return None
        stmt = f"SELECT {_COLUMNS} FROM products WHERE id = :id"
        if for_update and self._supports_row_locks():
            stmt += " FOR UPDATE"
        rows = await self._fetch(text(stmt).columns(**_TYPES), {"id": product_id})
        return rows[0] if rows else None

    async def find_all(self) -> list[Product]:
        return await self._fetch(_select())

    async def find_page(self, request: PageRequest) -> list[Product]:
        _check_sortable(request.sort.field)
        # Column name comes from the whitelist above, never from raw input.
        order = f"{request.sort.field} {request.sort.direction.value.upper()}, id"
        stmt = text(
            f"SELECT {_COLUMNS} FROM products ORDER BY {order} LIMIT :limit OFFSET :offset"
        ).columns(**_TYPES)
        return await self._fetch(stmt, {"limit": request.size, "offset": request.offset})

    async def find_by_sku(self, sku: str) -> Product | None:
        rows = await self._fetch(_select("sku = :sku"), {"sku": sku})
        return rows[0] if rows else None

    async def exists_by_sku(self, sku: str) -> bool:
        result = await self.session.execute(
            text("SELECT EXISTS (SELECT 1 FROM products WHERE sku = :sku)"), {"sku": sku}
        )
        return bool(result.scalar_one())

    async def search_by_name(self, name: str) -> list[Product]:
        stmt = _select("lower(name) LIKE :pattern ESCAPE '\\'", "id")
        return await self._fetch(stmt, {"pattern": like_pattern(name)})

    async def find_by_price_between(self, min_price: Decimal, max_price: Decimal) -> list[Product]:
        stmt = text(
            f"SELECT {_COLUMNS} FROM products "
            "WHERE price BETWEEN :min_price AND :max_price ORDER BY price, id"
        ).bindparams(
            bindparam("min_price", type_=_TYPES["price"]),
            bindparam("max_price", type_=_TYPES["price"]),
        )
        return await self._fetch(
            stmt.columns(**_TYPES), {"min_price": min_price, "max_price": max_price}
        )

    async def find_low_stock(self, threshold: int) -> list[Product]:
        stmt = _select("quantity < :threshold", "quantity ASC, id")
        return await self._fetch(stmt, {"threshold": threshold})

    async def find_expensive(self, min_price: Decimal) -> list[Product]:
        stmt = text(
            f"SELECT {_COLUMNS} FROM products WHERE price >= :min_price ORDER BY price DESC, id"
        ).bindparams(bindparam("min_price", type_=_TYPES["price"]))
        return await self._fetch(stmt.columns(**_TYPES), {"min_price": min_price})

    async def count(self) -> int:
        result = await self.session.execute(text("SELECT count(*) FROM products"))
        return int(result.scalar_one())

    async def delete(self, product: Product) -> None:
        await self.session.execute(text("DELETE FROM products WHERE id = :id"), {"id": product.id})

    async def exists_by_id(self, product_id: int) -> bool:
        if not in_id_range(product_id):
            return False
        result = await self.session.execute(
            text("SELECT EXISTS (SELECT 1 FROM products WHERE id = :id)"), {"id": product_id}
        )
        return bool(result.scalar_one())


class OrmProductRepository:
    """Products through the ORM unit of work."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _scalars(self, stmt: Any) -> list[Product]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save(self, product: Product) -> Product:
        if product.id is None:
            self.session.add(product)
        else:
            product = await self.session.merge(product)
        await self.session.flush()
        return product

    async def find_by_id(self, product_id: int, *, for_update: bool = False) -> Product | None:
        if not in_id_range(product_id):
            return None
        return await self.session.get(
            Product, product_id, with_for_update=for_update or None, populate_existing=for_update
        )

    async def find_all(self) -> list[Product]:
        return await self._scalars(select(Product).order_by(Product.id))

    async def find_page(self, request: PageRequest) -> list[Product]:
        _check_sortable(request.sort.field)
        column = getattr(Product, request.sort.field)
        order = column.desc() if request.sort.direction is Direction.DESC else column.asc()
        stmt = (
            select(Product)
            .order_by(order, Product.id)
            .offset(request.offset)
            .limit(request.size)
        )
        return await self._scalars(stmt)

    async def find_by_sku(self, sku: str) -> Product | None:
        result = await self.session.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def exists_by_sku(self, sku: str) -> bool:
        result = await self.session.execute(select(func.count(Product.id)).where(Product.sku == sku))
        return result.scalar_one() > 0

    async def search_by_name(self, name: str) -> list[Product]:
        stmt = (
            select(Product)
            .where(func.lower(Product.name).like(like_pattern(name), escape="\\"))
            .order_by(Product.id)
        )
        return await self._scalars(stmt)

    async def find_by_price_between(self, min_price: Decimal, max_price: Decimal) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.price.between(min_price, max_price))
            .order_by(Product.price, Product.id)
        )
        return await self._scalars(stmt)

    async def find_low_stock(self, threshold: int) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.quantity < threshold)
            .order_by(Product.quantity.asc(), Product.id)
        )
        return await self._scalars(stmt)

    async def find_expensive(self, min_price: Decimal) -> list[Product]:
        stmt = (
            select(Product)
            .where(Product.price >= min_price)
            .order_by(Product.price.desc(), Product.id)
        )
        return await self._scalars(stmt)

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Product.id)))
        return result.scalar_one()

    async def delete(self, product: Product) -> None:
        if product.id is None:
            return
        persistent = await self.session.get(Product, product.id)
        if persistent is not None:
            await self.session.delete(persistent)
            await self.session.flush()

    async def exists_by_id(self, product_id: int) -> bool:
        if not in_id_range(product_id):
            return False
        stmt = select(func.count(Product.id)).where(Product.id == product_id)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0
