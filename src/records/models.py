"""SQLAlchemy models.

Define all ORM models here. They must inherit from Base so that
Alembic's autogenerate can detect them.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum

from sqlalchemy import CheckConstraint, DateTime, Enum, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from records.db.session import Base

# Largest value the Integer columns (ids, quantity) hold on every supported database
MAX_INT = 2**31 - 1


def utcnow() -> datetime:
    return datetime.now(UTC)


class Rank(StrEnum):
    ENSIGN = "ENSIGN"
    LIEUTENANT = "LIEUTENANT"
    LT_COMMANDER = "LT_COMMANDER"
    COMMANDER = "COMMANDER"
    CAPTAIN = "CAPTAIN"
    COMMODORE = "COMMODORE"
    ADMIRAL = "ADMIRAL"


class Officer(Base):
    __tablename__ = "officers"

    id: Mapped[int] = mapped_column(primary_key=True)
    rank: Mapped[Rank] = mapped_column(
        Enum(Rank, native_enum=False, length=20, validate_strings=True)
    )
    first_name: Mapped[str | None] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50))

    def __repr__(self) -> str:
        return f"Officer(id={self.id!r}, {self.rank} {self.first_name} {self.last_name})"


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_product_sku", "sku", unique=True),
        Index("idx_product_name", "name"),
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("price > 0 AND price <= 999999.99", name="price_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    description: Mapped[str | None] = mapped_column(String(500))
    quantity: Mapped[int]
    sku: Mapped[str] = mapped_column(String(20))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def has_stock(self, requested: int) -> bool:
        return self.quantity >= requested

    def decrement_stock(self, amount: int) -> None:
        """Remove `amount` units. Refuses to take the quantity below zero."""
        if not self.has_stock(amount):
            raise ValueError(
                f"Cannot decrement stock by {amount}. Only {self.quantity} available"
            )
        self.quantity -= amount

    def increment_stock(self, amount: int) -> None:
        self.quantity += amount

    def __repr__(self) -> str:
        return f"Product(id={self.id!r}, sku={self.sku!r}, quantity={self.quantity!r})"
