"""Product request and response schemas.

Requests only declare types; the field rules (lengths, ranges, SKU pattern)
live in records.validation so every violation is reported at once.
ProductResponse adds two computed fields derived from the quantity.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import AliasChoices, Field, computed_field

from records.schemas.base import ApiModel

StockStatus = Literal["OUT_OF_STOCK", "LOW_STOCK", "MEDIUM_STOCK", "IN_STOCK"]


class ProductRequest(ApiModel):
    name: str | None = None
    price: Decimal | None = None
    description: str | None = None
    quantity: int | None = None
    sku: str | None = None
    contact_email: str | None = None


class StockUpdateRequest(ApiModel):
    """Body of the stock endpoints. ``amount`` is accepted as a synonym for ``quantity``."""

    quantity: int | None = Field(
        default=None, validation_alias=AliasChoices("quantity", "amount")
    )


class ProductResponse(ApiModel):
    id: int
    name: str
    price: Decimal
    description: str | None
    quantity: int
    sku: str
    contact_email: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @computed_field(alias="inStock")  # type: ignore[prop-decorator]
    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @computed_field(alias="stockStatus")  # type: ignore[prop-decorator]
    @property
    def stock_status(self) -> StockStatus:
        if self.quantity == 0:
            return "OUT_OF_STOCK"
        if self.quantity < 10:
            return "LOW_STOCK"
        if self.quantity < 50:
            return "MEDIUM_STOCK"
        return "IN_STOCK"
