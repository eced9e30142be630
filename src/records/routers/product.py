"""Product endpoints.

Collection and query routes are declared before ``/{product_id}`` so that
paths like ``/search`` never reach the id route.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Query, Request, Response

from records.dependencies import Products
from records.exceptions import RequestValidationFailed
from records.models import MAX_INT, Product
from records.repositories.base import PageRequest, Sort
from records.schemas.pagination import PageResponse
from records.schemas.product import ProductRequest, ProductResponse, StockUpdateRequest
from records.services.product import ProductFields
from records.validation import (
    FieldViolation,
    validate_product_request,
    validate_stock_quantity,
)

router = APIRouter(prefix="/api/v1/products", tags=["products"])


def _ensure_valid(violations: list[FieldViolation]) -> None:
    if violations:
        raise RequestValidationFailed(violations)


def _to_fields(body: ProductRequest) -> ProductFields:
    _ensure_valid(validate_product_request(body))
    return ProductFields(
        name=body.name,  # type: ignore[arg-type]
        price=body.price,  # type: ignore[arg-type]
        quantity=body.quantity,  # type: ignore[arg-type]
        sku=body.sku,  # type: ignore[arg-type]
        description=body.description,
        contact_email=body.contact_email,
    )


def _respond(products: list[Product]) -> list[ProductResponse]:
    return [ProductResponse.model_validate(product) for product in products]


@router.get("", response_model=PageResponse[ProductResponse])
async def list_products(
    products: Products,
    page: int = Query(0, ge=0, le=MAX_INT),
    size: int = Query(20, ge=1, le=100),
    sort: str = Query("name,asc"),
) -> PageResponse[ProductResponse]:
    """List one page of products, sorted by ``sort`` (``field,asc|desc``)."""
    result = await products.list_products(PageRequest(page=page, size=size, sort=Sort.parse(sort)))
    return result.to_response(ProductResponse)


@router.get("/search", response_model=list[ProductResponse])
async def search_products(products: Products, name: str) -> list[ProductResponse]:
    """Case-insensitive substring match on the product name."""
    return _respond(await products.search_by_name(name))


@router.get("/price-range", response_model=list[ProductResponse])
async def products_by_price_range(
    products: Products,
    min_price: Annotated[Decimal, Query(alias="minPrice")],
    max_price: Annotated[Decimal, Query(alias="maxPrice")],
) -> list[ProductResponse]:
    return _respond(await products.find_by_price_range(min_price, max_price))


@router.get("/range", response_model=list[ProductResponse])
async def products_by_range(
    products: Products,
    min_price: Annotated[Decimal, Query(alias="min")],
    max_price: Annotated[Decimal, Query(alias="max")],
) -> list[ProductResponse]:
    """Short form of /price-range."""
    return _respond(await products.find_by_price_range(min_price, max_price))


@router.get("/low-stock", response_model=list[ProductResponse])
async def low_stock_products(
    products: Products, threshold: int = Query(10, ge=0, le=MAX_INT)
) -> list[ProductResponse]:
    """Products with fewer than ``threshold`` units, emptiest first."""
    return _respond(await products.low_stock(threshold))


@router.get("/expensive", response_model=list[ProductResponse])
async def expensive_products(
    products: Products,
    min_price: Annotated[Decimal, Query(alias="minPrice")] = Decimal("100.00"),
) -> list[ProductResponse]:
    return _respond(await products.expensive(min_price))


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    request: Request, response: Response, body: ProductRequest, products: Products
) -> ProductResponse:
    product = await products.create_product(_to_fields(body))
    response.headers["Location"] = str(request.url_for("get_product", product_id=product.id))
    return ProductResponse.model_validate(product)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, products: Products) -> ProductResponse:
    return ProductResponse.model_validate(await products.get_product(product_id))


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int, body: ProductRequest, products: Products
) -> ProductResponse:
    product = await products.update_product(product_id, _to_fields(body))
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: int, products: Products) -> None:
    await products.delete_product(product_id)


@router.put("/{product_id}/stock", response_model=ProductResponse)
@router.put("/{product_id}/set", response_model=ProductResponse)
async def update_stock(
    product_id: int, body: StockUpdateRequest, products: Products
) -> ProductResponse:
    """Set the stock level to exactly ``quantity``. Zero is allowed."""
    _ensure_valid(validate_stock_quantity(body.quantity, allow_zero=True))
    product = await products.update_stock(product_id, body.quantity)  # type: ignore[arg-type]
    return ProductResponse.model_validate(product)


@router.post("/{product_id}/reserve-stock", response_model=ProductResponse)
@router.post("/{product_id}/reserve", response_model=ProductResponse)
async def reserve_stock(
    product_id: int, body: StockUpdateRequest, products: Products
) -> ProductResponse:
    _ensure_valid(validate_stock_quantity(body.quantity, allow_zero=False))
    product = await products.reserve_stock(product_id, body.quantity)  # type: ignore[arg-type]
    return ProductResponse.model_validate(product)


@router.post("/{product_id}/add-stock", response_model=ProductResponse)
@router.post("/{product_id}/add", response_model=ProductResponse)
async def add_stock(
    product_id: int, body: StockUpdateRequest, products: Products
) -> ProductResponse:
    _ensure_valid(validate_stock_quantity(body.quantity, allow_zero=False))
    product = await products.add_stock(product_id, body.quantity)  # type: ignore[arg-type]
    return ProductResponse.model_validate(product)
