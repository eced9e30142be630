"""Integration tests for the /api/v1/products endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import product_payload

PRODUCTS = "/api/v1/products"


async def _create(client: AsyncClient, **overrides: object) -> dict[str, object]:
    resp = await client.post(PRODUCTS, json=product_payload(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# 1. Create and read back
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_create_returns_201_with_location(client: AsyncClient) -> None:
    resp = await client.post(PRODUCTS, json=product_payload(sku="ABC-123456", quantity=25))

    assert resp.status_code == 201
    location = resp.headers["location"]
    assert location.endswith(f"{PRODUCTS}/{resp.json()['id']}")

    fetched = await client.get(location)
    assert fetched.status_code == 200
    assert fetched.json()["quantity"] == 25
    assert fetched.json()["sku"] == "ABC-123456"


@pytest.mark.asyncio
async def test_create_response_uses_camel_case_and_stock_status(client: AsyncClient) -> None:
    body = await _create(client, quantity=25)

    assert body["name"] == "Mechanical Keyboard"
    assert Decimal(str(body["price"])) == Decimal("149.99")
    assert body["contactEmail"] == "sales@acme-supply.com"
    assert body["inStock"] is True
    assert body["stockStatus"] == "MEDIUM_STOCK"
    assert body["createdAt"] is not None
    assert body["updatedAt"] is not None


@pytest.mark.asyncio
async def test_create_duplicate_sku_returns_409(client: AsyncClient) -> None:
    await _create(client, sku="ABC-123456")

    resp = await client.post(PRODUCTS, json=product_payload(name="Another", sku="ABC-123456"))

    assert resp.status_code == 409
    body = resp.json()
    assert body["type"].endswith("/duplicate-key")
    assert body["field"] == "sku"
    assert body["rejectedValue"] == "ABC-123456"

    listing = await client.get(PRODUCTS)
    assert listing.json()["totalElements"] == 1


@pytest.mark.asyncio
async def test_create_invalid_body_lists_every_violation(client: AsyncClient) -> None:
    resp = await client.post(
        PRODUCTS,
        json=product_payload(name="ab", price="0", quantity=-1, sku="bad", contactEmail="nope"),
    )

    assert resp.status_code == 400
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["type"].endswith("/validation-failed")
    assert body["title"] == "Validation Failed"
    errors = {error["field"]: error for error in body["errors"]}
    assert set(errors) == {"name", "price", "quantity", "sku", "contactEmail"}
    assert errors["name"]["code"] == "Size"
    assert errors["name"]["rejectedValue"] == "ab"
    assert errors["sku"]["code"] == "Pattern"
    assert errors["quantity"]["code"] == "Min"


@pytest.mark.asyncio
async def test_create_empty_body_reports_required_fields(client: AsyncClient) -> None:
    resp = await client.post(PRODUCTS, json={})

    assert resp.status_code == 400
    fields = {error["field"] for error in resp.json()["errors"]}
    assert fields == {"name", "price", "quantity", "sku"}


@pytest.mark.asyncio
async def test_create_quantity_beyond_int_range_returns_400(client: AsyncClient) -> None:
    resp = await client.post(PRODUCTS, json=product_payload(quantity=2**31))

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/validation-failed")
    assert [(e["field"], e["code"]) for e in body["errors"]] == [("quantity", "Max")]
    assert (await client.get(PRODUCTS)).json()["totalElements"] == 0


@pytest.mark.asyncio
async def test_create_price_with_three_decimals_returns_400(client: AsyncClient) -> None:
    resp = await client.post(PRODUCTS, json=product_payload(price="10.999"))

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/validation-error")
    assert body["field"] == "price"


# ---------------------------------------------------------------------------
# 2. Get / update / delete by id
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_get_missing_product_returns_404_problem(client: AsyncClient) -> None:
    resp = await client.get(f"{PRODUCTS}/999")

    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["type"].endswith("/product-not-found")
    assert body["title"] == "Product Not Found"
    assert body["status"] == 404
    assert body["detail"] == "Product not found with id: 999"
    assert body["instance"] == f"{PRODUCTS}/999"
    assert body["resourceId"] == 999
    assert "timestamp" in body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "product_id", ["2147483648", "99999999999999999999"], ids=["int32_plus_one", "twenty_digits"]
)
async def test_id_beyond_column_range_returns_404(client: AsyncClient, product_id: str) -> None:
    resp = await client.get(f"{PRODUCTS}/{product_id}")

    assert resp.status_code == 404
    assert resp.json()["type"].endswith("/product-not-found")

    deleted = await client.delete(f"{PRODUCTS}/{product_id}")
    assert deleted.status_code == 404


@pytest.mark.asyncio
async def test_update_replaces_fields(client: AsyncClient) -> None:
    created = await _create(client)

    resp = await client.put(
        f"{PRODUCTS}/{created['id']}",
        json=product_payload(name="Keyboard TKL", price="139.00", quantity=3, description=None),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == created["id"]
    assert body["name"] == "Keyboard TKL"
    assert Decimal(str(body["price"])) == Decimal("139.00")
    assert body["quantity"] == 3
    assert body["stockStatus"] == "LOW_STOCK"
    assert body.get("description") is None


@pytest.mark.asyncio
async def test_update_missing_product_returns_404(client: AsyncClient) -> None:
    resp = await client.put(f"{PRODUCTS}/999", json=product_payload())
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_to_existing_sku_returns_409(client: AsyncClient) -> None:
    first = await _create(client, sku="AAA-000001")
    await _create(client, sku="BBB-000002")

    resp = await client.put(f"{PRODUCTS}/{first['id']}", json=product_payload(sku="BBB-000002"))

    assert resp.status_code == 409
    assert resp.json()["type"].endswith("/duplicate-key")
    unchanged = await client.get(f"{PRODUCTS}/{first['id']}")
    assert unchanged.json()["sku"] == "AAA-000001"


@pytest.mark.asyncio
async def test_delete_returns_204_then_404(client: AsyncClient) -> None:
    created = await _create(client)

    resp = await client.delete(f"{PRODUCTS}/{created['id']}")
    assert resp.status_code == 204
    assert resp.content == b""

    assert (await client.get(f"{PRODUCTS}/{created['id']}")).status_code == 404
    assert (await client.delete(f"{PRODUCTS}/{created['id']}")).status_code == 404


# ---------------------------------------------------------------------------
# 3. Stock operations
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_set_stock_is_absolute(client: AsyncClient) -> None:
    created = await _create(client, quantity=10)

    resp = await client.put(f"{PRODUCTS}/{created['id']}/stock", json={"quantity": 50})

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 50


@pytest.mark.asyncio
async def test_set_stock_alias_accepts_amount_and_zero(client: AsyncClient) -> None:
    created = await _create(client, quantity=10)

    resp = await client.put(f"{PRODUCTS}/{created['id']}/set", json={"amount": 0})

    assert resp.status_code == 200
    body = resp.json()
    assert body["quantity"] == 0
    assert body["inStock"] is False
    assert body["stockStatus"] == "OUT_OF_STOCK"


@pytest.mark.asyncio
async def test_set_stock_negative_returns_400(client: AsyncClient) -> None:
    created = await _create(client, quantity=10)

    resp = await client.put(f"{PRODUCTS}/{created['id']}/stock", json={"quantity": -1})

    assert resp.status_code == 400
    errors = resp.json()["errors"]
    assert errors[0]["field"] == "quantity"
    assert errors[0]["message"] == "Stock quantity cannot be negative"


@pytest.mark.asyncio
async def test_reserve_stock_decrements(client: AsyncClient) -> None:
    created = await _create(client, quantity=5)

    resp = await client.post(f"{PRODUCTS}/{created['id']}/reserve-stock", json={"quantity": 3})

    assert resp.status_code == 200
    assert resp.json()["quantity"] == 2


@pytest.mark.asyncio
async def test_reserve_more_than_available_leaves_quantity_unchanged(
    client: AsyncClient,
) -> None:
    created = await _create(client, quantity=5)

    resp = await client.post(f"{PRODUCTS}/{created['id']}/reserve", json={"amount": 10})

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/insufficient-stock")
    assert body["productId"] == created["id"]
    assert body["requestedQuantity"] == 10
    assert body["availableQuantity"] == 5

    after = await client.get(f"{PRODUCTS}/{created['id']}")
    assert after.json()["quantity"] == 5


@pytest.mark.asyncio
async def test_reserve_zero_returns_400(client: AsyncClient) -> None:
    created = await _create(client, quantity=5)

    resp = await client.post(f"{PRODUCTS}/{created['id']}/reserve-stock", json={"quantity": 0})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["message"] == "Quantity must be at least 1"


@pytest.mark.asyncio
async def test_add_stock_increments(client: AsyncClient) -> None:
    created = await _create(client, quantity=5)

    first = await client.post(f"{PRODUCTS}/{created['id']}/add-stock", json={"quantity": 5})
    second = await client.post(f"{PRODUCTS}/{created['id']}/add", json={"amount": 40})

    assert first.json()["quantity"] == 10
    assert second.json()["quantity"] == 50
    assert second.json()["stockStatus"] == "IN_STOCK"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, suffix",
    [("put", "stock"), ("post", "reserve-stock"), ("post", "add-stock")],
    ids=["set", "reserve", "add"],
)
async def test_stock_amount_beyond_int_range_returns_400(
    client: AsyncClient, method: str, suffix: str
) -> None:
    created = await _create(client, quantity=5)

    resp = await client.request(
        method, f"{PRODUCTS}/{created['id']}/{suffix}", json={"quantity": 2**31}
    )

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["code"] == "Max"
    assert (await client.get(f"{PRODUCTS}/{created['id']}")).json()["quantity"] == 5


@pytest.mark.asyncio
async def test_add_stock_past_int_range_returns_400(client: AsyncClient) -> None:
    created = await _create(client, quantity=10)

    resp = await client.post(
        f"{PRODUCTS}/{created['id']}/add-stock", json={"quantity": 2**31 - 1}
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/validation-error")
    assert body["field"] == "quantity"
    assert (await client.get(f"{PRODUCTS}/{created['id']}")).json()["quantity"] == 10


@pytest.mark.asyncio
async def test_stock_operation_on_huge_id_returns_404(client: AsyncClient) -> None:
    resp = await client.post(f"{PRODUCTS}/99999999999999999999/add-stock", json={"quantity": 1})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_stock_operation_on_missing_product_returns_404(client: AsyncClient) -> None:
    resp = await client.post(f"{PRODUCTS}/999/add-stock", json={"quantity": 1})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 4. Listing and queries
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_products_page_envelope(client: AsyncClient, seeded_db: AsyncSession) -> None:
    resp = await client.get(PRODUCTS, params={"page": 0, "size": 4, "sort": "price,desc"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["totalElements"] == 6
    assert body["totalPages"] == 2
    assert body["size"] == 4
    assert body["number"] == 0
    assert [p["sku"] for p in body["content"]] == [
        "LAP-000001",
        "MON-000001",
        "KEY-000001",
        "STD-000001",
    ]


@pytest.mark.asyncio
async def test_list_products_defaults_to_name_order(
    client: AsyncClient, seeded_db: AsyncSession
) -> None:
    body = (await client.get(PRODUCTS)).json()

    assert body["size"] == 20
    assert body["totalPages"] == 1
    assert body["content"][0]["name"] == "4K Monitor"
    assert body["content"][-1]["name"] == "Wireless Mouse"


@pytest.mark.asyncio
async def test_list_products_camel_case_sort_field(
    client: AsyncClient, seeded_db: AsyncSession
) -> None:
    resp = await client.get(PRODUCTS, params={"sort": "createdAt,asc", "size": 1})
    assert resp.status_code == 200
    assert len(resp.json()["content"]) == 1


@pytest.mark.asyncio
async def test_list_products_empty(client: AsyncClient) -> None:
    body = (await client.get(PRODUCTS)).json()
    assert body["content"] == []
    assert body["totalElements"] == 0
    assert body["totalPages"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("sort", ["color", "price,sideways"], ids=["unknown_field", "bad_direction"])
async def test_list_products_invalid_sort_returns_400(client: AsyncClient, sort: str) -> None:
    resp = await client.get(PRODUCTS, params={"sort": sort})

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/validation-error")
    assert body["field"] == "sort"


@pytest.mark.asyncio
async def test_list_products_size_out_of_bounds_returns_400(client: AsyncClient) -> None:
    resp = await client.get(PRODUCTS, params={"size": 0})
    assert resp.status_code == 400
    assert resp.json()["type"].endswith("/validation-failed")


@pytest.mark.asyncio
async def test_search_is_case_insensitive(client: AsyncClient, seeded_db: AsyncSession) -> None:
    resp = await client.get(f"{PRODUCTS}/search", params={"name": "LAPTOP"})

    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Laptop Pro", "Laptop Stand"]


@pytest.mark.asyncio
async def test_search_without_match_returns_empty_list(
    client: AsyncClient, seeded_db: AsyncSession
) -> None:
    resp = await client.get(f"{PRODUCTS}/search", params={"name": "toaster"})
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, params",
    [
        ("/price-range", {"minPrice": "40", "maxPrice": "150"}),
        ("/range", {"min": "40", "max": "150"}),
    ],
    ids=["price_range", "range"],
)
async def test_price_range(
    client: AsyncClient, seeded_db: AsyncSession, path: str, params: dict[str, str]
) -> None:
    resp = await client.get(f"{PRODUCTS}{path}", params=params)

    assert resp.status_code == 200
    assert [p["sku"] for p in resp.json()] == ["HUB-000001", "STD-000001", "KEY-000001"]


@pytest.mark.asyncio
async def test_range_missing_upper_bound_returns_missing_parameter(client: AsyncClient) -> None:
    resp = await client.get(f"{PRODUCTS}/range", params={"min": "10"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/missing-parameter")
    assert body["parameter"] == "max"


@pytest.mark.asyncio
async def test_price_range_min_above_max_returns_400(client: AsyncClient) -> None:
    resp = await client.get(
        f"{PRODUCTS}/price-range", params={"minPrice": "200", "maxPrice": "100"}
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["type"].endswith("/validation-error")
    assert body["field"] == "minPrice"


@pytest.mark.asyncio
async def test_low_stock_default_threshold(client: AsyncClient, seeded_db: AsyncSession) -> None:
    resp = await client.get(f"{PRODUCTS}/low-stock")

    assert resp.status_code == 200
    assert [p["quantity"] for p in resp.json()] == [0, 5, 8]


@pytest.mark.asyncio
async def test_low_stock_threshold_beyond_int_range_returns_400(client: AsyncClient) -> None:
    resp = await client.get(f"{PRODUCTS}/low-stock", params={"threshold": 2**31})
    assert resp.status_code == 400
    assert resp.json()["type"].endswith("/validation-failed")


@pytest.mark.asyncio
async def test_low_stock_custom_threshold(client: AsyncClient, seeded_db: AsyncSession) -> None:
    resp = await client.get(f"{PRODUCTS}/low-stock", params={"threshold": 6})
    assert [p["quantity"] for p in resp.json()] == [0, 5]


@pytest.mark.asyncio
async def test_expensive_products(client: AsyncClient, seeded_db: AsyncSession) -> None:
    default = await client.get(f"{PRODUCTS}/expensive")
    custom = await client.get(f"{PRODUCTS}/expensive", params={"minPrice": "500"})

    assert [p["sku"] for p in default.json()] == ["LAP-000001", "MON-000001", "KEY-000001"]
    assert [p["sku"] for p in custom.json()] == ["LAP-000001"]
