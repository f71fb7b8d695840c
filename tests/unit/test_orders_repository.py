import pytest

from storefront.checkout.models import ShippingDetails
from storefront.data.repository import RepositoryError, UNIQUE_VIOLATION
from storefront.orders.models import Order, OrderItem
from storefront.orders.repository import DuplicateOrderError, OrderRepository, normalize_legacy_order
from tests.fakes import InMemoryDataRepository


def _order(number="RSH1700000000000", email="asha@example.com"):
    return Order(
        order_number=number,
        user_id="u1",
        user_email=email,
        user_phone="9876543210",
        items=[OrderItem(product_id="p1", name="Kurta", unit_price=150000, quantity=2)],
        shipping_address=ShippingDetails(full_name="Asha Rao", email=email, phone="9876543210",
                                         address_line="12 MG Road", city="Bengaluru", state="KA", pincode="560001"),
        subtotal=300000,
        total=300000,
    )


@pytest.mark.asyncio
async def test_create_returns_persisted_id(order_repo, data_repo):
    res = await order_repo.create(_order())
    assert res.ok
    stored = data_repo.collections["orders"][0]
    assert res.data == stored["id"]
    assert stored["order_number"] == "RSH1700000000000"
    assert stored["total"] == 300000
    assert stored["created_at"] and stored["updated_at"]


@pytest.mark.asyncio
async def test_create_duplicate_order_number_fails(order_repo, data_repo):
    await order_repo.create(_order())
    res = await order_repo.create(_order())
    assert isinstance(res.error, DuplicateOrderError)
    assert len(data_repo.collections["orders"]) == 1


@pytest.mark.asyncio
async def test_create_maps_unique_violation_from_backend(order_repo, data_repo):
    data_repo.fail_on["add"] = RepositoryError("duplicate key", code=UNIQUE_VIOLATION)
    res = await order_repo.create(_order())
    assert isinstance(res.error, DuplicateOrderError)


@pytest.mark.asyncio
async def test_create_other_backend_error_is_returned(order_repo, data_repo):
    data_repo.fail_on["add"] = RepositoryError("connection reset")
    res = await order_repo.create(_order())
    assert res.error.message == "connection reset"


@pytest.mark.asyncio
async def test_find_by_email_newest_first():
    data = InMemoryDataRepository({"orders": [
        {"id": "a", "user_email": "asha@example.com", "created_at": "2024-01-01T00:00:00+00:00"},
        {"id": "b", "user_email": "asha@example.com", "created_at": "2024-05-01T00:00:00+00:00"},
        {"id": "c", "user_email": "other@example.com", "created_at": "2024-06-01T00:00:00+00:00"},
    ]})
    res = await OrderRepository(data).find_by_email("asha@example.com")
    assert [o["id"] for o in res.data] == ["b", "a"]


@pytest.mark.asyncio
async def test_find_by_email_falls_back_to_legacy_field():
    data = InMemoryDataRepository({"orders": [
        {"id": "legacy", "customer_email": "asha@example.com", "order_items": [{"product_id": "p1"}],
         "total_amount": 4999, "customer_phone": "9876543210", "created_at": "2023-01-01T00:00:00+00:00"},
    ]})
    res = await OrderRepository(data).find_by_email("asha@example.com")
    assert len(res.data) == 1
    order = res.data[0]
    assert order["items"] == [{"product_id": "p1"}]
    assert order["total"] == 4999
    assert order["user_phone"] == "9876543210"
    assert order["user_email"] == "asha@example.com"


@pytest.mark.asyncio
async def test_find_by_email_empty_email():
    res = await OrderRepository(InMemoryDataRepository()).find_by_email("")
    assert res.ok and res.data == []


def test_normalize_keeps_current_fields():
    doc = normalize_legacy_order({"items": [1], "order_items": [2], "total": 10, "total_amount": 20})
    assert doc["items"] == [1] and doc["total"] == 10


@pytest.mark.asyncio
async def test_update_status_and_list_recent(order_repo):
    created = await order_repo.create(_order())
    await order_repo.create(_order(number="RSH1700000000001"))
    res = await order_repo.update_status(created.data, "shipped", "TRK123")
    assert res.data["status"] == "shipped" and res.data["tracking_number"] == "TRK123"

    shipped = await order_repo.list_recent(limit=10, status="shipped")
    assert [o["id"] for o in shipped.data] == [created.data]


@pytest.mark.asyncio
async def test_find_by_order_number(order_repo):
    await order_repo.create(_order())
    found = await order_repo.find_by_order_number("RSH1700000000000")
    missing = await order_repo.find_by_order_number("RSH0")
    assert found.data["user_email"] == "asha@example.com"
    assert missing.ok and missing.data is None
