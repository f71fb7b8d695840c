import pytest
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from storefront.data.repository import DataRepository, NotFoundError, UNIQUE_VIOLATION


class _Resp:
    def __init__(self, data=None):
        self.data = data


def _mk_client(data=None):
    """Chaîne supabase simulée: chaque méthode de filtre renvoie le même objet query."""
    client = MagicMock()
    table = MagicMock()
    query = MagicMock()
    client.table.return_value = table
    for method in ("select", "insert", "update", "delete"):
        getattr(table, method).return_value = query
    for method in ("eq", "neq", "lt", "lte", "gt", "gte", "in_", "contains", "order", "limit"):
        getattr(query, method).return_value = query
    query.execute.return_value = _Resp(data)
    return client, table, query


def _repo(client):
    return DataRepository(client_factory=lambda: client)


@pytest.mark.asyncio
async def test_get_where_maps_operators():
    # Arrange
    client, table, query = _mk_client([{"id": "o1"}])
    repo = _repo(client)
    # Act
    res = await repo.get_where("orders", [
        {"field": "user_email", "operator": "==", "value": "a@b.c"},
        {"field": "status", "operator": "in", "value": ["pending", "confirmed"]},
        {"field": "tags", "operator": "array-contains", "value": "gift"},
        {"field": "total", "operator": ">=", "value": 100},
    ])
    # Assert
    assert res.ok and res.data == [{"id": "o1"}]
    client.table.assert_called_with("orders")
    query.eq.assert_called_with("user_email", "a@b.c")
    query.in_.assert_called_with("status", ["pending", "confirmed"])
    query.contains.assert_called_with("tags", ["gift"])
    query.gte.assert_called_with("total", 100)


@pytest.mark.asyncio
async def test_get_where_unknown_operator_returns_error():
    client, _, query = _mk_client([])
    res = await _repo(client).get_where("orders", [{"field": "x", "operator": "~=", "value": 1}])
    assert res.error is not None
    query.execute.assert_not_called()


@pytest.mark.asyncio
async def test_get_single_and_get_by_id_not_found():
    client, _, _ = _mk_client([])
    repo = _repo(client)
    single = await repo.get_single("user_profiles", [{"field": "user_id", "operator": "==", "value": "u1"}])
    by_id = await repo.get_by_id("orders", "missing")
    assert isinstance(single.error, NotFoundError)
    assert isinstance(by_id.error, NotFoundError)


@pytest.mark.asyncio
async def test_get_ordered_applies_order_and_limit():
    client, _, query = _mk_client([{"id": "o2"}, {"id": "o1"}])
    res = await _repo(client).get_ordered("orders", "created_at", "desc", 5)
    assert [r["id"] for r in res.data] == ["o2", "o1"]
    query.order.assert_called_with("created_at", desc=True)
    query.limit.assert_called_with(5)


@pytest.mark.asyncio
async def test_add_stamps_created_and_updated_at():
    client, table, _ = _mk_client([{"id": "new-id", "order_number": "RSH1"}])
    res = await _repo(client).add("orders", {"order_number": "RSH1"})
    payload = table.insert.call_args[0][0]
    assert payload["created_at"] == payload["updated_at"]
    assert payload["created_at"].endswith("+00:00")
    assert res.data["id"] == "new-id"


@pytest.mark.asyncio
async def test_update_stamps_updated_at_and_reports_missing_row():
    client, table, _ = _mk_client([])
    res = await _repo(client).update("orders", "o1", {"status": "shipped"})
    payload = table.update.call_args[0][0]
    assert payload["status"] == "shipped"
    assert "updated_at" in payload and "created_at" not in payload
    assert isinstance(res.error, NotFoundError)


@pytest.mark.asyncio
async def test_backend_error_is_returned_with_code():
    client, _, query = _mk_client()
    query.execute.side_effect = APIError({"message": "duplicate key value violates unique constraint", "code": UNIQUE_VIOLATION})
    res = await _repo(client).add("orders", {"order_number": "RSH1"})
    assert not res.ok
    assert res.error.code == UNIQUE_VIOLATION


@pytest.mark.asyncio
async def test_client_factory_failure_does_not_raise():
    def _boom():
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant")
    res = await DataRepository(client_factory=_boom).get_all("orders")
    assert res.error is not None and "SUPABASE_SERVICE_KEY" in res.error.message


@pytest.mark.asyncio
async def test_default_factory_uses_service_client(monkeypatch):
    client, _, _ = _mk_client([{"id": "p1"}])
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: client)
    res = await DataRepository().get_all("user_profiles")
    assert res.data == [{"id": "p1"}]
