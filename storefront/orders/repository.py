"""
Accès aux commandes (collection 'orders').

- create: insertion unique d'un document complet; order_number unique
  (vérification préalable + code 23505 de la contrainte d'unicité)
- find_by_email: historique par user_email, repli sur l'ancien champ customer_email
- get / find_by_order_number / list_recent / update_status: back-office
"""
from typing import Any, Dict, List, Optional
import logging

from storefront.data.repository import (
    Condition,
    DataRepository,
    RepoResult,
    RepositoryError,
    UNIQUE_VIOLATION,
)
from storefront.orders.models import Order

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"


class DuplicateOrderError(RepositoryError):
    def __init__(self, order_number: str):
        super().__init__(f"Order {order_number} already exists", code=UNIQUE_VIOLATION)
        self.order_number = order_number


def normalize_legacy_order(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aligne un ancien document (customer_email, order_items, total_amount, customer_phone)
    sur la forme courante. Les champs courants déjà présents sont conservés.
    """
    doc = dict(row)
    if "items" not in doc and "order_items" in doc:
        doc["items"] = doc.get("order_items") or []
    if "total" not in doc and "total_amount" in doc:
        doc["total"] = doc.get("total_amount")
    if not doc.get("user_email") and doc.get("customer_email"):
        doc["user_email"] = doc["customer_email"]
    if not doc.get("user_phone") and doc.get("customer_phone"):
        doc["user_phone"] = doc["customer_phone"]
    return doc


def _newest_first(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: str(r.get("created_at") or ""), reverse=True)


class OrderRepository:
    def __init__(self, data: DataRepository):
        self._data = data

    async def create(self, order: Order) -> RepoResult:
        existing = await self.find_by_order_number(order.order_number)
        if existing.ok and existing.data:
            logger.error("orders.repository.create duplicate order_number=%s", order.order_number)
            return RepoResult(error=DuplicateOrderError(order.order_number))

        result = await self._data.add(ORDERS_COLLECTION, order.to_document())
        if result.error:
            if result.error.code == UNIQUE_VIOLATION:
                return RepoResult(error=DuplicateOrderError(order.order_number))
            return result
        order_id = (result.data or {}).get("id")
        logger.info("orders.repository.create ok order_number=%s id=%s", order.order_number, order_id)
        return RepoResult(data=order_id)

    async def find_by_email(self, email: str) -> RepoResult:
        if not email:
            return RepoResult(data=[])
        current = await self._data.get_where(ORDERS_COLLECTION, [Condition("user_email", "==", email)])
        if current.error:
            return current
        if current.data:
            return RepoResult(data=_newest_first(current.data))

        legacy = await self._data.get_where(ORDERS_COLLECTION, [Condition("customer_email", "==", email)])
        if legacy.error:
            return legacy
        if legacy.data:
            logger.info("orders.repository.find_by_email legacy fallback email=%s rows=%s", email, len(legacy.data))
        return RepoResult(data=_newest_first([normalize_legacy_order(r) for r in legacy.data or []]))

    async def get(self, order_id: str) -> RepoResult:
        result = await self._data.get_by_id(ORDERS_COLLECTION, order_id)
        if result.error:
            return result
        return RepoResult(data=normalize_legacy_order(result.data))

    async def find_by_order_number(self, order_number: str) -> RepoResult:
        result = await self._data.get_where(ORDERS_COLLECTION, [Condition("order_number", "==", order_number)])
        if result.error:
            return result
        rows = result.data or []
        return RepoResult(data=normalize_legacy_order(rows[0]) if rows else None)

    async def list_recent(self, limit: int = 50, status: Optional[str] = None) -> RepoResult:
        conditions = [Condition("status", "==", status)] if status else []
        result = await self._data.get_ordered(ORDERS_COLLECTION, "created_at", "desc", limit, conditions)
        if result.error:
            return result
        return RepoResult(data=[normalize_legacy_order(r) for r in result.data or []])

    async def update_status(self, order_id: str, status: str, tracking_number: Optional[str] = None) -> RepoResult:
        patch: Dict[str, Any] = {"status": status}
        if tracking_number:
            patch["tracking_number"] = tracking_number
        return await self._data.update(ORDERS_COLLECTION, order_id, patch)
