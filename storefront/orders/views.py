import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from storefront.app_setup.dependencies import get_order_repository
from storefront.data.repository import NotFoundError
from storefront.orders.repository import OrderRepository
from storefront.orders.service import (
    InvalidStatusTransition,
    can_cancel,
    can_track,
    change_order_status,
    format_price,
    status_label,
)
from storefront.utils.security import require_admin, require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])
admin_router = APIRouter(prefix="/api/v1/admin/orders", tags=["Admin Orders"])


class StatusUpdate(BaseModel):
    status: str
    tracking_number: Optional[str] = None


def present_order(order: Dict[str, Any]) -> Dict[str, Any]:
    """Ajoute les champs d'affichage (libellé, actions possibles, total formaté)."""
    status = str(order.get("status") or "pending")
    return {
        **order,
        "status_label": status_label(status),
        "can_cancel": can_cancel(status),
        "can_track": can_track(status),
        "total_display": format_price(int(order.get("total") or 0)),
    }


def _owned_by(order: Dict[str, Any], user: Dict[str, Any]) -> bool:
    email = (user.get("email") or "").lower()
    if order.get("user_id") and order.get("user_id") == user.get("id"):
        return True
    return bool(email) and (str(order.get("user_email") or "").lower() == email)


# module storefront.orders.views
@router.get("")
async def list_my_orders(user: dict = Depends(require_user), orders: OrderRepository = Depends(get_order_repository)):
    """Historique des commandes de l'utilisateur (par email, anciens documents compris), plus récentes d'abord."""
    result = await orders.find_by_email(user.get("email") or "")
    if result.error:
        raise HTTPException(status_code=500, detail="Could not load orders")
    return {"orders": [present_order(o) for o in result.data or []]}


@router.get("/{order_id}")
async def get_my_order(order_id: str, user: dict = Depends(require_user), orders: OrderRepository = Depends(get_order_repository)):
    result = await orders.get(order_id)
    if isinstance(result.error, NotFoundError):
        raise HTTPException(status_code=404, detail="Order not found")
    if result.error:
        raise HTTPException(status_code=500, detail="Could not load order")
    if not _owned_by(result.data, user):
        # 404 plutôt que 403: ne pas révéler l'existence de la commande
        raise HTTPException(status_code=404, detail="Order not found")
    return {"order": present_order(result.data)}


@admin_router.get("")
async def admin_list_orders(
    limit: int = Query(50, ge=1, le=500),
    status: Optional[str] = None,
    admin: dict = Depends(require_admin),
    orders: OrderRepository = Depends(get_order_repository),
):
    result = await orders.list_recent(limit=limit, status=status)
    if result.error:
        raise HTTPException(status_code=500, detail="Could not load orders")
    return {"orders": [present_order(o) for o in result.data or []]}


@admin_router.patch("/{order_id}")
async def admin_update_order_status(
    order_id: str,
    body: StatusUpdate,
    admin: dict = Depends(require_admin),
    orders: OrderRepository = Depends(get_order_repository),
):
    """
    Transition de statut back-office.
    - 400 transition interdite, 404 commande inconnue
    """
    try:
        result = await change_order_status(orders, order_id, body.status, body.tracking_number)
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(result.error, NotFoundError):
        raise HTTPException(status_code=404, detail="Order not found")
    if result.error:
        raise HTTPException(status_code=500, detail="Could not update order")
    logger.info("orders.views.admin_update_order_status id=%s status=%s by=%s", order_id, body.status, admin.get("email"))
    return {"order": present_order(result.data)}
