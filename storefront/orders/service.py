"""
Règles métier des commandes.
- Numéro de commande: préfixe + epoch ms (ex: RSH1718000000000)
- build_order: fige les lignes du panier et calcule les montants une seule fois
- Libellés/affichage des statuts et transitions autorisées pour le back-office
"""
from typing import Callable, Dict, Iterable, Optional, Set
import logging
import time

from storefront.cart.models import CartItem
from storefront.checkout.models import ShippingDetails
from storefront.config import CHECKOUT_CURRENCY, ORDER_NUMBER_PREFIX
from storefront.data.repository import NotFoundError, RepoResult
from storefront.orders.models import Order, OrderItem, OrderStatus, PaymentStatus

logger = logging.getLogger(__name__)

STATUS_LABELS: Dict[str, str] = {
    OrderStatus.PENDING.value: "Order Placed",
    OrderStatus.CONFIRMED.value: "Confirmed",
    OrderStatus.PROCESSING.value: "Processing",
    OrderStatus.SHIPPED.value: "Shipped",
    OrderStatus.DELIVERED.value: "Delivered",
    OrderStatus.CANCELLED.value: "Cancelled",
    OrderStatus.REFUNDED.value: "Refunded",
}

ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    OrderStatus.PENDING.value: {OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.PROCESSING.value, OrderStatus.CANCELLED.value},
    OrderStatus.PROCESSING.value: {OrderStatus.SHIPPED.value, OrderStatus.CANCELLED.value},
    OrderStatus.SHIPPED.value: {OrderStatus.DELIVERED.value},
    OrderStatus.DELIVERED.value: {OrderStatus.REFUNDED.value},
    OrderStatus.CANCELLED.value: set(),
    OrderStatus.REFUNDED.value: set(),
}

_CANCELLABLE = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value}
_TRACKABLE = {OrderStatus.SHIPPED.value}


class InvalidStatusTransition(ValueError):
    pass


def generate_order_number(prefix: str = ORDER_NUMBER_PREFIX, clock: Callable[[], float] = time.time) -> str:
    return f"{prefix}{int(clock() * 1000)}"


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def can_cancel(status: str) -> bool:
    return status in _CANCELLABLE


def can_track(status: str) -> bool:
    return status in _TRACKABLE


def format_price(amount: int) -> str:
    """Montant en paise -> '₹1,500.00'."""
    return f"₹{amount / 100:,.2f}"


def freeze_items(items: Iterable[CartItem]) -> list:
    return [OrderItem.model_validate(i.model_dump()) for i in items]


def build_order(
    *,
    order_number: str,
    user_id: Optional[str],
    email: str,
    items: Iterable[CartItem],
    shipping: ShippingDetails,
    shipping_cost: int,
    currency: str = CHECKOUT_CURRENCY,
    payment_reference: Optional[str] = None,
    gateway_order_id: Optional[str] = None,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    status: OrderStatus = OrderStatus.PENDING,
    notes: Optional[str] = None,
) -> Order:
    frozen = freeze_items(items)
    subtotal = sum(i.line_total for i in frozen)
    return Order(
        order_number=order_number,
        user_id=user_id,
        user_email=email or shipping.email,
        user_phone=shipping.phone,
        items=frozen,
        shipping_address=shipping.model_copy(),
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total=subtotal + shipping_cost,
        currency=currency,
        payment_reference=payment_reference,
        gateway_order_id=gateway_order_id,
        payment_status=payment_status,
        status=status,
        notes=notes,
    )


def check_transition(current: str, new: str) -> None:
    if new not in ALLOWED_TRANSITIONS:
        raise InvalidStatusTransition(f"Unknown status: {new}")
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition(f"Cannot move order from {current} to {new}")


async def change_order_status(orders, order_id: str, new_status: str, tracking_number: Optional[str] = None) -> RepoResult:
    """
    Transition back-office: relit la commande, vérifie la transition, puis écrit.
    Lève InvalidStatusTransition si la transition est refusée.
    """
    current = await orders.get(order_id)
    if current.error:
        return current
    check_transition(str(current.data.get("status") or OrderStatus.PENDING.value), new_status)
    result = await orders.update_status(order_id, new_status, tracking_number)
    if result.ok:
        logger.info("orders.service.change_order_status id=%s %s->%s", order_id, current.data.get("status"), new_status)
    elif isinstance(result.error, NotFoundError):
        logger.warning("orders.service.change_order_status vanished id=%s", order_id)
    return result
