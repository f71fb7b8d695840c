"""
Module 'orders': modèles, repository et règles de statut des commandes.
"""

from .models import Order, OrderItem, OrderStatus, PaymentStatus
from .repository import DuplicateOrderError, OrderRepository, normalize_legacy_order
from .service import (
    InvalidStatusTransition,
    build_order,
    can_cancel,
    can_track,
    change_order_status,
    format_price,
    generate_order_number,
    status_label,
)

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "DuplicateOrderError",
    "OrderRepository",
    "normalize_legacy_order",
    "InvalidStatusTransition",
    "build_order",
    "can_cancel",
    "can_track",
    "change_order_status",
    "format_price",
    "generate_order_number",
    "status_label",
]
