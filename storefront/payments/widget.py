"""
Widget de paiement (Razorpay Checkout).

Le widget lui-même tourne dans l'UI (checkout.js). RazorpayCheckoutWidget expose les
options à lui transmettre et une tentative en attente que l'UI résout avec
resolve_success / resolve_dismiss / resolve_failure.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Union
import asyncio
import logging

from storefront.config import RAZORPAY_KEY_ID, STORE_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidgetOptions:
    key: str
    amount: int
    currency: str
    order_id: str
    name: str = STORE_NAME
    description: str = ""
    prefill: Dict[str, str] = field(default_factory=dict)
    notes: Dict[str, Any] = field(default_factory=dict)

    def to_checkout_options(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "amount": self.amount,
            "currency": self.currency,
            "order_id": self.order_id,
            "name": self.name,
            "description": self.description,
            "prefill": dict(self.prefill),
            "notes": dict(self.notes),
        }


@dataclass(frozen=True)
class WidgetSuccess:
    order_id: str
    payment_id: str
    signature: str


@dataclass(frozen=True)
class WidgetDismissed:
    pass


@dataclass(frozen=True)
class WidgetFailed:
    code: Optional[str] = None
    description: Optional[str] = None
    payment_id: Optional[str] = None


WidgetOutcome = Union[WidgetSuccess, WidgetDismissed, WidgetFailed]


class PaymentWidget(Protocol):
    async def load(self) -> bool: ...
    async def open(self, options: WidgetOptions) -> WidgetOutcome: ...


class RazorpayCheckoutWidget:
    def __init__(self, key_id: str = RAZORPAY_KEY_ID):
        self.key_id = key_id
        self.options: Optional[WidgetOptions] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def is_open(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def load(self) -> bool:
        # Sans clé publique, checkout.js ne peut pas être initialisé
        return bool(self.key_id)

    async def open(self, options: WidgetOptions) -> WidgetOutcome:
        if self.is_open:
            raise RuntimeError("Payment widget already open")
        self._pending = asyncio.get_running_loop().create_future()
        self.options = options
        logger.debug("payments.widget.open order_id=%s amount=%s", options.order_id, options.amount)
        try:
            return await self._pending
        finally:
            self._pending = None
            self.options = None

    def _resolve(self, outcome: WidgetOutcome) -> bool:
        if not self.is_open:
            logger.warning("payments.widget.resolve ignored, no pending attempt outcome=%s", type(outcome).__name__)
            return False
        self._pending.set_result(outcome)
        return True

    def resolve_success(self, order_id: str, payment_id: str, signature: str) -> bool:
        return self._resolve(WidgetSuccess(order_id=order_id, payment_id=payment_id, signature=signature))

    def resolve_dismiss(self) -> bool:
        return self._resolve(WidgetDismissed())

    def resolve_failure(self, code: Optional[str] = None, description: Optional[str] = None, payment_id: Optional[str] = None) -> bool:
        return self._resolve(WidgetFailed(code=code, description=description, payment_id=payment_id))
