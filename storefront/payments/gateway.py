"""
Adaptateur de passerelle de paiement utilisé par le tunnel de commande.

Déroulé d'une tentative (strictement séquentiel):
  1. chargement du widget            -> GatewayUnavailable
  2. création de l'ordre (receipt)   -> IntentCreationFailed
  3. ouverture du widget (hôte acquis, libéré une seule fois en finally)
       annulation -> CancelledByUser, échec -> PaymentFailed
  4. vérification de la signature    -> VerificationFailed (jamais rejouée)
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from storefront.checkout.errors import (
    CancelledByUser,
    GatewayUnavailable,
    PaymentFailed,
    VerificationFailed,
)
from storefront.config import RAZORPAY_KEY_ID
from storefront.payments.api_client import CheckoutApiClient
from storefront.payments.host import GatewayHostEnvironment, HostSurface
from storefront.payments.widget import (
    PaymentWidget,
    WidgetDismissed,
    WidgetFailed,
    WidgetOptions,
    WidgetSuccess,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedPayment:
    receipt: str
    gateway_order_id: str
    payment_id: str
    amount: int
    currency: str


class PaymentGateway:
    def __init__(
        self,
        api: CheckoutApiClient,
        widget: PaymentWidget,
        host: Optional[GatewayHostEnvironment] = None,
        key_id: str = RAZORPAY_KEY_ID,
    ):
        self.api = api
        self.widget = widget
        self.host = host or GatewayHostEnvironment.for_surface(HostSurface())
        self.key_id = key_id

    async def collect_payment(
        self,
        *,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
        prefill: Optional[Dict[str, str]] = None,
        description: str = "",
    ) -> VerifiedPayment:
        try:
            loaded = await self.widget.load()
        except Exception:
            logger.exception("payments.gateway.load failed receipt=%s", receipt)
            loaded = False
        if not loaded:
            raise GatewayUnavailable()

        order = await self.api.create_order(amount=amount, currency=currency, receipt=receipt, notes=notes or {})
        gateway_order_id = order["id"]
        logger.info("payments.gateway intent ready receipt=%s order_id=%s amount=%s", receipt, gateway_order_id, amount)

        options = WidgetOptions(
            key=self.key_id,
            amount=amount,
            currency=currency,
            order_id=gateway_order_id,
            description=description,
            prefill=dict(prefill or {}),
            notes=dict(notes or {}),
        )
        dispose = self.host.acquire()
        try:
            outcome = await self.widget.open(options)
        finally:
            dispose()

        if isinstance(outcome, WidgetDismissed):
            logger.info("payments.gateway dismissed receipt=%s", receipt)
            raise CancelledByUser()
        if isinstance(outcome, WidgetFailed):
            logger.warning(
                "payments.gateway payment failed receipt=%s code=%s description=%s",
                receipt, outcome.code, outcome.description,
            )
            raise PaymentFailed(code=outcome.code, payment_reference=outcome.payment_id)
        if not isinstance(outcome, WidgetSuccess):
            raise PaymentFailed()

        # Trace de rapprochement avant la vérification (paiement capturé côté passerelle)
        logger.info(
            "payments.gateway widget success receipt=%s order_id=%s payment_id=%s",
            receipt, outcome.order_id, outcome.payment_id,
        )
        body = await self.api.verify_signature(
            order_id=outcome.order_id, payment_id=outcome.payment_id, signature=outcome.signature
        )
        verified_amount = body.get("amount")
        if verified_amount is not None and int(verified_amount) != amount:
            raise VerificationFailed(
                outcome.payment_id, reason=f"amount mismatch expected={amount} got={verified_amount}"
            )
        if outcome.order_id != gateway_order_id:
            raise VerificationFailed(outcome.payment_id, reason="order id mismatch")

        return VerifiedPayment(
            receipt=receipt,
            gateway_order_id=gateway_order_id,
            payment_id=outcome.payment_id,
            amount=amount,
            currency=currency,
        )
