"""
Logique serveur des paiements (appelée par payments.views).
- create_gateway_order: idempotent par receipt (même receipt + même montant -> même ordre)
- verify_gateway_payment: signature + montant de l'ordre pour contrôle côté client
"""
from typing import Any, Dict, Optional
import logging

from storefront.payments import razorpay_client

logger = logging.getLogger(__name__)


class ReceiptConflict(Exception):
    pass


def create_gateway_order(*, amount: int, currency: str, receipt: str, notes: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Retourne l'ordre existant si ce receipt a déjà été vu avec le même montant et la même devise.
    Lève ReceiptConflict si le receipt est réutilisé avec un autre montant, ou s'il est déjà payé.
    """
    for existing in razorpay_client.find_orders_by_receipt(receipt):
        same_amount = int(existing.get("amount") or 0) == amount and existing.get("currency") == currency
        if not same_amount:
            logger.warning(
                "payments.service.create_gateway_order receipt conflict receipt=%s existing_amount=%s amount=%s",
                receipt, existing.get("amount"), amount,
            )
            raise ReceiptConflict("Receipt already used with a different amount")
        if existing.get("status") == "paid":
            logger.warning("payments.service.create_gateway_order receipt already paid receipt=%s", receipt)
            raise ReceiptConflict("Receipt already paid")
        logger.info("payments.service.create_gateway_order reuse receipt=%s order_id=%s", receipt, existing.get("id"))
        return existing

    order = razorpay_client.create_order(amount=amount, currency=currency, receipt=receipt, notes=notes or {})
    logger.info("payments.service.create_gateway_order created receipt=%s order_id=%s", receipt, order.get("id"))
    return order


def verify_gateway_payment(*, order_id: str, payment_id: str, signature: str) -> Dict[str, Any]:
    valid = razorpay_client.verify_payment_signature(order_id=order_id, payment_id=payment_id, signature=signature)
    if not valid:
        logger.warning("payments.service.verify_gateway_payment invalid signature order_id=%s payment_id=%s", order_id, payment_id)
        return {"valid": False}

    result: Dict[str, Any] = {"valid": True}
    try:
        order = razorpay_client.fetch_order(order_id)
        result["amount"] = order.get("amount")
        result["currency"] = order.get("currency")
    except Exception:
        # Signature déjà valide: le montant n'est qu'une information de contrôle
        logger.exception("payments.service.verify_gateway_payment fetch_order failed order_id=%s", order_id)
    return result
