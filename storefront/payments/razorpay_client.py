"""
Adaptateur Razorpay: centralise les appels et la configuration du SDK (côté serveur uniquement).
"""
from typing import Any, Dict, List, Optional

import razorpay
from razorpay.errors import SignatureVerificationError

from storefront.config import RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET

_client: Optional[razorpay.Client] = None


class GatewayNotConfigured(RuntimeError):
    pass


# module storefront.payments.razorpay_client
def require_razorpay() -> razorpay.Client:
    """
    Retourne un client Razorpay authentifié (clé + secret).
    Lève GatewayNotConfigured si l'une des deux valeurs manque.
    """
    global _client
    if not RAZORPAY_KEY_ID or not RAZORPAY_KEY_SECRET:
        raise GatewayNotConfigured("RAZORPAY_KEY_ID/RAZORPAY_KEY_SECRET manquants")
    if _client is None:
        _client = razorpay.Client(auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET))
    return _client


def create_order(*, amount: int, currency: str, receipt: str, notes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crée un ordre Razorpay.
    Retour: dict ordre (ex: {"id": "order_...", "amount": 300000, "currency": "INR", "receipt": "RSH...", "status": "created"})
    """
    client = require_razorpay()
    return dict(client.order.create({
        "amount": amount,
        "currency": currency,
        "receipt": receipt,
        "notes": {str(k): str(v) for k, v in (notes or {}).items()},
    }))


def find_orders_by_receipt(receipt: str) -> List[Dict[str, Any]]:
    client = require_razorpay()
    res = client.order.all({"receipt": receipt}) or {}
    return list(res.get("items") or [])


def fetch_order(order_id: str) -> Dict[str, Any]:
    client = require_razorpay()
    return dict(client.order.fetch(order_id))


def verify_payment_signature(*, order_id: str, payment_id: str, signature: str) -> bool:
    """HMAC-SHA256(order_id|payment_id, secret) comparé à la signature renvoyée par le widget."""
    client = require_razorpay()
    try:
        client.utility.verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        })
        return True
    except SignatureVerificationError:
        return False
