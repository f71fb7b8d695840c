"""
Client HTTP (httpx, async) vers le backend de confiance:
  POST /api/create-razorpay-order
  POST /api/verify-razorpay-signature
"""
from typing import Any, Dict, Optional
import logging

import httpx

from storefront.checkout.errors import IntentCreationFailed, VerificationFailed
from storefront.config import CHECKOUT_API_BASE_URL, CHECKOUT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)


class CheckoutApiClient:
    def __init__(
        self,
        base_url: str = CHECKOUT_API_BASE_URL,
        timeout: float = CHECKOUT_HTTP_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
        )

    async def create_order(self, *, amount: int, currency: str, receipt: str, notes: Dict[str, Any]) -> Dict[str, Any]:
        """Retourne l'ordre passerelle ({"id": ...}); IntentCreationFailed sinon."""
        payload = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        try:
            async with self._client() as client:
                resp = await client.post("/api/create-razorpay-order", json=payload)
        except httpx.HTTPError as e:
            logger.warning("payments.api_client.create_order transport error receipt=%s err=%s", receipt, e)
            raise IntentCreationFailed()
        if resp.status_code >= 400:
            logger.warning("payments.api_client.create_order http %s receipt=%s", resp.status_code, receipt)
            raise IntentCreationFailed()
        try:
            order = (resp.json() or {}).get("order") or {}
        except ValueError:
            order = {}
        if not order.get("id"):
            logger.warning("payments.api_client.create_order missing order id receipt=%s", receipt)
            raise IntentCreationFailed()
        return order

    async def verify_signature(self, *, order_id: str, payment_id: str, signature: str) -> Dict[str, Any]:
        """
        Retourne la réponse du backend si {"valid": true} avec un statut 2xx.
        Tout le reste (valid false, non-2xx, erreur réseau) lève VerificationFailed(payment_id).
        """
        payload = {
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature,
        }
        try:
            async with self._client() as client:
                resp = await client.post("/api/verify-razorpay-signature", json=payload)
        except httpx.HTTPError as e:
            raise VerificationFailed(payment_id, reason=f"transport error: {e}")
        if not resp.is_success:
            raise VerificationFailed(payment_id, reason=f"http {resp.status_code}")
        try:
            body = resp.json() or {}
        except ValueError:
            raise VerificationFailed(payment_id, reason="invalid response body")
        if body.get("valid") is not True:
            raise VerificationFailed(payment_id, reason="signature rejected")
        return body
