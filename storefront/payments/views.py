import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront.config import CHECKOUT_CURRENCY
from storefront.payments import service as payments_service
from storefront.payments.razorpay_client import GatewayNotConfigured
from storefront.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Payments API"])


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: int = Field(gt=0)
    currency: str = CHECKOUT_CURRENCY
    receipt: str = Field(min_length=1, max_length=40)
    notes: Dict[str, Any] = Field(default_factory=dict)


class VerifySignatureRequest(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)


async def _parse(request: Request, model):
    try:
        body = await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    try:
        return model.model_validate(body or {})
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise HTTPException(status_code=400, detail=f"Invalid fields: {fields}")


# module storefront.payments.views
@router.post("/create-razorpay-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_razorpay_order(request: Request):
    """
    Crée (ou retrouve, même receipt + même montant) l'ordre Razorpay d'une tentative de paiement.
    - Entrée JSON: {amount, currency, receipt, notes}
    - Sortie: {"order": {...}}
    - Erreurs: 400 corps invalide, 409 receipt réutilisé, 502 erreur Razorpay, 503 non configuré
    """
    body = await _parse(request, CreateOrderRequest)
    try:
        order = await run_in_threadpool(
            lambda: payments_service.create_gateway_order(
                amount=body.amount, currency=body.currency, receipt=body.receipt, notes=body.notes
            )
        )
    except payments_service.ReceiptConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GatewayNotConfigured:
        logger.error("payments.views.create_razorpay_order gateway not configured")
        raise HTTPException(status_code=503, detail="Payment gateway not configured")
    except Exception:
        logger.exception("payments.views.create_razorpay_order failed receipt=%s", body.receipt)
        raise HTTPException(status_code=502, detail="Payment gateway error")
    return JSONResponse({"order": order})


@router.post("/verify-razorpay-signature", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def verify_razorpay_signature(request: Request):
    """
    Vérifie la signature renvoyée par le widget.
    - Sortie: {"valid": bool, "amount"?: int}; signature invalide -> 200 {"valid": false}
    - Erreurs: 400 champs manquants, 503 non configuré
    """
    body = await _parse(request, VerifySignatureRequest)
    try:
        result = await run_in_threadpool(
            lambda: payments_service.verify_gateway_payment(
                order_id=body.razorpay_order_id,
                payment_id=body.razorpay_payment_id,
                signature=body.razorpay_signature,
            )
        )
    except GatewayNotConfigured:
        logger.error("payments.views.verify_razorpay_signature gateway not configured")
        raise HTTPException(status_code=503, detail="Payment gateway not configured")
    except Exception:
        logger.exception("payments.views.verify_razorpay_signature failed order_id=%s", body.razorpay_order_id)
        raise HTTPException(status_code=502, detail="Payment gateway error")
    return JSONResponse(result)
