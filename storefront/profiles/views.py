from fastapi import APIRouter, Depends, HTTPException

from storefront.app_setup.dependencies import get_autofill_service
from storefront.auth.identity import Identity
from storefront.checkout.models import ShippingDetails
from storefront.checkout.validation import normalize_phone, validate_shipping
from storefront.profiles.service import ProfileAutofillService
from storefront.utils.security import require_user

router = APIRouter(prefix="/api/v1/profile", tags=["Profile API"])


def _identity(user: dict) -> Identity:
    identity = Identity.from_user(user)
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return identity


# module storefront.profiles.views
@router.get("")
async def get_profile(user: dict = Depends(require_user), autofill: ProfileAutofillService = Depends(get_autofill_service)):
    """Coordonnées pré-remplies (profil, sinon dernière commande, sinon identité)."""
    result = await autofill.autofill(_identity(user))
    return {"shipping": result.details.model_dump(), "source": result.source}


@router.put("")
async def put_profile(
    details: ShippingDetails,
    user: dict = Depends(require_user),
    autofill: ProfileAutofillService = Depends(get_autofill_service),
):
    errors = validate_shipping(details)
    if errors:
        raise HTTPException(status_code=400, detail=[{"field": e.field, "message": e.message} for e in errors])
    details = details.model_copy(update={"phone": normalize_phone(details.phone)})
    if not await autofill.save(_identity(user), details):
        raise HTTPException(status_code=500, detail="Could not save profile")
    return {"shipping": details.model_dump()}
