"""
Carnet d'adresses par identité (collection 'user_profiles', colonne user_id).
Un seul profil par identité: upsert = lecture par user_id puis update ou insert.
"""
from typing import Any, Dict
import logging

from storefront.checkout.models import ShippingDetails
from storefront.data.repository import Condition, DataRepository, NotFoundError, RepoResult

logger = logging.getLogger(__name__)

PROFILES_COLLECTION = "user_profiles"


def profile_document(identity_id: str, details: ShippingDetails) -> Dict[str, Any]:
    return {
        "user_id": identity_id,
        "name": details.full_name,
        "email": details.email,
        "phone": details.phone,
        "address": {
            "street": details.address_line,
            "city": details.city,
            "state": details.state,
            "pincode": details.pincode,
        },
        "landmark": details.landmark or "",
    }


class ProfileRepository:
    def __init__(self, data: DataRepository):
        self._data = data

    async def get_by_identity(self, identity_id: str) -> RepoResult:
        """data=None si aucun profil (ce n'est pas une erreur)."""
        result = await self._data.get_single(PROFILES_COLLECTION, [Condition("user_id", "==", identity_id)])
        if isinstance(result.error, NotFoundError):
            return RepoResult(data=None)
        return result

    async def upsert(self, identity_id: str, details: ShippingDetails) -> RepoResult:
        doc = profile_document(identity_id, details)
        existing = await self.get_by_identity(identity_id)
        if existing.error:
            return existing
        if existing.data and existing.data.get("id"):
            result = await self._data.update(PROFILES_COLLECTION, existing.data["id"], doc)
        else:
            result = await self._data.add(PROFILES_COLLECTION, doc)
        if result.ok:
            logger.info("profiles.repository.upsert ok user_id=%s", identity_id)
        return result
