"""
Stratégies de pré-remplissage des coordonnées, essayées dans l'ordre:
  1. profil enregistré
  2. adresse de la commande la plus récente (par email, ancien format compris)
  3. champs de l'identité (email, nom, téléphone)
Chaque stratégie retourne None si elle n'a rien d'utile.
"""
from typing import Optional, Protocol
import logging

from storefront.auth.identity import Identity
from storefront.checkout.models import ShippingDetails
from storefront.orders.repository import OrderRepository
from storefront.profiles.repository import ProfileRepository

logger = logging.getLogger(__name__)


class LookupStrategy(Protocol):
    name: str

    async def lookup(self, identity: Identity) -> Optional[ShippingDetails]: ...


class SavedProfileLookup:
    name = "profile"

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    async def lookup(self, identity: Identity) -> Optional[ShippingDetails]:
        result = await self._profiles.get_by_identity(identity.id)
        if result.error or not result.data:
            return None
        details = ShippingDetails.from_record(result.data)
        if details.is_blank():
            return None
        if not details.email:
            details.email = identity.email
        return details


class PastOrderLookup:
    name = "past_order"

    def __init__(self, orders: OrderRepository):
        self._orders = orders

    async def lookup(self, identity: Identity) -> Optional[ShippingDetails]:
        result = await self._orders.find_by_email(identity.email)
        if result.error:
            return None
        for order in result.data or []:
            address = order.get("shipping_address")
            if not isinstance(address, dict):
                continue
            details = ShippingDetails.from_record({**order, **address})
            if not details.is_blank():
                details.email = details.email or identity.email
                return details
        return None


class IdentityFieldsLookup:
    name = "identity"

    async def lookup(self, identity: Identity) -> Optional[ShippingDetails]:
        if not (identity.email or identity.name or identity.phone):
            return None
        return ShippingDetails(
            full_name=identity.name or "",
            email=identity.email or "",
            phone=identity.phone or "",
        )
