from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from storefront.auth.identity import Identity
from storefront.checkout.models import ShippingDetails
from storefront.orders.repository import OrderRepository
from storefront.profiles.repository import ProfileRepository
from storefront.profiles.strategies import (
    IdentityFieldsLookup,
    LookupStrategy,
    PastOrderLookup,
    SavedProfileLookup,
)

logger = logging.getLogger(__name__)


@dataclass
class AutofillResult:
    details: ShippingDetails
    source: Optional[str] = None


class ProfileAutofillService:
    """
    Pré-remplit les coordonnées de livraison et tient le carnet d'adresses à jour.
    Ne lève jamais: une stratégie en échec est journalisée puis ignorée.
    """

    def __init__(self, profiles: ProfileRepository, strategies: Sequence[LookupStrategy]):
        self._profiles = profiles
        self._strategies: List[LookupStrategy] = list(strategies)

    @classmethod
    def default(cls, profiles: ProfileRepository, orders: OrderRepository) -> "ProfileAutofillService":
        return cls(profiles, [SavedProfileLookup(profiles), PastOrderLookup(orders), IdentityFieldsLookup()])

    async def autofill(self, identity: Identity) -> AutofillResult:
        for strategy in self._strategies:
            try:
                details = await strategy.lookup(identity)
            except Exception:
                logger.exception("profiles.service.autofill strategy=%s failed user_id=%s", strategy.name, identity.id)
                continue
            if details is None:
                continue
            if strategy.name == "past_order":
                # Le carnet d'adresses est rempli à partir de la dernière commande
                await self.save(identity, details)
            return AutofillResult(details=details, source=strategy.name)
        return AutofillResult(details=ShippingDetails(email=identity.email or ""), source=None)

    async def save(self, identity: Identity, details: ShippingDetails) -> bool:
        """Upsert best-effort: False (et log) en cas d'échec, jamais d'exception."""
        try:
            result = await self._profiles.upsert(identity.id, details)
        except Exception:
            logger.exception("profiles.service.save failed user_id=%s", identity.id)
            return False
        if result.error:
            logger.warning("profiles.service.save error user_id=%s error=%s", identity.id, result.error)
            return False
        return True
