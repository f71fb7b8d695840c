"""
Fournisseurs FastAPI (Depends) des repositories et services.
Les tests remplacent ces fonctions via app.dependency_overrides.
"""
from functools import lru_cache

from storefront.data.repository import DataRepository
from storefront.orders.repository import OrderRepository
from storefront.profiles.repository import ProfileRepository
from storefront.profiles.service import ProfileAutofillService


@lru_cache(maxsize=1)
def get_data_repository() -> DataRepository:
    return DataRepository()


def get_order_repository() -> OrderRepository:
    return OrderRepository(get_data_repository())


def get_profile_repository() -> ProfileRepository:
    return ProfileRepository(get_data_repository())


def get_autofill_service() -> ProfileAutofillService:
    return ProfileAutofillService.default(get_profile_repository(), get_order_repository())
