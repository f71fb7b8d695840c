"""
Module 'profiles': carnet d'adresses et pré-remplissage des coordonnées de livraison.
"""

from .repository import ProfileRepository, PROFILES_COLLECTION
from .service import AutofillResult, ProfileAutofillService
from .strategies import IdentityFieldsLookup, PastOrderLookup, SavedProfileLookup

__all__ = [
    "ProfileRepository",
    "PROFILES_COLLECTION",
    "AutofillResult",
    "ProfileAutofillService",
    "IdentityFieldsLookup",
    "PastOrderLookup",
    "SavedProfileLookup",
]
