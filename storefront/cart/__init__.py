"""
Module 'cart': panier persistant (modèle, stockage, store).
"""

from .models import CartItem
from .storage import KeyValueStorage, MemoryStorage, RedisStorage, storage_from_env
from .store import CartStore

__all__ = [
    "CartItem",
    "CartStore",
    "KeyValueStorage",
    "MemoryStorage",
    "RedisStorage",
    "storage_from_env",
]
