"""
Stockage clé/valeur du panier (interface calquée sur localStorage: get_item/set_item/remove_item).
- MemoryStorage: process courant (tests, CLI)
- RedisStorage: un espace de noms par session/navigateur, survit aux redémarrages
"""
from typing import Dict, Optional, Protocol
import logging

import redis

from storefront.config import CART_REDIS_URL

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStorage:
    def __init__(self, client: "redis.Redis", namespace: str = "storefront"):
        self._client = client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        raw = self._client.get(self._key(key))
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    def set_item(self, key: str, value: str) -> None:
        self._client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self._client.delete(self._key(key))


def storage_from_env(namespace: str = "storefront") -> KeyValueStorage:
    """RedisStorage si CART_REDIS_URL est défini, sinon MemoryStorage."""
    if CART_REDIS_URL:
        client = redis.from_url(CART_REDIS_URL, encoding="utf-8", decode_responses=True)
        logger.info("cart.storage using redis namespace=%s", namespace)
        return RedisStorage(client, namespace=namespace)
    return MemoryStorage()
