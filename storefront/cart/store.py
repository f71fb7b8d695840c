"""
Panier persistant.
- add: fusion par (product_id, color, size), quantités additionnées
- set_quantity: n <= 0 retire la ligne, sinon borné silencieusement par stock_limit (0 ou absent: pas de plafond)
- chaque mutation est écrite aussitôt dans le stockage (JSON sous la clé CART_STORAGE_KEY)
- à la construction, les données illisibles sont ignorées (panier vide ou lignes invalides écartées)
"""
from typing import Any, Callable, Dict, List, Optional, Union
import json
import logging
import time

from pydantic import ValidationError

from storefront.cart.models import CartItem
from storefront.cart.storage import KeyValueStorage
from storefront.config import CART_STORAGE_KEY

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class CartStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = CART_STORAGE_KEY,
        clock: Callable[[], int] = _epoch_ms,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock
        self._items: List[CartItem] = self._hydrate()

    def _hydrate(self) -> List[CartItem]:
        try:
            raw = self._storage.get_item(self._key)
        except Exception:
            logger.exception("cart.store.hydrate read failed key=%s", self._key)
            return []
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("cart.store.hydrate invalid json key=%s, starting empty", self._key)
            return []
        if not isinstance(entries, list):
            logger.warning("cart.store.hydrate unexpected payload type=%s", type(entries).__name__)
            return []

        items: List[CartItem] = []
        dropped = 0
        for entry in entries:
            try:
                item = CartItem.model_validate(entry)
            except ValidationError:
                dropped += 1
                continue
            if not item.id:
                item.id = self._make_id(item)
            items.append(item)
        if dropped:
            logger.warning("cart.store.hydrate dropped=%s malformed entries key=%s", dropped, self._key)
        return items

    def _persist(self) -> None:
        payload = json.dumps([i.model_dump(mode="json") for i in self._items])
        try:
            self._storage.set_item(self._key, payload)
        except Exception:
            # L'état en mémoire reste la référence pour la session en cours
            logger.exception("cart.store.persist failed key=%s", self._key)

    def _make_id(self, item: CartItem) -> str:
        return f"{item.product_id}-{item.color}-{item.size}-{self._clock()}"

    def _find(self, item_id: str) -> Optional[CartItem]:
        return next((i for i in self._items if i.id == item_id), None)

    # --- Lecture ---

    @property
    def items(self) -> List[CartItem]:
        return [i.model_copy() for i in self._items]

    def get(self, item_id: str) -> Optional[CartItem]:
        found = self._find(item_id)
        return found.model_copy() if found else None

    def total_items(self) -> int:
        return sum(i.quantity for i in self._items)

    def total_price(self) -> int:
        return sum(i.line_total for i in self._items)

    def is_empty(self) -> bool:
        return not self._items

    # --- Mutations ---

    def add(self, item: Union[CartItem, Dict[str, Any]]) -> CartItem:
        new = item if isinstance(item, CartItem) else CartItem.model_validate(item)
        existing = next((i for i in self._items if i.key == new.key), None)
        if existing:
            existing.quantity += new.quantity
            result = existing
        else:
            result = new.model_copy()
            if not result.id:
                result.id = self._make_id(result)
            self._items.append(result)
        self._persist()
        return result.model_copy()

    def remove(self, item_id: str) -> None:
        before = len(self._items)
        self._items = [i for i in self._items if i.id != item_id]
        if len(self._items) != before:
            self._persist()

    def set_quantity(self, item_id: str, quantity: int) -> Optional[CartItem]:
        if quantity <= 0:
            self.remove(item_id)
            return None
        item = self._find(item_id)
        if item is None:
            return None
        if item.stock_limit:
            quantity = min(quantity, item.stock_limit)
        item.quantity = quantity
        self._persist()
        return item.model_copy()

    def clear(self) -> None:
        self._items = []
        self._persist()
