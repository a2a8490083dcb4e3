"""Shopper cart: an explicit store object over a pluggable snapshot port.

The storefront keeps the cart on the client; this module holds the same
rules server-side so checkout, tests and tooling share one definition of
cart identity and cart total.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from libs.common.currency import ZERO, as_number
from libs.common.logging import get_logger
from services.store_service.schemas import CartLine

logger = get_logger(__name__)

CART_STORAGE_KEY = "cart"


# ---------------------------------------------------------------------------
# Snapshot port and adapters
# ---------------------------------------------------------------------------


class CartStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryCartStorage:
    """Dict-backed storage, one instance per browsing session."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileCartStorage:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        tmp = self._path(key).with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(self._path(key))


# ---------------------------------------------------------------------------
# Cart items
# ---------------------------------------------------------------------------


@dataclass
class CartItem:
    product_id: str
    name: str
    price: Any
    discount: Any
    quantity: Any = 1
    color: Optional[str] = None
    shade: Optional[str] = None
    image_urls: list[str] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, Optional[str], Optional[str]]:
        return (self.product_id, self.color, self.shade)

    def to_snapshot(self) -> dict[str, Any]:
        def _plain(value):
            return float(value) if isinstance(value, Decimal) else value

        return {
            "id": self.product_id,
            "name": self.name,
            "price": _plain(self.price),
            "discount": _plain(self.discount),
            "image_urls": list(self.image_urls),
            "quantity": self.quantity,
            "selectedColor": self.color,
            "selectedShade": self.shade,
        }

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "CartItem":
        return cls(
            product_id=str(data["id"]),
            name=data.get("name") or "",
            price=data.get("price"),
            discount=data.get("discount"),
            quantity=data.get("quantity"),
            color=data.get("selectedColor"),
            shade=data.get("selectedShade"),
            image_urls=list(data.get("image_urls") or []),
        )

    def to_order_line(self) -> CartLine:
        return CartLine(
            id=self.product_id,
            name=self.name or "Unknown Product",
            price=as_number(self.price),
            discount=as_number(self.discount),
            quantity=int(as_number(self.quantity)),
            selected_color=self.color,
            selected_shade=self.shade,
            image_urls=self.image_urls,
        )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CartStore:
    """Working set of items a shopper intends to buy.

    Every mutation writes the full snapshot back to ``storage``. Items are
    identified by (product id, color, shade); removal and quantity updates
    use the same key, with color/shade defaulting to the plain variant.
    """

    def __init__(self, storage: CartStorage, key: str = CART_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.items: list[CartItem] = self._load()

    def _load(self) -> list[CartItem]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("cart snapshot is not a list")
            return [CartItem.from_snapshot(entry) for entry in data]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable cart snapshot: {e}")
            return []

    def _persist(self) -> None:
        self.storage.set(
            self.key, json.dumps([item.to_snapshot() for item in self.items])
        )

    def _find(
        self, product_id: str, color: Optional[str], shade: Optional[str]
    ) -> Optional[CartItem]:
        key = (str(product_id), color, shade)
        return next((item for item in self.items if item.key == key), None)

    def add_item(
        self,
        product: Mapping[str, Any],
        quantity: int = 1,
        color: Optional[str] = None,
        shade: Optional[str] = None,
    ) -> CartItem:
        """Add a product, merging with an existing line of the same variant."""
        existing = self._find(str(product["id"]), color, shade)
        if existing:
            existing.quantity = int(as_number(existing.quantity)) + quantity
            item = existing
        else:
            image = product.get("image")
            item = CartItem(
                product_id=str(product["id"]),
                name=product.get("name") or "",
                price=product.get("price") or 0,
                discount=product.get("discount") or 0,
                quantity=quantity,
                color=color,
                shade=shade,
                image_urls=[image] if image else list(product.get("image_urls") or []),
            )
            self.items.append(item)
        self._persist()
        return item

    def remove_item(
        self, product_id: str, color: Optional[str] = None, shade: Optional[str] = None
    ) -> bool:
        item = self._find(product_id, color, shade)
        if not item:
            return False
        self.items.remove(item)
        self._persist()
        return True

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        color: Optional[str] = None,
        shade: Optional[str] = None,
    ) -> None:
        if quantity < 1:
            return
        item = self._find(product_id, color, shade)
        if item:
            item.quantity = quantity
            self._persist()

    def clear(self) -> None:
        self.items = []
        self._persist()

    def total(self) -> Decimal:
        """Sum of price × (1 − discount) × quantity; non-numeric fields count as 0."""
        total = ZERO
        for item in self.items:
            price = as_number(item.price)
            discount = as_number(item.discount)
            quantity = as_number(item.quantity)
            total += price * (1 - discount) * quantity
        return total

    def __len__(self) -> int:
        return len(self.items)

    def order_lines(self) -> list[CartLine]:
        return [item.to_order_line() for item in self.items]
