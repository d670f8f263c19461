"""Cart state and purchase frequency history."""

from collections.abc import Callable

import structlog

from .categorizer import categorize
from .item_normalizer import display_item_name, normalize_item_name
from .models import CartChange, CartItem

logger = structlog.get_logger(__name__)

CartListener = Callable[[CartChange], None]


class InvalidItemError(ValueError):
    """Raised when an item cannot be added as given."""

    def __init__(self, name: str, quantity: int):
        self.name = name
        self.quantity = quantity
        super().__init__(f"Cannot add {quantity!r} of {name!r}: need a name and a quantity of at least 1")


class CartStore:
    """Owns the cart items and how often each item has been added.

    Items are kept in insertion order and keyed by their normalized name.
    The frequency history outlives the cart: removing an item leaves its
    counter in place.
    """

    def __init__(self) -> None:
        self._items: dict[str, CartItem] = {}
        self._history: dict[str, int] = {}
        self._history_names: dict[str, str] = {}
        self._listeners: list[CartListener] = []
        self.generation = 0

    @property
    def items(self) -> list[CartItem]:
        """Cart items in insertion order."""
        return [item.model_copy() for item in self._items.values()]

    @property
    def item_names(self) -> list[str]:
        return [item.name for item in self._items.values()]

    @property
    def history(self) -> dict[str, int]:
        """Add counts keyed by display name, in first-added order."""
        return {self._history_names[key]: count for key, count in self._history.items()}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_item_name(name) in self._items

    def get_item(self, name: str) -> CartItem | None:
        item = self._items.get(normalize_item_name(name))
        return item.model_copy() if item else None

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a callback for item-set changes.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_item(self, name: str, quantity: int = 1, category: str | None = None) -> dict:
        """Add an item, merging with an existing entry of the same name.

        Args:
            name: Item name, matched case-insensitively
            quantity: Amount to add
            category: Category for a new entry. Ignored when the item exists.

        Returns:
            Dict with success status and item data

        Raises:
            InvalidItemError: If the name is blank or quantity is below 1
        """
        key = normalize_item_name(name)
        if not key or not isinstance(quantity, int) or quantity < 1:
            raise InvalidItemError(name, quantity)

        existing = self._items.get(key)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                name=display_item_name(name),
                quantity=quantity,
                category=category or categorize(name),
            )
            self._items[key] = item

        if key not in self._history:
            self._history_names[key] = display_item_name(name)
        self._history[key] = self._history.get(key, 0) + 1

        if not existing:
            self._notify()

        return {
            "success": True,
            "message": f"Added {item.name}",
            "data": {"item": item.model_dump(mode="json"), "changed": True},
        }

    def remove_item(self, name: str) -> dict:
        """Remove an item entirely. Removing a missing item is a no-op."""
        removed = self._items.pop(normalize_item_name(name), None)
        if removed is None:
            return self._unchanged(name)

        self._notify()
        return {
            "success": True,
            "message": f"Removed {removed.name}",
            "data": {"item": removed.model_dump(mode="json"), "changed": True},
        }

    def increment(self, name: str) -> dict:
        """Increase an item's quantity by one."""
        item = self._items.get(normalize_item_name(name))
        if item is None:
            return self._unchanged(name)

        item.quantity += 1
        return {
            "success": True,
            "message": f"{item.name}: {item.quantity}",
            "data": {"item": item.model_dump(mode="json"), "changed": True},
        }

    def decrement(self, name: str) -> dict:
        """Decrease an item's quantity by one, removing it instead of reaching zero."""
        key = normalize_item_name(name)
        item = self._items.get(key)
        if item is None:
            return self._unchanged(name)

        if item.quantity > 1:
            item.quantity -= 1
            return {
                "success": True,
                "message": f"{item.name}: {item.quantity}",
                "data": {"item": item.model_dump(mode="json"), "changed": True},
            }

        del self._items[key]
        self._notify()
        return {
            "success": True,
            "message": f"Removed {item.name}",
            "data": {"item": None, "changed": True},
        }

    def clear(self) -> dict:
        """Empty the cart. Frequency history is kept."""
        removed_count = len(self._items)
        self._items.clear()
        if removed_count:
            self._notify()

        return {
            "success": True,
            "message": f"Cleared {removed_count} items",
            "data": {"removed_count": removed_count, "changed": removed_count > 0},
        }

    def frequent_items(self, limit: int = 5) -> list[str]:
        """Most frequently added item names.

        Ties keep the order in which items were first added.
        """
        if limit <= 0:
            return []
        ranked = sorted(self._history.items(), key=lambda kv: kv[1], reverse=True)
        return [self._history_names[key] for key, _ in ranked[:limit]]

    def items_by_category(self) -> dict[str, list[CartItem]]:
        """Cart items grouped by category, in insertion order."""
        by_category: dict[str, list[CartItem]] = {}
        for item in self._items.values():
            by_category.setdefault(item.category, []).append(item.model_copy())
        return by_category

    def _unchanged(self, name: str) -> dict:
        return {
            "success": True,
            "message": f"{display_item_name(name)} is not in the cart",
            "data": {"item": None, "changed": False},
        }

    def _notify(self) -> None:
        self.generation += 1
        change = CartChange(generation=self.generation, item_names=self.item_names)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as e:
                logger.error(
                    "cart_listener_failed",
                    generation=change.generation,
                    error=str(e),
                    exc_info=True,
                )
