"""Cart repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartElement


class ICartRepository(IRepository["Cart"]):
    @abstractmethod
    def get_or_create_for_shopper(self, shopper_id: str) -> Cart:
        """The shopper's cart, created lazily."""

    @abstractmethod
    def elements(self, cart: Cart) -> List[CartElement]:
        """Lines in display order, with product and boutique loaded."""

    @abstractmethod
    def get_element(self, cart: Cart, product_id: str) -> Optional[CartElement]:
        """The line holding *product_id*, if any."""

    @abstractmethod
    def add_element(self, cart: Cart, product_id: str, quantity: int) -> CartElement:
        """Create a new line."""

    @abstractmethod
    def set_quantity(self, element: CartElement, quantity: int) -> CartElement:
        """Overwrite the quantity of an existing line."""

    @abstractmethod
    def remove_element(self, element: CartElement) -> None:
        """Delete one line."""

    @abstractmethod
    def remove_products(self, cart: Cart, product_ids: Iterable[str]) -> int:
        """Delete the lines holding *product_ids*; returns the number removed."""

    @abstractmethod
    def clear(self, cart: Cart) -> int:
        """Delete every line; returns the number removed."""

    @abstractmethod
    def count_items(self, cart: Cart) -> int:
        """Sum of quantities over all lines."""
