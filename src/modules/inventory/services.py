"""Inventory ledger.

The only component allowed to move stock for sales.  Reservations and
restorations are atomic at the database level, so callers may run them
inside or outside a transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.inventory.exceptions import InsufficientStock, InvalidQuantity
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from modules.inventory.repositories.interfaces import IStockRepository

logger = structlog.get_logger(__name__)


class InventoryLedger:
    def __init__(self, repository: IStockRepository) -> None:
        self._repo = repository

    def reserve_and_decrement(self, product_id: str, quantity: int) -> None:
        """Take *quantity* units out of stock.

        Raises:
            InvalidQuantity: quantity < 1.
            ProductNotFound: the product does not exist.
            InsufficientStock: fewer than *quantity* units are left.
        """
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1.")
        log = logger.bind(product_id=str(product_id), quantity=quantity)

        if self._repo.decrement_if_available(product_id, quantity):
            log.info("inventory.reserved")
            return

        available = self._repo.current_stock(product_id)
        if available is None:
            raise ProductNotFound(f"Product {product_id} not found.")
        log.warning("inventory.insufficient", available=available)
        raise InsufficientStock(str(product_id), quantity, available)

    def restore(self, product_id: str, quantity: int) -> None:
        """Return *quantity* units to stock (cancellation, refusal)."""
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1.")
        if not self._repo.increment(product_id, quantity):
            raise ProductNotFound(f"Product {product_id} not found.")
        logger.info("inventory.restored", product_id=str(product_id), quantity=quantity)

    def available(self, product_id: str) -> int:
        """Current stock of a product.

        Raises:
            ProductNotFound: the product does not exist.
        """
        stock = self._repo.current_stock(product_id)
        if stock is None:
            raise ProductNotFound(f"Product {product_id} not found.")
        return stock


def default_ledger() -> InventoryLedger:
    from modules.inventory.repositories.django_repository import StockDjangoRepository

    return InventoryLedger(StockDjangoRepository())
