from __future__ import annotations

from shared.domain.exceptions import ConflictError, InvalidInput


class InvalidQuantity(InvalidInput):
    """A quantity below the allowed minimum was supplied."""


class InsufficientStock(ConflictError):
    """Not enough units left to satisfy a reservation."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Product {product_id}: requested {requested}, available {available}.",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )
