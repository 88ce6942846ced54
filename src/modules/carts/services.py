"""Cart service layer (Use Cases).

Business rules enforced:
- Quantities are positive; a product appears once per cart.
- Only sellable products can be added (active, in stock, open boutique).
- A line never asks for more than the current stock: larger requests are
  clamped, not rejected.
- Totals are recomputed from live prices (promotional price when set).
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from typing import TYPE_CHECKING, Tuple

import structlog
from django.db import transaction

from modules.boutiques.constants import DeliveryMode
from modules.carts.dtos import (
    CartLineChangeDTO,
    CartLineDTO,
    CartTotalsDTO,
    VendorSubtotalDTO,
)
from modules.carts.exceptions import CartElementNotFound
from modules.inventory.exceptions import InvalidQuantity
from modules.products.exceptions import ProductNotFound, ProductUnavailable

if TYPE_CHECKING:
    from modules.carts.models import Cart, CartElement
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


class CartService:
    """Application service for the shopper's cart."""

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_item(
        self, shopper_id: str, product_id: str, quantity: int
    ) -> Tuple[CartElement, CartLineChangeDTO]:
        """Add *quantity* units of a product, merging with an existing line.

        The merged quantity is capped at the available stock.

        Raises:
            InvalidQuantity: quantity < 1.
            ProductNotFound: the product does not exist.
            ProductUnavailable: inactive product, closed boutique, or no stock.
        """
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1.")
        log = logger.bind(shopper_id=shopper_id, product_id=str(product_id))

        product = self._sellable_product(product_id)
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        element = self._cart_repo.get_element(cart, product_id)

        requested = quantity + (element.quantity if element else 0)
        final = min(requested, product.stock_quantity)
        if element:
            element = self._cart_repo.set_quantity(element, final)
        else:
            element = self._cart_repo.add_element(cart, product.id, final)

        change = CartLineChangeDTO(
            product_id=product.id,
            quantity=final,
            requested_quantity=requested,
            clamped=final < requested,
        )
        if change.clamped:
            log.info("cart.quantity_clamped", requested=requested, quantity=final)
        log.info("cart.item_added", quantity=final)
        return element, change

    @transaction.atomic
    def update_quantity(
        self, shopper_id: str, product_id: str, quantity: int
    ) -> CartLineChangeDTO:
        """Set the quantity of an existing line; 0 removes it.

        Raises:
            InvalidQuantity: quantity < 0.
            CartElementNotFound: the cart holds no line for the product.
            ProductUnavailable: the product can no longer be sold.
        """
        if quantity < 0:
            raise InvalidQuantity("Quantity cannot be negative.")
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        element = self._cart_repo.get_element(cart, product_id)
        if not element:
            raise CartElementNotFound(f"Product {product_id} is not in the cart.")

        if quantity == 0:
            self._cart_repo.remove_element(element)
            logger.info(
                "cart.item_removed", shopper_id=shopper_id, product_id=str(product_id)
            )
            return CartLineChangeDTO(
                product_id=element.product_id,
                quantity=0,
                requested_quantity=0,
                clamped=False,
            )

        product = self._sellable_product(product_id)
        final = min(quantity, product.stock_quantity)
        self._cart_repo.set_quantity(element, final)
        logger.info(
            "cart.quantity_updated",
            shopper_id=shopper_id,
            product_id=str(product_id),
            quantity=final,
        )
        return CartLineChangeDTO(
            product_id=product.id,
            quantity=final,
            requested_quantity=quantity,
            clamped=final < quantity,
        )

    @transaction.atomic
    def remove_item(self, shopper_id: str, product_id: str) -> None:
        """Raises ``CartElementNotFound`` when the product is not in the cart."""
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        element = self._cart_repo.get_element(cart, product_id)
        if not element:
            raise CartElementNotFound(f"Product {product_id} is not in the cart.")
        self._cart_repo.remove_element(element)
        logger.info("cart.item_removed", shopper_id=shopper_id, product_id=str(product_id))

    @transaction.atomic
    def clear(self, shopper_id: str) -> int:
        """Empty the cart (idempotent); returns the number of lines removed."""
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        removed = self._cart_repo.clear(cart)
        logger.info("cart.cleared", shopper_id=shopper_id, removed=removed)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, shopper_id: str) -> Cart:
        return self._cart_repo.get_or_create_for_shopper(shopper_id)

    def get_elements(self, shopper_id: str) -> list[CartElement]:
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        return self._cart_repo.elements(cart)

    def count_items(self, shopper_id: str) -> int:
        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        return self._cart_repo.count_items(cart)

    def compute_totals(self, shopper_id: str) -> CartTotalsDTO:
        """Per-boutique subtotals and grand total from live prices."""
        groups: "OrderedDict[object, list[CartElement]]" = OrderedDict()
        for element in self.get_elements(shopper_id):
            groups.setdefault(element.product.boutique_id, []).append(element)

        vendors = []
        for elements in groups.values():
            boutique = elements[0].product.boutique
            lines = [self._line(element) for element in elements]
            subtotal = sum((line.line_total for line in lines), ZERO)
            vendors.append(
                VendorSubtotalDTO(
                    boutique_id=boutique.id,
                    boutique_name=boutique.name,
                    items=lines,
                    item_count=sum(line.quantity for line in lines),
                    subtotal=subtotal,
                    delivery_fee_estimate=boutique.delivery_fee_for(
                        DeliveryMode.STANDARD, subtotal
                    ),
                )
            )

        return CartTotalsDTO(
            shopper_id=shopper_id,
            vendors=vendors,
            item_count=sum(vendor.item_count for vendor in vendors),
            grand_total=sum((vendor.subtotal for vendor in vendors), ZERO),
            estimated_delivery_total=sum(
                (vendor.delivery_fee_estimate for vendor in vendors), ZERO
            ),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _sellable_product(self, product_id: str) -> Product:
        product = self._product_repo.get_with_boutique(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found.")
        if not product.is_sellable:
            raise ProductUnavailable(f"Product {product_id} is not available.")
        return product

    @staticmethod
    def _line(element: CartElement) -> CartLineDTO:
        product = element.product
        unit_price = product.effective_price
        return CartLineDTO(
            product_id=product.id,
            product_name=product.name,
            unit_price=unit_price,
            is_on_promotion=product.is_on_promotion,
            quantity=element.quantity,
            line_total=unit_price * element.quantity,
            available=product.is_sellable and product.stock_quantity >= element.quantity,
        )
