"""Checkout orchestrator.

Turns a shopper's multi-boutique cart into one order per boutique.

Each boutique group commits or rolls back on its own (savepoint inside the
caller's transaction, real transaction otherwise): a group whose lines
cannot all be reserved leaves no order and no stock change behind, while
groups that did commit stay committed.  A group's cart lines are removed in
the same transaction that creates its order.  Lines inside a group are reserved in
product-id order so concurrent checkouts touching the same products lock
them in the same order.
"""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional

import structlog
from django.db import transaction

from modules.core.identity import Role
from modules.inventory.exceptions import InsufficientStock
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CheckoutResultDTO, LineConflictDTO, OrderSummaryDTO
from modules.orders.events import OrderCreated
from modules.orders.exceptions import EmptyCart, StockConflict
from modules.products.exceptions import ProductNotFound
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.boutiques.models import Boutique
    from modules.carts.models import CartElement
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.inventory.services import InventoryLedger
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

REASON_UNAVAILABLE = "unavailable"
REASON_INSUFFICIENT_STOCK = "insufficient_stock"


class _GroupRejected(Exception):
    """Aborts the transaction of one boutique group."""

    def __init__(self, conflict: LineConflictDTO) -> None:
        self.conflict = conflict
        super().__init__(conflict.reason)


class CheckoutService:
    """Application service for the checkout use-case."""

    def __init__(
        self,
        cart_repository: ICartRepository,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        ledger: InventoryLedger,
    ) -> None:
        self._cart_repo = cart_repository
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._ledger = ledger

    def checkout(self, shopper_id: str, dto: CheckoutDTO) -> CheckoutResultDTO:
        """Create one order per boutique from the shopper's cart.

        Raises:
            EmptyCart: the cart has no lines.
            StockConflict: no boutique group could be committed; carries the
                conflict list, cart and stock are untouched.
        """
        log = logger.bind(shopper_id=shopper_id, delivery_mode=dto.delivery_mode)
        log.info("checkout.started")

        if dto.idempotency_key:
            existing = self._order_repo.list_by_checkout_key(
                shopper_id, dto.idempotency_key
            )
            if existing:
                log.info(
                    "checkout.idempotency_hit",
                    key=dto.idempotency_key,
                    order_count=len(existing),
                )
                return CheckoutResultDTO(
                    orders=[OrderSummaryDTO.from_entity(o) for o in existing],
                    replayed=True,
                )

        cart = self._cart_repo.get_or_create_for_shopper(shopper_id)
        elements = self._cart_repo.elements(cart)
        if not elements:
            raise EmptyCart()

        created: List[Order] = []
        conflicts: List[LineConflictDTO] = []

        for boutique_id, group in self._group_by_boutique(elements).items():
            try:
                with transaction.atomic():
                    order = self._commit_group(shopper_id, group, dto)
                    self._cart_repo.remove_products(
                        cart, [str(e.product_id) for e in group]
                    )
            except _GroupRejected as exc:
                conflicts.append(exc.conflict)
                log.warning(
                    "checkout.group_rejected",
                    boutique_id=str(boutique_id),
                    product_id=str(exc.conflict.product_id),
                    reason=exc.conflict.reason,
                )
                continue
            created.append(order)

        if not created:
            log.warning("checkout.failed", conflict_count=len(conflicts))
            raise StockConflict([c.model_dump(mode="json") for c in conflicts])

        log.info(
            "checkout.completed",
            order_count=len(created),
            conflict_count=len(conflicts),
        )
        return CheckoutResultDTO(
            orders=[OrderSummaryDTO.from_entity(order) for order in created],
            conflicts=conflicts,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _group_by_boutique(
        elements: List[CartElement],
    ) -> "OrderedDict[object, List[CartElement]]":
        groups: "OrderedDict[object, List[CartElement]]" = OrderedDict()
        for element in elements:
            groups.setdefault(element.product.boutique_id, []).append(element)
        return groups

    def _commit_group(
        self, shopper_id: str, group: List[CartElement], dto: CheckoutDTO
    ) -> Order:
        """Reserve every line of one boutique group and persist its order.

        Must run inside a transaction: raising ``_GroupRejected`` rolls back
        the reservations already made for the group.
        """
        boutique_id = group[0].product.boutique_id
        lines: List[Dict] = []

        for element in sorted(group, key=lambda e: str(e.product_id)):
            product = self._product_repo.get_with_boutique(element.product_id)
            if product is None or not product.is_sellable:
                raise _GroupRejected(
                    LineConflictDTO(
                        product_id=element.product_id,
                        boutique_id=boutique_id,
                        reason=REASON_UNAVAILABLE,
                        requested=element.quantity,
                        available=product.stock_quantity if product else 0,
                    )
                )
            try:
                self._ledger.reserve_and_decrement(product.id, element.quantity)
            except InsufficientStock as exc:
                raise _GroupRejected(
                    LineConflictDTO(
                        product_id=product.id,
                        boutique_id=boutique_id,
                        reason=REASON_INSUFFICIENT_STOCK,
                        requested=element.quantity,
                        available=exc.available,
                    )
                ) from exc
            except ProductNotFound as exc:
                raise _GroupRejected(
                    LineConflictDTO(
                        product_id=element.product_id,
                        boutique_id=boutique_id,
                        reason=REASON_UNAVAILABLE,
                        requested=element.quantity,
                        available=0,
                    )
                ) from exc
            lines.append(
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "quantity": element.quantity,
                    "unit_price": product.effective_price,
                }
            )

        boutique = group[0].product.boutique
        order = self._persist_order(shopper_id, boutique, lines, dto)

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                reference=order.reference,
                shopper_id=shopper_id,
                boutique_id=str(boutique.id),
                boutique_owner_id=boutique.owner_id,
                total_amount=str(order.total_amount),
            )
        )
        event_bus.publish_on_commit(order.pull_domain_events())
        return order

    def _persist_order(
        self,
        shopper_id: str,
        boutique: Boutique,
        lines: List[Dict],
        dto: CheckoutDTO,
    ) -> Order:
        subtotal = sum(
            (line["unit_price"] * line["quantity"] for line in lines), Decimal("0.00")
        )
        delivery_fee = boutique.delivery_fee_for(dto.delivery_mode, subtotal)
        address = dto.delivery_address

        order = self._order_repo.create(
            {
                "shopper_id": shopper_id,
                "boutique": boutique,
                "delivery_mode": dto.delivery_mode,
                "delivery_full_name": address.full_name,
                "delivery_phone": address.phone,
                "delivery_street": address.street,
                "delivery_city": address.city,
                "delivery_postal_code": address.postal_code,
                "delivery_country": address.country,
                "delivery_instructions": address.instructions,
                "notes": dto.notes,
                "payment_method": dto.payment_method,
                "subtotal": subtotal,
                "delivery_fee": delivery_fee,
                "total_amount": subtotal + delivery_fee,
                "checkout_key": dto.idempotency_key or "",
                "items": lines,
            }
        )
        self._order_repo.add_history(
            order,
            new_status=OrderStatus.PENDING,
            actor_id=shopper_id,
            actor_role=Role.SHOPPER,
            reason="Order created",
        )
        logger.info(
            "checkout.order_created",
            order_id=str(order.id),
            reference=order.reference,
            boutique_id=str(boutique.id),
            total_amount=str(order.total_amount),
        )
        return order


def default_checkout_service() -> CheckoutService:
    from modules.carts.repositories.django_repository import CartDjangoRepository
    from modules.inventory.services import default_ledger
    from modules.orders.repositories.django_repository import OrderDjangoRepository
    from modules.products.repositories.django_repository import (
        ProductDjangoRepository,
    )

    return CheckoutService(
        cart_repository=CartDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        ledger=default_ledger(),
    )
