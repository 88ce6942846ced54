"""Order domain constants.

Order status and payment status are independent state machines; both are
defined here together with who may drive which transition.
"""

from django.db import models

from modules.boutiques.constants import DeliveryMode
from modules.core.identity import Role

__all__ = [
    "DeliveryMode",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
]


class OrderStatus(models.TextChoices):
    PENDING = "en_attente", "En attente"
    PREPARING = "en_preparation", "En préparation"
    READY = "pret", "Prête"
    DELIVERED = "livre", "Livrée"
    CANCELLED = "annule", "Annulée"
    REFUSED = "refuse", "Refusée"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {
        OrderStatus.PREPARING,
        OrderStatus.CANCELLED,
        OrderStatus.REFUSED,
    },
    OrderStatus.PREPARING: {
        OrderStatus.READY,
        OrderStatus.CANCELLED,
        OrderStatus.REFUSED,
    },
    OrderStatus.READY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUSED: set(),
}

# Subsets of VALID_TRANSITIONS each role may request.  The mall
# administrator may request anything the table allows.
ROLE_TRANSITIONS: dict[str, dict[str, set[str]]] = {
    Role.VENDOR: {
        OrderStatus.PENDING: {OrderStatus.PREPARING, OrderStatus.REFUSED},
        OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.REFUSED},
        OrderStatus.READY: {OrderStatus.DELIVERED},
    },
    Role.SHOPPER: {
        OrderStatus.PENDING: {OrderStatus.CANCELLED},
    },
    Role.ADMIN: VALID_TRANSITIONS,
}

TERMINAL_STATES: set[str] = {
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUSED,
}

# Entering one of these gives the reserved units back to the ledger
STOCK_RELEASING_STATES: set[str] = {OrderStatus.CANCELLED, OrderStatus.REFUSED}

STATUS_TIMESTAMP_FIELDS: dict[str, str] = {
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
    OrderStatus.REFUSED: "refused_at",
}


class PaymentStatus(models.TextChoices):
    PENDING = "en_attente", "En attente"
    PAID = "paye", "Payée"
    FAILED = "echoue", "Échouée"
    REFUNDED = "rembourse", "Remboursée"


PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
}

# Orders are paid on collection/delivery: once ready, or after delivery
PAYABLE_ORDER_STATES: set[str] = {OrderStatus.READY, OrderStatus.DELIVERED}

ROLE_PAYMENT_STATUSES: dict[str, set[str]] = {
    Role.SHOPPER: {PaymentStatus.PAID, PaymentStatus.FAILED},
    Role.VENDOR: set(PaymentStatus.values),
    Role.ADMIN: set(PaymentStatus.values),
}


class PaymentMethod(models.TextChoices):
    DEBIT_CARD = "carte_bancaire", "Carte bancaire"
    CREDIT_CARD = "carte_credit", "Carte de crédit"
    MOBILE = "mobile", "Mobile money"
    TRANSFER = "virement", "Virement"
    CASH = "especes", "Espèces"


INVOICE_NUMBER_PREFIX = "FAC-"
ORDER_REFERENCE_PREFIX = "CMD"
