from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.notifications"
    label = "notifications"

    def ready(self) -> None:
        from modules.notifications.handlers import (
            order_created_handler,
            order_status_changed_handler,
            payment_status_changed_handler,
        )
        from modules.orders.events import (
            OrderCreated,
            OrderStatusChanged,
            PaymentStatusChanged,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderCreated, order_created_handler)
        event_bus.subscribe(OrderStatusChanged, order_status_changed_handler)
        event_bus.subscribe(PaymentStatusChanged, payment_status_changed_handler)
