"""New order template: tells the restaurant an order was placed."""

from notifications.templates.types import NotificationType


class NewOrderTemplate:
    notification_type = NotificationType.NEW_ORDER.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "New Order Received",
            "body": f"Order {context['order_number']} - {context['total']} has been placed",
        }
