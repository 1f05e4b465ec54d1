"""Refund template: sent to the customer when a refund goes through."""

from notifications.templates.types import NotificationType


class RefundNotificationTemplate:
    notification_type = NotificationType.REFUND_NOTIFICATION.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Refund Initiated",
            "body": f"A refund of {context['amount']} for order {context['order_number']} is on its way",
        }
