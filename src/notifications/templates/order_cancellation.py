"""Order cancellation template: sent to the restaurant when a customer cancels."""

from notifications.templates.types import NotificationType


class OrderCancellationTemplate:
    notification_type = NotificationType.ORDER_CANCELLATION.value

    @staticmethod
    def render(context: dict) -> dict:
        body = f"Order {context['order_number']} has been cancelled"
        if context.get("reason"):
            body += f". Reason: {context['reason']}"
        return {"title": "Order Cancelled", "body": body}
