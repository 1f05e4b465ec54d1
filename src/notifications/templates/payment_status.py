"""Payment status template: tells the customer where their payment stands."""

from notifications.templates.types import NotificationType

_MESSAGES = {
    "PAID": ("Payment Received", "Payment of {total} for order {order_number} has been received"),
    "PENDING": ("Payment Pending", "Payment for order {order_number} is pending"),
    "FAILED": ("Payment Failed", "Payment for order {order_number} could not be completed"),
    "REFUNDED": ("Payment Refunded", "Payment for order {order_number} has been refunded"),
}


class PaymentStatusTemplate:
    notification_type = NotificationType.PAYMENT_STATUS.value

    @staticmethod
    def render(context: dict) -> dict:
        payment_status = context["payment_status"]
        title, body = _MESSAGES.get(
            payment_status,
            ("Payment Updated", "Payment for order {order_number} is now " + payment_status),
        )
        return {
            "title": title,
            "body": body.format(order_number=context["order_number"], total=context.get("total", "")),
        }
