"""Order status template: tells the customer their order moved on."""

from notifications.templates.types import NotificationType

_TITLES = {
    "ACCEPTED": "Order Accepted",
    "PREPARING": "Order Preparing",
    "READY": "Order Ready",
    "OUT_FOR_DELIVERY": "Order Out for Delivery",
    "DELIVERED": "Order Delivered",
    "REJECTED": "Order Rejected",
    "CANCELLED": "Order Cancelled",
}

_BODIES = {
    "ACCEPTED": "Your order {order_number} has been accepted by the restaurant",
    "PREPARING": "Your order {order_number} is being prepared",
    "READY": "Your order {order_number} is ready",
    "OUT_FOR_DELIVERY": "Your order {order_number} is on its way",
    "DELIVERED": "Your order {order_number} has been delivered",
    "REJECTED": "Your order {order_number} was declined by the restaurant",
    "CANCELLED": "Your order {order_number} has been cancelled",
}


class OrderStatusTemplate:
    notification_type = NotificationType.ORDER_STATUS.value

    @staticmethod
    def render(context: dict) -> dict:
        status = context["status"]
        body = _BODIES.get(status, "Your order {order_number} is now " + status)
        return {
            "title": _TITLES.get(status, "Order Updated"),
            "body": body.format(order_number=context["order_number"]),
        }
