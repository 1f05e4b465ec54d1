"""Order notification dispatcher.

Fire and forget: every push is attempted on its own and a failure is logged,
never raised. Order placement, status changes and cancellation never depend
on a notification getting through.
"""

import structlog

from notifications.channel import get_push_channel
from notifications.templates import render
from notifications.templates.types import NotificationType
from ordering.money import money_str

logger = structlog.get_logger(__name__)

ADMINS = "admins"


def customer_recipient(customer_id) -> str:
    return f"customer:{customer_id}"


def restaurant_recipient(restaurant_id) -> str:
    return f"restaurant:{restaurant_id}"


def _send(recipient: str, notification_type: NotificationType, context: dict) -> bool:
    message = render(notification_type, context)
    data = {"type": notification_type.value, "order_id": context.get("order_id")}
    try:
        result = get_push_channel().send(recipient, message["title"], message["body"], data)
    except Exception as exc:
        logger.warning(
            "push_dispatch_failed",
            recipient=recipient,
            notification_type=notification_type.value,
            order_id=context.get("order_id"),
            error=str(exc),
        )
        return False

    if result.get("status") != "sent":
        logger.warning(
            "push_not_delivered",
            recipient=recipient,
            notification_type=notification_type.value,
            order_id=context.get("order_id"),
            error=result.get("error"),
        )
        return False
    return True


def _context(order, **extra) -> dict:
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "total": money_str(order.pricing.total),
        **extra,
    }


def notify_new_order(order) -> int:
    """Tell the restaurant and the admins about a freshly placed order."""
    context = _context(order)
    sent = 0
    for recipient in (restaurant_recipient(order.restaurant_id), ADMINS):
        sent += _send(recipient, NotificationType.NEW_ORDER, context)
    return sent


def notify_order_status(order) -> int:
    return int(_send(customer_recipient(order.customer_id), NotificationType.ORDER_STATUS, _context(order)))


def notify_payment_status(order) -> int:
    return int(_send(customer_recipient(order.customer_id), NotificationType.PAYMENT_STATUS, _context(order)))


def notify_order_cancelled(order) -> int:
    context = _context(order, reason=order.cancellation_reason)
    sent = int(_send(customer_recipient(order.customer_id), NotificationType.ORDER_STATUS, context))
    for recipient in (restaurant_recipient(order.restaurant_id), ADMINS):
        sent += _send(recipient, NotificationType.ORDER_CANCELLATION, context)
    return sent


def notify_refund(order, amount) -> int:
    context = _context(order, amount=money_str(amount))
    return int(_send(customer_recipient(order.customer_id), NotificationType.REFUND_NOTIFICATION, context))
