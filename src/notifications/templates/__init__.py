"""Template registry: maps NotificationType to template classes.

Each template renders a push title and body from order context.
"""

from notifications.templates.new_order import NewOrderTemplate
from notifications.templates.order_cancellation import OrderCancellationTemplate
from notifications.templates.order_status import OrderStatusTemplate
from notifications.templates.payment_status import PaymentStatusTemplate
from notifications.templates.refund_notification import RefundNotificationTemplate
from notifications.templates.types import NotificationType

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.NEW_ORDER.value: NewOrderTemplate,
    NotificationType.ORDER_STATUS.value: OrderStatusTemplate,
    NotificationType.ORDER_CANCELLATION.value: OrderCancellationTemplate,
    NotificationType.REFUND_NOTIFICATION.value: RefundNotificationTemplate,
    NotificationType.PAYMENT_STATUS.value: PaymentStatusTemplate,
}


def render(notification_type: NotificationType, context: dict) -> dict:
    return TEMPLATE_REGISTRY[notification_type.value].render(context)
