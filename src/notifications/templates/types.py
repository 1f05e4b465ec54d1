"""Kinds of order notifications."""

from enum import Enum


class NotificationType(Enum):
    NEW_ORDER = "New_Order"
    ORDER_STATUS = "Order_Status"
    ORDER_CANCELLATION = "Order_Cancellation"
    REFUND_NOTIFICATION = "Refund_Notification"
    PAYMENT_STATUS = "Payment_Status"
