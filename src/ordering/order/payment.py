"""Order payment status: provider captures and cash on delivery corrections."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from notifications.dispatch import notify_payment_status
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.order.capabilities import Actor, authorize
from ordering.order.lifecycle import Action, PaymentStatus
from ordering.order.order import Order, load_order, process_order_command

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class RecordPayment:
    """The payment provider confirmed it captured the order total."""

    order_id = Identifier(required=True)
    payment_reference = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class CorrectPaymentStatus:
    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        order.record_payment(command.payment_reference)
        repo.add(order)
        logger.info("payment_recorded", order_id=str(order.id), payment_reference=command.payment_reference)
        return order

    @handle(CorrectPaymentStatus)
    def correct_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        authorize(Actor.RESTAURANT, Action.CORRECT_PAYMENT, order, command.restaurant_id)

        previous = order.payment_status
        order.correct_payment_status(command.payment_status, reason=command.reason)
        repo.add(order)
        logger.info(
            "payment_status_corrected",
            order_id=str(order.id),
            previous=previous,
            payment_status=order.payment_status,
        )
        return order


def _notify_customer(order: Order) -> Order:
    outbox = Outbox()
    outbox.add("notify_payment_status", lambda: notify_payment_status(order), order_id=str(order.id))
    outbox.flush()
    return order


def record_payment(order_id, payment_reference) -> Order:
    order = process_order_command(RecordPayment(order_id=str(order_id), payment_reference=payment_reference))
    return _notify_customer(order)


def update_payment_status(order_id, restaurant_id, payment_status, reason=None) -> Order:
    order = process_order_command(
        CorrectPaymentStatus(
            order_id=str(order_id),
            restaurant_id=str(restaurant_id),
            payment_status=payment_status.value if isinstance(payment_status, PaymentStatus) else payment_status,
            reason=reason,
        )
    )
    return _notify_customer(order)
