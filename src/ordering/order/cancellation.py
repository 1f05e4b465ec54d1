"""Customer cancellation: command, handler and service entry point.

The cancel commits first. Refund and notifications follow as separate,
individually guarded steps: a refund failure leaves the order cancelled and
is reported as ``refund_initiated=False``.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from notifications.dispatch import notify_order_cancelled
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.order.capabilities import Actor, authorize
from ordering.order.lifecycle import Action
from ordering.order.order import Order, load_order, process_order_command
from ordering.order.refund import refund_order

logger = structlog.get_logger(__name__)

CANCELLATION_REASONS = [
    "Changed my mind",
    "Ordered by mistake",
    "Delivery time is too long",
    "Found a better option",
    "Other",
]


@dataclass(frozen=True)
class CancellationResult:
    order_id: str
    order_number: str
    status: str
    reason: str
    refund_initiated: bool

    @property
    def message(self) -> str:
        if self.refund_initiated:
            return "Order cancelled successfully. Refund has been initiated."
        return "Order cancelled successfully"


@dataclass(frozen=True)
class CancelOutcome:
    order: Order
    refund_due: bool


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(required=True, max_length=1000)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        authorize(Actor.CUSTOMER, Action.CANCEL, order, command.customer_id)

        # Decided on the pre-cancel state
        refund_due = order.qualifies_for_auto_refund()

        order.cancel(command.reason)
        repo.add(order)
        logger.info("order_cancelled", order_id=str(order.id), refund_due=refund_due)
        return CancelOutcome(order=order, refund_due=refund_due)


def cancel_order(order_id, customer_id, reason) -> CancellationResult:
    outcome = process_order_command(
        CancelOrder(order_id=str(order_id), customer_id=str(customer_id), reason=reason)
    )
    order = outcome.order

    refund_initiated = False
    if outcome.refund_due:
        try:
            refund_order(order.id, actor_id=customer_id, actor_role=Actor.CUSTOMER)
        except Exception as exc:
            logger.warning("auto_refund_failed", order_id=str(order.id), error=str(exc))
        else:
            refund_initiated = True

    outbox = Outbox()
    outbox.add("notify_order_cancelled", lambda: notify_order_cancelled(order), order_id=str(order.id))
    outbox.flush()

    return CancellationResult(
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        reason=order.cancellation_reason,
        refund_initiated=refund_initiated,
    )
