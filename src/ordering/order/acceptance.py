"""Restaurant accept / decline: commands, handler and service entry points."""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from notifications.dispatch import notify_order_status
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.order.capabilities import Actor, authorize
from ordering.order.lifecycle import Action
from ordering.order.order import Order, load_order, process_order_command
from ordering.order.refund import refund_order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeclineOutcome:
    order: Order
    refund_due: bool
    refund_initiated: bool = False


@ordering.command(part_of="Order")
class AcceptOrder:
    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)


@ordering.command(part_of="Order")
class DeclineOrder:
    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    reason = String(required=True, max_length=1000)


@ordering.command_handler(part_of=Order)
class OrderAcceptanceHandler:
    @handle(AcceptOrder)
    def accept_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        authorize(Actor.RESTAURANT, Action.ACCEPT, order, command.restaurant_id)
        order.accept()
        repo.add(order)
        return order

    @handle(DeclineOrder)
    def decline_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        authorize(Actor.RESTAURANT, Action.DECLINE, order, command.restaurant_id)
        refund_due = order.qualifies_for_auto_refund()
        order.decline(command.reason)
        repo.add(order)
        return DeclineOutcome(order=order, refund_due=refund_due)


def accept_order(order_id, restaurant_id) -> Order:
    order = process_order_command(AcceptOrder(order_id=str(order_id), restaurant_id=str(restaurant_id)))
    logger.info("order_accepted", order_id=str(order.id), restaurant_id=str(restaurant_id))

    outbox = Outbox()
    outbox.add("notify_order_status", lambda: notify_order_status(order), order_id=str(order.id))
    outbox.flush()
    return order


def decline_order(order_id, restaurant_id, reason) -> DeclineOutcome:
    outcome = process_order_command(
        DeclineOrder(order_id=str(order_id), restaurant_id=str(restaurant_id), reason=reason)
    )
    order = outcome.order
    logger.info("order_declined", order_id=str(order.id), refund_due=outcome.refund_due)

    refund_initiated = False
    if outcome.refund_due:
        try:
            refund_order(order.id, actor_id=restaurant_id, actor_role=Actor.RESTAURANT)
        except Exception as exc:
            logger.warning("auto_refund_failed", order_id=str(order.id), error=str(exc))
        else:
            refund_initiated = True

    outbox = Outbox()
    outbox.add("notify_order_status", lambda: notify_order_status(order), order_id=str(order.id))
    outbox.flush()
    return DeclineOutcome(order=order, refund_due=outcome.refund_due, refund_initiated=refund_initiated)
