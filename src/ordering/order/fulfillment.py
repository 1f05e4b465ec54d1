"""Order progress through the kitchen and delivery: command, handler and service entry point."""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from notifications.dispatch import notify_order_status
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.order.capabilities import Actor, authorize
from ordering.order.lifecycle import Action, OrderStatus
from ordering.order.order import Order, load_order, process_order_command

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    estimated_delivery_time = DateTime()


@ordering.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        authorize(Actor.RESTAURANT, Action.ADVANCE, order, command.restaurant_id)

        previous_status = order.status
        order.advance(command.status, estimated_delivery_time=command.estimated_delivery_time)
        repo.add(order)
        logger.info("order_status_advanced", order_id=str(order.id), previous=previous_status, status=order.status)
        return order


def update_order_status(order_id, restaurant_id, status, estimated_delivery_time=None) -> Order:
    order = process_order_command(
        AdvanceOrderStatus(
            order_id=str(order_id),
            restaurant_id=str(restaurant_id),
            status=status.value if isinstance(status, OrderStatus) else status,
            estimated_delivery_time=estimated_delivery_time,
        )
    )

    outbox = Outbox()
    outbox.add("notify_order_status", lambda: notify_order_status(order), order_id=str(order.id))
    outbox.flush()
    return order
