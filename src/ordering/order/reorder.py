"""Reorder: copies a finished order's lines back into the customer's cart.

Lines merge through ``Cart.merge_line``: a line whose menu item, restaurant
and selection signature match an existing cart line adds to its quantity.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, get_or_create_cart
from ordering.domain import ordering
from ordering.errors import InvalidReorderStateError
from ordering.order.capabilities import ensure_customer_owns
from ordering.order.lifecycle import OrderStatus
from ordering.order.order import Order, load_order

logger = structlog.get_logger(__name__)

REORDERABLE_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


@dataclass(frozen=True)
class ReorderResult:
    cart_id: str
    items_added: int

    @property
    def message(self) -> str:
        return f"{self.items_added} items added to cart"


@dataclass(frozen=True)
class ReorderPreview:
    """What a reorder would put back in the cart, before anything is copied."""

    order: Order
    can_reorder: bool


@ordering.command(part_of="Cart")
class Reorder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ReorderHandler:
    @handle(Reorder)
    def reorder(self, command):
        order = load_order(command.order_id)
        ensure_customer_owns(order, command.customer_id)
        if order.current_status not in REORDERABLE_STATES:
            raise InvalidReorderStateError(order.status)

        cart = get_or_create_cart(command.customer_id)
        for line in order.lines:
            cart.merge_line(
                menu_item_id=line.menu_item_id,
                restaurant_id=order.restaurant_id,
                quantity=line.quantity,
                selection=line.selection,
                special_notes=line.special_notes,
            )
        current_domain.repository_for(Cart).add(cart)

        logger.info("order_reordered", order_id=str(order.id), cart_id=str(cart.id), lines=len(order.lines))
        return ReorderResult(cart_id=str(cart.id), items_added=len(order.lines))


def reorder(order_id, customer_id) -> ReorderResult:
    return current_domain.process(
        Reorder(order_id=str(order_id), customer_id=str(customer_id)),
        asynchronous=False,
    )


def reorder_preview(order_id, customer_id) -> ReorderPreview:
    """The customer's own order with its frozen lines, and whether it can be reordered yet."""
    order = load_order(order_id)
    ensure_customer_owns(order, customer_id)
    return ReorderPreview(order=order, can_reorder=order.current_status in REORDERABLE_STATES)
