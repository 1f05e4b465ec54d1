"""Order history listings, read from the ``OrderSummary`` projection.

Customer listings show newest orders first. The restaurant's accepted-order
queue shows oldest first so the kitchen works through it in arrival order.
"""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from ordering.errors import ValidationError
from ordering.order.lifecycle import TERMINAL_STATES, OrderStatus
from ordering.projections.order_summary import OrderSummary

ACTIVE_STATES = frozenset(OrderStatus) - TERMINAL_STATES
PAST_STATES = TERMINAL_STATES

CUSTOMER_PAGE_SIZE = 10
RESTAURANT_PAGE_SIZE = 50


@dataclass(frozen=True)
class OrderPage:
    orders: list[OrderSummary] = field(default_factory=list)
    total: int = 0
    limit: int = CUSTOMER_PAGE_SIZE
    offset: int = 0


def _page(criteria: dict, statuses, limit: int, offset: int, order_by: str) -> OrderPage:
    if limit < 1:
        raise ValidationError("Limit must be at least 1", {"limit": [str(limit)]})
    if offset < 0:
        raise ValidationError("Offset cannot be negative", {"offset": [str(offset)]})

    query = current_domain.repository_for(OrderSummary)._dao.query.filter(**criteria)
    if statuses is not None:
        query = query.filter(status__in=sorted(s.value for s in statuses))
    result = query.order_by(order_by).offset(offset).limit(limit).all()
    return OrderPage(orders=list(result.items), total=result.total, limit=limit, offset=offset)


def customer_orders(customer_id, status: OrderStatus | None = None, limit=CUSTOMER_PAGE_SIZE, offset=0) -> OrderPage:
    statuses = {OrderStatus(status)} if status else None
    return _page({"customer_id": str(customer_id)}, statuses, limit, offset, "-placed_at")


def active_orders(customer_id, limit=CUSTOMER_PAGE_SIZE, offset=0) -> OrderPage:
    return _page({"customer_id": str(customer_id)}, ACTIVE_STATES, limit, offset, "-placed_at")


def past_orders(customer_id, limit=CUSTOMER_PAGE_SIZE, offset=0) -> OrderPage:
    return _page({"customer_id": str(customer_id)}, PAST_STATES, limit, offset, "-placed_at")


def restaurant_orders(
    restaurant_id, status: OrderStatus | None = None, limit=RESTAURANT_PAGE_SIZE, offset=0
) -> OrderPage:
    statuses = {OrderStatus(status)} if status else None
    return _page({"restaurant_id": str(restaurant_id)}, statuses, limit, offset, "-placed_at")


def accepted_queue(restaurant_id, limit=RESTAURANT_PAGE_SIZE, offset=0) -> OrderPage:
    return _page({"restaurant_id": str(restaurant_id)}, {OrderStatus.ACCEPTED}, limit, offset, "placed_at")
