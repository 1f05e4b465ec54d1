"""Who may drive which order transition.

Checked before the status machine runs: the actor must hold the capability
for the action, and the order must belong to the actor.
"""

from enum import Enum

from ordering.errors import OwnershipError
from ordering.order.lifecycle import Action


class Actor(Enum):
    CUSTOMER = "CUSTOMER"
    RESTAURANT = "RESTAURANT"
    ADMIN = "ADMIN"


CAPABILITIES = {
    Actor.CUSTOMER: frozenset({Action.CANCEL}),
    Actor.RESTAURANT: frozenset({Action.ACCEPT, Action.DECLINE, Action.ADVANCE, Action.CORRECT_PAYMENT}),
    Actor.ADMIN: frozenset(),
}


def ensure_capability(actor: Actor, action: Action) -> None:
    if action not in CAPABILITIES[actor]:
        raise OwnershipError(
            f"{actor.value.title()} is not allowed to {action.value} an order",
            {"actor": [actor.value]},
        )


def ensure_customer_owns(order, customer_id) -> None:
    if str(order.customer_id) != str(customer_id):
        raise OwnershipError("Order does not belong to this customer")


def ensure_restaurant_owns(order, restaurant_id) -> None:
    if str(order.restaurant_id) != str(restaurant_id):
        raise OwnershipError("Order does not belong to this restaurant")


def authorize(actor: Actor, action: Action, order, actor_id) -> None:
    """Capability first, then ownership."""
    ensure_capability(actor, action)
    if actor == Actor.CUSTOMER:
        ensure_customer_owns(order, actor_id)
    elif actor == Actor.RESTAURANT:
        ensure_restaurant_owns(order, actor_id)
