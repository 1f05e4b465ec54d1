"""Order status machine.

States:
    PENDING → ACCEPTED → PREPARING → READY → OUT_FOR_DELIVERY → DELIVERED
    PENDING → CANCELLED   (customer, before the restaurant acts)
    PENDING → REJECTED    (restaurant declines)

DELIVERED, CANCELLED and REJECTED are terminal. Fulfilment only moves
forward; skipping steps is allowed, going back is not.

Nothing here knows who is asking. Capability and ownership checks live in
``ordering.order.capabilities`` and run before these functions.
"""

from contextlib import suppress
from enum import Enum

from ordering.config import get_settings
from ordering.errors import InvalidTransitionError, ValidationError


class OrderStatus(Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    PREPARING = "PREPARING"
    READY = "READY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"
    WALLET = "WALLET"
    ONLINE = "ONLINE"


class Action(Enum):
    CANCEL = "cancel"
    ACCEPT = "accept"
    DECLINE = "decline"
    ADVANCE = "advance"
    CORRECT_PAYMENT = "correct payment status"


TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REJECTED})

FULFILMENT_SEQUENCE = (
    OrderStatus.ACCEPTED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

_SOURCE_STATES = {
    Action.CANCEL: frozenset({OrderStatus.PENDING}),
    Action.ACCEPT: frozenset({OrderStatus.PENDING}),
    Action.DECLINE: frozenset({OrderStatus.PENDING}),
    Action.ADVANCE: frozenset(FULFILMENT_SEQUENCE[:-1]),
    Action.CORRECT_PAYMENT: frozenset(OrderStatus) - TERMINAL_STATES,
}

_FIXED_TARGETS = {
    Action.CANCEL: OrderStatus.CANCELLED,
    Action.ACCEPT: OrderStatus.ACCEPTED,
    Action.DECLINE: OrderStatus.REJECTED,
}

# Cash-on-delivery payment corrections
_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED, PaymentStatus.PENDING}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PAID, PaymentStatus.PENDING}),
    PaymentStatus.REFUNDED: frozenset(),
}


def check_transition(action: Action, current: OrderStatus, requested: OrderStatus | None = None) -> OrderStatus:
    """Return the status ``action`` leads to from ``current``.

    ``requested`` is the target for ADVANCE and is ignored otherwise.
    CORRECT_PAYMENT leaves the status unchanged.

    Raises:
        InvalidTransitionError: naming the precondition that failed.
    """
    if current in TERMINAL_STATES:
        raise InvalidTransitionError(
            f"Order is already {current.value}; no further changes are allowed",
            {"status": [current.value]},
        )

    if action == Action.CANCEL and current != OrderStatus.PENDING:
        raise InvalidTransitionError(
            "Cannot cancel order after it has been accepted by the restaurant",
            {"status": [current.value]},
        )

    if current not in _SOURCE_STATES[action]:
        raise InvalidTransitionError(
            f"Cannot {action.value} an order that is {current.value}",
            {"status": [current.value]},
        )

    if action == Action.ADVANCE:
        return _check_forward_move(current, requested)
    if action == Action.CORRECT_PAYMENT:
        return current
    return _FIXED_TARGETS[action]


def _check_forward_move(current: OrderStatus, requested: OrderStatus | None) -> OrderStatus:
    if requested not in FULFILMENT_SEQUENCE[1:]:
        raise InvalidTransitionError(
            f"Cannot move an order to {requested.value if requested else 'an unknown status'}",
            {"status": [f"Allowed: {', '.join(s.value for s in FULFILMENT_SEQUENCE[1:])}"]},
        )
    if FULFILMENT_SEQUENCE.index(requested) <= FULFILMENT_SEQUENCE.index(current):
        raise InvalidTransitionError(
            f"Invalid status transition from {current.value} to {requested.value}",
            {"status": ["Orders can only move forward"]},
        )
    return requested


def check_payment_correction(
    current: OrderStatus,
    payment_method: PaymentMethod,
    payment_status: PaymentStatus,
    requested: PaymentStatus,
) -> PaymentStatus:
    check_transition(Action.CORRECT_PAYMENT, current)

    if payment_method != PaymentMethod.CASH:
        raise InvalidTransitionError(
            "Payment status can only be changed manually for cash on delivery orders",
            {"payment_method": [payment_method.value]},
        )
    if requested not in _PAYMENT_TRANSITIONS[payment_status]:
        raise InvalidTransitionError(
            f"Cannot change payment status from {payment_status.value} to {requested.value}",
            {"payment_status": [payment_status.value]},
        )
    return requested


def reachable_from(current: OrderStatus) -> set[OrderStatus]:
    """Every status one transition away from ``current``."""
    reachable = set()
    for action in (Action.CANCEL, Action.ACCEPT, Action.DECLINE):
        with suppress(InvalidTransitionError):
            reachable.add(check_transition(action, current))
    for target in FULFILMENT_SEQUENCE[1:]:
        with suppress(InvalidTransitionError):
            reachable.add(check_transition(Action.ADVANCE, current, target))
    return reachable


def validate_reason(reason: str | None, field: str = "reason") -> str:
    """Cancellation and decline reasons must be between the configured lengths."""
    settings = get_settings()
    cleaned = (reason or "").strip()
    if len(cleaned) < settings.reason_min_length:
        raise ValidationError(
            f"Reason must be at least {settings.reason_min_length} characters",
            {field: [f"Minimum length is {settings.reason_min_length}"]},
        )
    if len(cleaned) > settings.reason_max_length:
        raise ValidationError(
            f"Reason must not exceed {settings.reason_max_length} characters",
            {field: [f"Maximum length is {settings.reason_max_length}"]},
        )
    return cleaned
