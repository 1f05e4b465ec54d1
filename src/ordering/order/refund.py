"""Order refunds: command, handler and service entry point.

Cash on delivery orders are refunded by hand: the restaurant or an admin
marks the payment refunded and no provider is involved. Every other payment
method is refunded through the payment gateway against the captured payment
reference.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from notifications.dispatch import notify_refund
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.errors import (
    OwnershipError,
    PaymentCollaboratorError,
    StateConflictError,
    ValidationError,
)
from ordering.money import round_money, to_decimal
from ordering.order.capabilities import Actor, ensure_customer_owns, ensure_restaurant_owns
from ordering.order.lifecycle import PaymentMethod, PaymentStatus
from ordering.order.order import Order, load_order, process_order_command
from payments.gateway import get_gateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RefundOutcome:
    order_id: str
    amount: Decimal
    refund_reference: str | None
    cash_on_delivery: bool


@ordering.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    amount = Float()  # defaults to the full order total
    actor_id = Identifier()
    actor_role = String(choices=Actor)


def _authorize_refund(order: Order, actor: Actor | None, actor_id) -> None:
    if actor == Actor.ADMIN:
        return
    if actor == Actor.RESTAURANT:
        ensure_restaurant_owns(order, actor_id)
    elif actor == Actor.CUSTOMER:
        ensure_customer_owns(order, actor_id)
    else:
        raise OwnershipError("Not authorized to refund this order")


def _refund_amount(order: Order, requested) -> Decimal:
    total = round_money(order.pricing.total)
    amount = total if requested is None else round_money(to_decimal(requested))
    if amount <= 0:
        raise ValidationError("Refund amount must be positive", {"amount": [str(amount)]})
    if amount > total:
        raise ValidationError("Refund amount cannot exceed order total", {"amount": [str(amount)]})
    return amount


@ordering.command_handler(part_of=Order)
class RefundOrderHandler:
    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command.order_id)
        actor = Actor(command.actor_role) if command.actor_role else None

        if order.current_payment_status != PaymentStatus.PAID:
            raise StateConflictError(
                "Only paid orders can be refunded",
                {"payment_status": [order.payment_status]},
            )

        if order.method == PaymentMethod.CASH:
            if actor not in (Actor.RESTAURANT, Actor.ADMIN):
                raise OwnershipError("Only the restaurant or an admin can refund cash on delivery orders")
            _authorize_refund(order, actor, command.actor_id)
            amount = _refund_amount(order, command.amount)
            order.record_refund(amount, refunded_by=actor.value)
            repo.add(order)
            logger.info("cash_order_refunded", order_id=str(order.id), amount=str(amount))
            return RefundOutcome(str(order.id), amount, None, cash_on_delivery=True)

        if not order.payment_reference:
            raise StateConflictError("No provider payment found for this order")
        _authorize_refund(order, actor, command.actor_id)
        amount = _refund_amount(order, command.amount)

        try:
            result = get_gateway().create_refund(
                payment_reference=order.payment_reference,
                amount=float(amount),
                reason="requested_by_customer",
                metadata={"order_id": str(order.id), "order_number": order.order_number},
            )
        except Exception as exc:
            raise PaymentCollaboratorError("Payment provider is unavailable", {"refund": [str(exc)]}) from exc
        if not result.success:
            raise PaymentCollaboratorError("Refund was not accepted", {"refund": [result.failure_reason or "unknown"]})

        order.record_refund(
            amount,
            refund_reference=result.gateway_refund_id,
            refunded_by=actor.value if actor else None,
        )
        repo.add(order)
        logger.info(
            "order_refunded",
            order_id=str(order.id),
            amount=str(amount),
            refund_reference=result.gateway_refund_id,
        )
        return RefundOutcome(str(order.id), amount, result.gateway_refund_id, cash_on_delivery=False)


def refund_order(order_id, amount=None, actor_id=None, actor_role=None) -> RefundOutcome:
    """Refund an order and notify the customer once the refund is recorded."""
    outcome = process_order_command(
        RefundOrder(
            order_id=str(order_id),
            amount=amount,
            actor_id=str(actor_id) if actor_id else None,
            actor_role=actor_role.value if isinstance(actor_role, Actor) else actor_role,
        )
    )

    outbox = Outbox()
    outbox.add(
        "notify_refund",
        lambda: notify_refund(load_order(order_id), outcome.amount),
        order_id=str(order_id),
    )
    outbox.flush()
    return outcome
