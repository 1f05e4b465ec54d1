"""Order aggregate (Event Sourced): a priced, persisted checkout of one restaurant's items.

All state changes are captured as domain events and the current state is
rebuilt by replaying them through the @apply handlers. Live methods check
their preconditions and raise an event; only the @apply handlers mutate.

Pricing and lines are frozen when the order is placed and never recomputed:
later catalogue price changes do not touch historical orders.

Status machine: see ``ordering.order.lifecycle``.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from protean import apply, invariant
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ConcurrencyConflictError, InvalidTransitionError, OrderNotFoundError
from ordering.money import round_money, to_decimal
from ordering.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDeclined,
    OrderDelivered,
    OrderPlaced,
    OrderRefunded,
    OrderStatusAdvanced,
    PaymentCaptured,
    PaymentStatusCorrected,
)
from ordering.order.lifecycle import (
    Action,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    check_payment_correction,
    check_transition,
    validate_reason,
)
from ordering.selection import SelectionSet

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class OrderPricing:
    """Money owed for an order, fixed at checkout.

    ``total == subtotal + tax + delivery_fee - discount`` to the cent, and the
    discount never exceeds the subtotal.
    """

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_add_up(self):
        expected = (
            round_money(self.subtotal)
            + round_money(self.tax)
            + round_money(self.delivery_fee)
            - round_money(self.discount)
        )
        if round_money(self.total) != expected:
            raise ValidationError({"total": [f"Total {self.total} does not equal {expected}"]})

    @invariant.post
    def discount_must_not_exceed_subtotal(self):
        if round_money(self.discount) > round_money(self.subtotal):
            raise ValidationError({"discount": ["Discount cannot exceed subtotal"]})

    @classmethod
    def compute(cls, subtotal, tax=0, delivery_fee=0, discount=0, currency="USD") -> "OrderPricing":
        subtotal, tax, delivery_fee, discount = (
            round_money(subtotal),
            round_money(tax),
            round_money(delivery_fee),
            round_money(discount),
        )
        total = subtotal + tax + delivery_fee - discount
        return cls(
            subtotal=float(subtotal),
            tax=float(tax),
            delivery_fee=float(delivery_fee),
            discount=float(discount),
            total=float(total),
            currency=currency,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """Frozen copy of a cart line: the unit price already includes its options."""

    menu_item_id = Identifier(required=True)
    item_name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    total_price = Float(required=True, min_value=0.0)
    special_notes = Text()
    selections = Text()

    @property
    def selection(self) -> SelectionSet:
        return SelectionSet.from_json(self.selections)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@ordering.aggregate(is_event_sourced=True)
class Order:
    order_number = String(max_length=20)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    delivery_address_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_reference = String(max_length=255)
    lines = HasMany(OrderLine)
    pricing = ValueObject(OrderPricing)
    promo_code_id = Identifier()
    special_instructions = Text()
    cancellation_reason = String(max_length=500)
    rejection_reason = String(max_length=500)
    refunded_amount = Float(default=0.0)
    estimated_delivery_time = DateTime()
    actual_delivery_time = DateTime()
    paid_at = DateTime()
    placed_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        restaurant_id,
        delivery_address_id,
        payment_method,
        lines_data,
        pricing: OrderPricing,
        promo_code_id=None,
        special_instructions=None,
    ):
        """Create a new order from a priced cart.

        Args:
            lines_data: List of dicts with menu_item_id, item_name, unit_price,
                        quantity, total_price, special_notes, selections.
            pricing: Totals computed at checkout.
        """
        # Pre-generate line IDs for deterministic replay
        lines_with_ids = [{**line, "id": str(uuid4())} for line in lines_data]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                restaurant_id=str(restaurant_id),
                delivery_address_id=str(delivery_address_id),
                payment_method=PaymentMethod(payment_method).value,
                lines=json.dumps(lines_with_ids),
                subtotal=pricing.subtotal,
                tax=pricing.tax,
                delivery_fee=pricing.delivery_fee,
                discount=pricing.discount,
                total=pricing.total,
                currency=pricing.currency,
                promo_code_id=str(promo_code_id) if promo_code_id else None,
                special_instructions=special_instructions,
                placed_at=datetime.now(UTC),
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def current_payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.payment_status)

    @property
    def method(self) -> PaymentMethod:
        return PaymentMethod(self.payment_method)

    def qualifies_for_auto_refund(self) -> bool:
        """Pending card order already paid through the provider."""
        return (
            self.current_status == OrderStatus.PENDING
            and self.method == PaymentMethod.CARD
            and self.current_payment_status == PaymentStatus.PAID
            and bool(self.payment_reference)
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def accept(self):
        check_transition(Action.ACCEPT, self.current_status)
        self.raise_(
            OrderAccepted(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                accepted_at=datetime.now(UTC),
            )
        )

    def decline(self, reason):
        reason = validate_reason(reason)
        check_transition(Action.DECLINE, self.current_status)
        self.raise_(
            OrderDeclined(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                reason=reason,
                declined_at=datetime.now(UTC),
            )
        )

    def advance(self, target_status, estimated_delivery_time=None):
        """Move forward through PREPARING, READY, OUT_FOR_DELIVERY and DELIVERED."""
        target = check_transition(Action.ADVANCE, self.current_status, OrderStatus(target_status))
        now = datetime.now(UTC)

        if target == OrderStatus.DELIVERED:
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    previous_status=self.status,
                    delivered_at=now,
                    cash_collected=(
                        self.method == PaymentMethod.CASH and self.current_payment_status == PaymentStatus.PENDING
                    ),
                )
            )
            return

        self.raise_(
            OrderStatusAdvanced(
                order_id=str(self.id),
                previous_status=self.status,
                new_status=target.value,
                estimated_delivery_time=estimated_delivery_time,
                advanced_at=now,
            )
        )

    def cancel(self, reason):
        reason = validate_reason(reason)
        check_transition(Action.CANCEL, self.current_status)
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                reason=reason,
                cancelled_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, payment_reference):
        """The provider captured payment for a non-cash order."""
        if self.method == PaymentMethod.CASH:
            raise InvalidTransitionError(
                "Cash orders are paid on delivery",
                {"payment_method": [self.payment_method]},
            )
        if self.current_status in (OrderStatus.CANCELLED, OrderStatus.REJECTED):
            raise InvalidTransitionError(
                f"Cannot record payment for an order that is {self.status}",
                {"status": [self.status]},
            )
        if self.current_payment_status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            raise InvalidTransitionError(
                f"Payment is already {self.payment_status}",
                {"payment_status": [self.payment_status]},
            )

        self.raise_(
            PaymentCaptured(
                order_id=str(self.id),
                payment_reference=payment_reference,
                amount=self.pricing.total,
                paid_at=datetime.now(UTC),
            )
        )

    def correct_payment_status(self, new_status, reason=None):
        target = check_payment_correction(
            self.current_status,
            self.method,
            self.current_payment_status,
            PaymentStatus(new_status),
        )
        self.raise_(
            PaymentStatusCorrected(
                order_id=str(self.id),
                previous_status=self.payment_status,
                new_status=target.value,
                reason=reason,
                corrected_at=datetime.now(UTC),
            )
        )

    def record_refund(self, amount, refund_reference=None, refunded_by=None):
        if self.current_payment_status != PaymentStatus.PAID:
            raise InvalidTransitionError(
                "Only paid orders can be refunded",
                {"payment_status": [self.payment_status]},
            )
        if to_decimal(amount) > round_money(self.pricing.total):
            raise ValidationError({"amount": ["Refund amount cannot exceed order total"]})

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                amount=float(round_money(amount)),
                refund_reference=refund_reference,
                refunded_by=refunded_by,
                refunded_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.order_number = event.order_number
        self.customer_id = event.customer_id
        self.restaurant_id = event.restaurant_id
        self.delivery_address_id = event.delivery_address_id
        self.payment_method = event.payment_method
        self.payment_status = PaymentStatus.PENDING.value
        self.status = OrderStatus.PENDING.value
        self.promo_code_id = event.promo_code_id
        self.special_instructions = event.special_instructions
        self.placed_at = event.placed_at
        self.updated_at = event.placed_at

        lines_data = json.loads(event.lines) if isinstance(event.lines, str) else []
        self.lines = [OrderLine(**line_data) for line_data in lines_data]

        self.pricing = OrderPricing(
            subtotal=event.subtotal,
            tax=event.tax or 0.0,
            delivery_fee=event.delivery_fee or 0.0,
            discount=event.discount or 0.0,
            total=event.total,
            currency=event.currency or "USD",
        )

    @apply
    def _on_order_accepted(self, event: OrderAccepted):
        self.status = OrderStatus.ACCEPTED.value
        self.updated_at = event.accepted_at

    @apply
    def _on_order_declined(self, event: OrderDeclined):
        self.status = OrderStatus.REJECTED.value
        self.rejection_reason = event.reason
        self.updated_at = event.declined_at

    @apply
    def _on_order_status_advanced(self, event: OrderStatusAdvanced):
        self.status = event.new_status
        if event.estimated_delivery_time:
            self.estimated_delivery_time = event.estimated_delivery_time
        self.updated_at = event.advanced_at

    @apply
    def _on_order_delivered(self, event: OrderDelivered):
        self.status = OrderStatus.DELIVERED.value
        self.actual_delivery_time = event.delivered_at
        if event.cash_collected:
            self.payment_status = PaymentStatus.PAID.value
            self.paid_at = event.delivered_at
        self.updated_at = event.delivered_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.updated_at = event.cancelled_at

    @apply
    def _on_payment_captured(self, event: PaymentCaptured):
        self.payment_status = PaymentStatus.PAID.value
        self.payment_reference = event.payment_reference
        self.paid_at = event.paid_at
        self.updated_at = event.paid_at

    @apply
    def _on_payment_status_corrected(self, event: PaymentStatusCorrected):
        self.payment_status = event.new_status
        self.paid_at = event.corrected_at if event.new_status == PaymentStatus.PAID.value else None
        self.updated_at = event.corrected_at

    @apply
    def _on_order_refunded(self, event: OrderRefunded):
        self.payment_status = PaymentStatus.REFUNDED.value
        self.refunded_amount = event.amount
        self.updated_at = event.refunded_at


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFoundError(order_id)


def process_order_command(command):
    """Run an Order command synchronously.

    Two writers that loaded the same order version race on the event store;
    the loser gets ConcurrencyConflictError and should reload.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        logger.info("order_version_conflict", command=command.__class__.__name__, error=str(exc))
        raise ConcurrencyConflictError(
            "The order was changed by another request; reload and try again",
            {"order_id": [str(getattr(command, "order_id", ""))]},
        ) from exc
