"""Order summary: lightweight listing/history view for customers and restaurants."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
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
from ordering.order.lifecycle import OrderStatus, PaymentStatus
from ordering.order.order import Order


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    status = String(required=True)
    payment_status = String(required=True)
    item_count = Integer(default=0)
    total = Float()
    currency = String(default="USD")
    placed_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        lines = json.loads(event.lines) if isinstance(event.lines, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                restaurant_id=event.restaurant_id,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                item_count=len(lines),
                total=event.total,
                currency=event.currency or "USD",
                placed_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    def _update(self, order_id, updated_at, status=None, payment_status=None):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        if status:
            summary.status = status
        if payment_status:
            summary.payment_status = payment_status
        summary.updated_at = updated_at
        repo.add(summary)

    @on(OrderAccepted)
    def on_order_accepted(self, event):
        self._update(event.order_id, event.accepted_at, status=OrderStatus.ACCEPTED.value)

    @on(OrderDeclined)
    def on_order_declined(self, event):
        self._update(event.order_id, event.declined_at, status=OrderStatus.REJECTED.value)

    @on(OrderStatusAdvanced)
    def on_order_status_advanced(self, event):
        self._update(event.order_id, event.advanced_at, status=event.new_status)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update(
            event.order_id,
            event.delivered_at,
            status=OrderStatus.DELIVERED.value,
            payment_status=PaymentStatus.PAID.value if event.cash_collected else None,
        )

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.cancelled_at, status=OrderStatus.CANCELLED.value)

    @on(PaymentCaptured)
    def on_payment_captured(self, event):
        self._update(event.order_id, event.paid_at, payment_status=PaymentStatus.PAID.value)

    @on(PaymentStatusCorrected)
    def on_payment_status_corrected(self, event):
        self._update(event.order_id, event.corrected_at, payment_status=event.new_status)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        self._update(event.order_id, event.refunded_at, payment_status=PaymentStatus.REFUNDED.value)
