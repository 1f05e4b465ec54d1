"""Domain events for the Order aggregate.

The Order is event sourced: these events are persisted to the event store
and replayed through the aggregate's @apply handlers to rebuild its state.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    delivery_address_id = Identifier(required=True)
    payment_method = String(required=True)
    lines = Text(required=True)  # JSON: list of frozen order line dicts
    subtotal = Float(required=True)
    tax = Float()
    delivery_fee = Float()
    discount = Float()
    total = Float(required=True)
    currency = String(default="USD")
    promo_code_id = Identifier()
    special_instructions = Text()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderAccepted:
    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDeclined:
    """The restaurant rejected a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    reason = String(required=True)
    declined_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusAdvanced:
    """The restaurant moved the order forward through preparation and dispatch."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    estimated_delivery_time = DateTime()
    advanced_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    delivered_at = DateTime(required=True)
    cash_collected = Boolean(default=False)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The customer cancelled the order before the restaurant acted on it."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentCaptured:
    """The payment provider confirmed a card or online payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentStatusCorrected:
    """The restaurant changed the payment status of a cash on delivery order."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    reason = String()
    corrected_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    refund_reference = String()
    refunded_by = String()
    refunded_at = DateTime(required=True)
