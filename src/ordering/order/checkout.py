"""Checkout: turns a customer's cart into a priced order.

Everything from reading the cart to clearing it runs inside one command
handler, so the order, its number reservation and the emptied cart commit
together or not at all. The new-order notification goes out after commit.

A client may send an idempotency key. A retried checkout with the same key
returns the order the first attempt created and leaves the cart alone.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from notifications.dispatch import notify_new_order
from ordering.address.address import DeliveryAddress, addresses_for, owned_address
from ordering.cart.aggregation import CartAggregator, PricedLine
from ordering.cart.cart import Cart, ClearReason, find_cart
from ordering.config import get_settings
from ordering.domain import ordering
from ordering.effects import Outbox
from ordering.errors import EmptyCartError, OwnershipError
from ordering.money import round_money
from ordering.order.lifecycle import PaymentMethod
from ordering.order.numbering import OrderNumber, reserve_order_number
from ordering.order.order import Order, OrderPricing, load_order
from ordering.promo.engine import PromoEngine

logger = structlog.get_logger(__name__)


@ordering.aggregate
class CheckoutIntent:
    key = String(identifier=True, max_length=255)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    created_at = DateTime()


@dataclass(frozen=True)
class PlacementOutcome:
    order: Order
    created: bool


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    delivery_address_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    promo_code_id = Identifier()
    tax = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    special_instructions = Text()
    idempotency_key = String(max_length=255)


def _previous_placement(key, customer_id) -> Order | None:
    if not key:
        return None
    try:
        intent = current_domain.repository_for(CheckoutIntent).get(key)
    except ObjectNotFoundError:
        return None
    if str(intent.customer_id) != str(customer_id):
        raise OwnershipError("Idempotency key belongs to another checkout")
    return load_order(intent.order_id)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        previous = _previous_placement(command.idempotency_key, command.customer_id)
        if previous is not None:
            logger.info("checkout_replayed", order_id=str(previous.id), idempotency_key=command.idempotency_key)
            return PlacementOutcome(order=previous, created=False)

        cart = find_cart(command.customer_id)
        if cart is None or not cart.lines:
            raise EmptyCartError()

        owned_address(command.delivery_address_id, command.customer_id)
        priced = CartAggregator().price(cart)

        discount = Decimal("0")
        promo_code_id = None
        if command.promo_code_id:
            application = PromoEngine().apply_by_id(command.promo_code_id, restaurant_id=priced.restaurant_id)
            discount = application.discount_for(priced.subtotal)
            promo_code_id = application.promo_code_id

        pricing = OrderPricing.compute(
            subtotal=priced.subtotal,
            tax=command.tax or 0,
            delivery_fee=command.delivery_fee or 0,
            discount=discount,
            currency=get_settings().currency,
        )

        now = datetime.now(UTC)
        reservation = reserve_order_number(now)

        order = Order.place(
            order_number=reservation.number,
            customer_id=command.customer_id,
            restaurant_id=priced.restaurant_id,
            delivery_address_id=command.delivery_address_id,
            payment_method=command.payment_method,
            lines_data=[line.to_order_line() for line in priced.lines],
            pricing=pricing,
            promo_code_id=promo_code_id,
            special_instructions=command.special_instructions,
        )
        current_domain.repository_for(Order).add(order)

        reservation.order_id = str(order.id)
        current_domain.repository_for(OrderNumber).add(reservation)

        cart.clear(ClearReason.CHECKOUT)
        current_domain.repository_for(Cart).add(cart)

        if command.idempotency_key:
            current_domain.repository_for(CheckoutIntent).add(
                CheckoutIntent(
                    key=command.idempotency_key,
                    customer_id=command.customer_id,
                    order_id=str(order.id),
                    created_at=now,
                )
            )

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            restaurant_id=priced.restaurant_id,
            total=str(round_money(pricing.total)),
            promo_applied=promo_code_id is not None,
        )
        return PlacementOutcome(order=order, created=True)


def place_order(
    customer_id,
    delivery_address_id,
    payment_method,
    promo_code_id=None,
    tax=0.0,
    delivery_fee=0.0,
    special_instructions=None,
    idempotency_key=None,
) -> Order:
    outcome = current_domain.process(
        PlaceOrder(
            customer_id=str(customer_id),
            delivery_address_id=str(delivery_address_id),
            payment_method=payment_method.value if isinstance(payment_method, PaymentMethod) else payment_method,
            promo_code_id=str(promo_code_id) if promo_code_id else None,
            tax=float(tax),
            delivery_fee=float(delivery_fee),
            special_instructions=special_instructions,
            idempotency_key=idempotency_key,
        ),
        asynchronous=False,
    )

    if outcome.created:
        outbox = Outbox()
        outbox.add("notify_new_order", lambda: notify_new_order(outcome.order), order_id=str(outcome.order.id))
        outbox.flush()
    return outcome.order


# ---------------------------------------------------------------------------
# Read-only preview
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RestaurantGroup:
    restaurant_id: str
    lines: list[PricedLine]
    subtotal: Decimal


@dataclass(frozen=True)
class CheckoutSummary:
    customer_id: str
    groups: list[RestaurantGroup] = field(default_factory=list)
    addresses: list[DeliveryAddress] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    item_count: int = 0

    @property
    def can_checkout(self) -> bool:
        return len(self.groups) == 1


def checkout_summary(customer_id) -> CheckoutSummary:
    """Priced cart lines grouped by restaurant plus the customer's addresses."""
    addresses = addresses_for(customer_id)
    cart = find_cart(customer_id)
    if cart is None or not cart.lines:
        return CheckoutSummary(customer_id=str(customer_id), addresses=addresses)

    grouped = CartAggregator().group_by_restaurant(cart)
    groups = [
        RestaurantGroup(
            restaurant_id=restaurant_id,
            lines=lines,
            subtotal=round_money(sum((line.total_price for line in lines), Decimal("0"))),
        )
        for restaurant_id, lines in grouped.items()
    ]
    return CheckoutSummary(
        customer_id=str(customer_id),
        groups=groups,
        addresses=addresses,
        subtotal=round_money(sum((group.subtotal for group in groups), Decimal("0"))),
        item_count=cart.item_count,
    )
