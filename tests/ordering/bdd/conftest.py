"""Shared BDD fixtures and step definitions for the Ordering domain."""

import json
from datetime import UTC, datetime

import pytest
from ordering.errors import InvalidTransitionError, OwnershipError, ValidationError
from ordering.order.acceptance import AcceptOrder
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
from ordering.order.order import Order
from ordering.order.payment import RecordPayment
from protean.testing import given as given_
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderAccepted": OrderAccepted,
    "OrderDeclined": OrderDeclined,
    "OrderStatusAdvanced": OrderStatusAdvanced,
    "OrderDelivered": OrderDelivered,
    "OrderCancelled": OrderCancelled,
    "PaymentCaptured": PaymentCaptured,
    "PaymentStatusCorrected": PaymentStatusCorrected,
    "OrderRefunded": OrderRefunded,
}

_REJECTIONS = {
    "an invalid transition": InvalidTransitionError,
    "a validation error": ValidationError,
    "an ownership error": OwnershipError,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_id():
    return "ord-001"


# ---------------------------------------------------------------------------
# Event fixtures (past tense: what happened)
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_placed(order_id, customer_id, restaurant_id):
    return OrderPlaced(
        order_id=order_id,
        order_number="#0001ABCD",
        customer_id=customer_id,
        restaurant_id=restaurant_id,
        delivery_address_id="addr-001",
        payment_method="CARD",
        lines=json.dumps(
            [
                {
                    "id": "line-1",
                    "menu_item_id": "item-001",
                    "item_name": "Margherita",
                    "unit_price": 12.5,
                    "quantity": 2,
                    "total_price": 25.0,
                    "special_notes": None,
                    "selections": json.dumps({"variations": [], "add_ons": []}),
                }
            ]
        ),
        subtotal=25.0,
        tax=1.5,
        delivery_fee=2.5,
        discount=0.0,
        total=29.0,
        currency="USD",
        placed_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_accepted(order_id, restaurant_id):
    return OrderAccepted(order_id=order_id, restaurant_id=restaurant_id, accepted_at=datetime.now(UTC))


@pytest.fixture()
def order_declined(order_id, restaurant_id):
    return OrderDeclined(
        order_id=order_id,
        restaurant_id=restaurant_id,
        reason="Kitchen closed",
        declined_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_cancelled(order_id, customer_id):
    return OrderCancelled(
        order_id=order_id,
        customer_id=customer_id,
        reason="Changed my mind",
        cancelled_at=datetime.now(UTC),
    )


@pytest.fixture()
def payment_captured(order_id):
    return PaymentCaptured(
        order_id=order_id,
        payment_reference="pi_123",
        amount=29.0,
        paid_at=datetime.now(UTC),
    )


def _advanced(order_id, previous_status, new_status):
    return OrderStatusAdvanced(
        order_id=order_id,
        previous_status=previous_status,
        new_status=new_status,
        advanced_at=datetime.now(UTC),
    )


# ---------------------------------------------------------------------------
# Command fixtures (imperative: what to do)
# ---------------------------------------------------------------------------
@pytest.fixture()
def accept_order(order_id, restaurant_id):
    return AcceptOrder(order_id=order_id, restaurant_id=restaurant_id)


@pytest.fixture()
def record_payment(order_id):
    return RecordPayment(order_id=order_id, payment_reference="pi_123")


# ---------------------------------------------------------------------------
# Given steps: Order (event sourcing via protean.testing)
# ---------------------------------------------------------------------------
@given("a card order was placed", target_fixture="order")
def _(order_placed):
    return given_(Order, order_placed)


@given("a cash order was placed", target_fixture="order")
def _(order_id, customer_id, restaurant_id):
    placed = OrderPlaced(
        order_id=order_id,
        order_number="#0001CASH",
        customer_id=customer_id,
        restaurant_id=restaurant_id,
        delivery_address_id="addr-001",
        payment_method="CASH",
        lines=json.dumps(
            [
                {
                    "id": "line-1",
                    "menu_item_id": "item-001",
                    "item_name": "Pad Thai",
                    "unit_price": 9.0,
                    "quantity": 1,
                    "total_price": 9.0,
                }
            ]
        ),
        subtotal=9.0,
        total=9.0,
        placed_at=datetime.now(UTC),
    )
    return given_(Order, placed)


@given("the order was accepted", target_fixture="order")
def _(order, order_accepted):
    return order.after(order_accepted)


@given("the order was declined", target_fixture="order")
def _(order, order_declined):
    return order.after(order_declined)


@given("the order was cancelled", target_fixture="order")
def _(order, order_cancelled):
    return order.after(order_cancelled)


@given("the order was paid", target_fixture="order")
def _(order, payment_captured):
    return order.after(payment_captured)


@given(parsers.cfparse('the order moved from "{previous}" to "{new}"'), target_fixture="order")
def _(order, order_id, previous, new):
    return order.after(_advanced(order_id, previous, new))


@given("the order was delivered", target_fixture="order")
def _(order, order_id):
    return order.after(
        OrderDelivered(order_id=order_id, previous_status="OUT_FOR_DELIVERY", delivered_at=datetime.now(UTC))
    )


# ---------------------------------------------------------------------------
# Then steps: Order (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert order.status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(order, status):
    assert order.payment_status == status


@then(parsers.cfparse("the order action is rejected as {kind}"))
def _(order, kind):
    assert order.rejected
    assert isinstance(order.rejection, _REJECTIONS[kind])


@then(parsers.cfparse("an {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


@then(parsers.cfparse("a {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events

