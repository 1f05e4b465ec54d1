"""BDD tests for order payment capture and cash on delivery corrections."""

from ordering.order.payment import CorrectPaymentStatus
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_payment.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the payment is recorded", target_fixture="order")
def _(order, record_payment):
    return order.process(record_payment)


@when(
    parsers.cfparse('the restaurant sets the payment status to "{status}"'),
    target_fixture="order",
)
def _(order, order_id, restaurant_id, status):
    return order.process(CorrectPaymentStatus(order_id=order_id, restaurant_id=restaurant_id, payment_status=status))
