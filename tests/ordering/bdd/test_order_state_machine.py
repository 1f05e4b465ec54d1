"""BDD tests for the order state machine."""

from ordering.order.acceptance import AcceptOrder, DeclineOrder
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_state_machine.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the restaurant accepts the order", target_fixture="order")
def _(order, accept_order):
    return order.process(accept_order)


@when(parsers.cfparse('restaurant "{restaurant}" accepts the order'), target_fixture="order")
def _(order, order_id, restaurant):
    return order.process(AcceptOrder(order_id=order_id, restaurant_id=restaurant))


@when(
    parsers.cfparse('the restaurant declines the order with reason "{reason}"'),
    target_fixture="order",
)
def _(order, order_id, restaurant_id, reason):
    return order.process(DeclineOrder(order_id=order_id, restaurant_id=restaurant_id, reason=reason))
