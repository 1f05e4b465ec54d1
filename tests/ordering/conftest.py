from datetime import UTC, datetime, timedelta

import pytest
from notifications.channel import set_push_channel
from notifications.channel.fake_push import FakePushAdapter
from ordering.address.address import DeliveryAddress
from ordering.catalog.menu import AddOnOption, MenuItem, ProductAddOn, ProductVariation, VariationOption
from ordering.promo.promo_code import PromoCode
from payments.gateway import set_gateway
from payments.gateway.fake_adapter import FakeGateway
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def push():
    fake = FakePushAdapter()
    set_push_channel(fake)
    return fake


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def restaurant_id():
    return "rest-001"


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@pytest.fixture()
def menu_item(restaurant_id):
    item = MenuItem(restaurant_id=restaurant_id, name="Margherita", price=12.50)
    current_domain.repository_for(MenuItem).add(item)
    return item


@pytest.fixture()
def other_menu_item():
    item = MenuItem(restaurant_id="rest-002", name="Pad Thai", price=9.00)
    current_domain.repository_for(MenuItem).add(item)
    return item


@pytest.fixture()
def size_large(menu_item):
    """A "Size" variation with a Large option costing 2.00 extra."""
    variation = ProductVariation(menu_item_id=menu_item.id, name="Size", is_required=True)
    current_domain.repository_for(ProductVariation).add(variation)
    option = VariationOption(variation_id=variation.id, name="Large", price_modifier=2.00)
    current_domain.repository_for(VariationOption).add(option)
    return variation, option


@pytest.fixture()
def toppings(menu_item):
    """A "Toppings" add-on group with Cheese (1.00) and Olives (0.75)."""
    add_on = ProductAddOn(menu_item_id=menu_item.id, name="Toppings", max_selections=3)
    current_domain.repository_for(ProductAddOn).add(add_on)
    cheese = AddOnOption(add_on_id=add_on.id, name="Cheese", price=1.00)
    olives = AddOnOption(add_on_id=add_on.id, name="Olives", price=0.75)
    current_domain.repository_for(AddOnOption).add(cheese)
    current_domain.repository_for(AddOnOption).add(olives)
    return add_on, cheese, olives


# ---------------------------------------------------------------------------
# Customer data
# ---------------------------------------------------------------------------
@pytest.fixture()
def address(customer_id):
    address = DeliveryAddress(
        customer_id=customer_id,
        label="Home",
        address_line="12 Market Street",
        city="Springfield",
        postal_code="62701",
        is_default=True,
    )
    current_domain.repository_for(DeliveryAddress).add(address)
    return address


@pytest.fixture()
def promo_10():
    now = datetime.now(UTC)
    promo = PromoCode.create(
        code="save10",
        discount_percentage=10,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=1),
        description="Ten percent off",
    )
    current_domain.repository_for(PromoCode).add(promo)
    return promo
