"""Cart aggregation: prices a customer's cart against the current catalogue.

Checkout and the checkout summary both start here. The aggregator loads the
cart lines and their menu items, resolves every line's unit price from one
batch of option lookups, and sums the subtotal. Rounding to cents happens
once, on the subtotal.
"""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

import structlog

from ordering.cart.cart import Cart, find_cart
from ordering.catalog.menu import MenuItem
from ordering.catalog.pricing import PriceResolver, fetch_by_ids
from ordering.errors import EmptyCartError, MenuItemNotFoundError, MixedRestaurantError
from ordering.money import round_money
from ordering.selection import SelectionSet

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PricedLine:
    line_id: str
    menu_item_id: str
    restaurant_id: str
    item_name: str
    unit_price: Decimal
    quantity: int
    total_price: Decimal
    selection: SelectionSet
    special_notes: str | None = None

    def to_order_line(self) -> dict:
        """Frozen copy of this line for an order."""
        return {
            "menu_item_id": self.menu_item_id,
            "item_name": self.item_name,
            "unit_price": float(round_money(self.unit_price)),
            "quantity": self.quantity,
            "total_price": float(round_money(self.total_price)),
            "special_notes": self.special_notes,
            "selections": self.selection.to_json(),
        }


@dataclass(frozen=True)
class PricedCart:
    cart_id: str
    customer_id: str
    restaurant_id: str
    lines: tuple[PricedLine, ...]
    subtotal: Decimal

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


class CartAggregator:
    def aggregate(self, customer_id) -> PricedCart:
        """Price the customer's cart for checkout.

        Raises:
            EmptyCartError: the customer has no cart or it has no lines.
            MixedRestaurantError: lines reference more than one restaurant.
        """
        cart = find_cart(customer_id)
        if cart is None or not cart.lines:
            raise EmptyCartError()
        return self.price(cart)

    def price(self, cart: Cart) -> PricedCart:
        if not cart.lines:
            raise EmptyCartError()
        restaurant_ids = cart.restaurant_ids
        if len(restaurant_ids) > 1:
            logger.info("mixed_restaurant_cart", cart_id=str(cart.id), restaurant_ids=sorted(restaurant_ids))
            raise MixedRestaurantError(restaurant_ids)

        lines = self.price_lines(cart)
        return PricedCart(
            cart_id=str(cart.id),
            customer_id=str(cart.customer_id),
            restaurant_id=next(iter(restaurant_ids)),
            lines=lines,
            subtotal=round_money(sum((line.total_price for line in lines), Decimal("0"))),
        )

    def price_lines(self, cart: Cart) -> tuple[PricedLine, ...]:
        """Price every line without enforcing the single-restaurant rule."""
        items = fetch_by_ids(MenuItem, {line.menu_item_id for line in cart.lines})
        selections = {str(line.id): line.selection for line in cart.lines}
        resolver = PriceResolver.for_selections(selections.values())

        priced = []
        for line in cart.lines:
            item = items.get(str(line.menu_item_id))
            if item is None:
                raise MenuItemNotFoundError(line.menu_item_id)
            selection = selections[str(line.id)]
            unit_price = resolver.unit_price(item.price, selection)
            priced.append(
                PricedLine(
                    line_id=str(line.id),
                    menu_item_id=str(line.menu_item_id),
                    restaurant_id=str(line.restaurant_id),
                    item_name=item.name,
                    unit_price=unit_price,
                    quantity=line.quantity,
                    total_price=unit_price * line.quantity,
                    selection=selection,
                    special_notes=line.special_notes,
                )
            )
        return tuple(priced)

    def group_by_restaurant(self, cart: Cart) -> dict[str, list[PricedLine]]:
        grouped: dict[str, list[PricedLine]] = defaultdict(list)
        for line in self.price_lines(cart):
            grouped[line.restaurant_id].append(line)
        return dict(grouped)
