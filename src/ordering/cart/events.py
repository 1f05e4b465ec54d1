"""Domain events for the Cart aggregate."""

from protean.fields import Boolean, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartLineAdded:
    """A configured menu item was added to the cart, or merged into a matching line."""

    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    merged = Boolean(default=False)


@ordering.event(part_of="Cart")
class CartLineQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartLineRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)


@ordering.event(part_of="Cart")
class CartCleared:
    """All lines were removed, either by the customer or by a successful checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    lines_removed = Integer(required=True)
    reason = String(max_length=50)
