"""Saved carts: named snapshots of a cart that can be restored later.

Restoring merges each saved line into the live cart through
``Cart.merge_line``, so restoring the same saved cart twice doubles the
quantities instead of duplicating lines.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, find_cart, get_or_create_cart
from ordering.domain import ordering
from ordering.errors import EmptyCartError, OwnershipError, SavedCartNotFoundError
from ordering.selection import SelectionSet


@ordering.entity(part_of="SavedCart")
class SavedCartLine:
    menu_item_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    special_notes = Text()
    selections = Text()


@ordering.aggregate
class SavedCart:
    customer_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    lines = HasMany(SavedCartLine)
    created_at = DateTime()

    @classmethod
    def snapshot(cls, cart: Cart, name: str) -> "SavedCart":
        saved = cls(customer_id=cart.customer_id, name=name, created_at=datetime.now(UTC))
        for line in cart.lines:
            saved.add_lines(
                SavedCartLine(
                    menu_item_id=line.menu_item_id,
                    restaurant_id=line.restaurant_id,
                    quantity=line.quantity,
                    special_notes=line.special_notes,
                    selections=line.selections,
                )
            )
        return saved

    def restore_into(self, cart: Cart) -> int:
        for line in self.lines:
            cart.merge_line(
                menu_item_id=line.menu_item_id,
                restaurant_id=line.restaurant_id,
                quantity=line.quantity,
                selection=SelectionSet.from_json(line.selections),
                special_notes=line.special_notes,
            )
        return len(self.lines)


@dataclass(frozen=True)
class RestoreResult:
    cart_id: str
    items_added: int


@ordering.command(part_of="SavedCart")
class SaveCart:
    customer_id = Identifier(required=True)
    name = String(required=True, max_length=100)


@ordering.command(part_of="SavedCart")
class RestoreSavedCart:
    saved_cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=SavedCart)
class SavedCartHandler:
    @handle(SaveCart)
    def save_cart(self, command):
        cart = find_cart(command.customer_id)
        if cart is None or not cart.lines:
            raise EmptyCartError()

        saved = SavedCart.snapshot(cart, command.name)
        current_domain.repository_for(SavedCart).add(saved)
        return str(saved.id)

    @handle(RestoreSavedCart)
    def restore_saved_cart(self, command):
        try:
            saved = current_domain.repository_for(SavedCart).get(command.saved_cart_id)
        except ObjectNotFoundError:
            raise SavedCartNotFoundError(command.saved_cart_id)
        if str(saved.customer_id) != str(command.customer_id):
            raise OwnershipError("Saved cart does not belong to this customer")

        cart = get_or_create_cart(command.customer_id)
        items_added = saved.restore_into(cart)
        current_domain.repository_for(Cart).add(cart)
        return RestoreResult(cart_id=str(cart.id), items_added=items_added)
