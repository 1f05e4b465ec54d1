"""Cart line management: commands and handler."""

from dataclasses import dataclass

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, ClearReason, find_cart, get_or_create_cart
from ordering.catalog.menu import MenuItem
from ordering.catalog.pricing import PriceResolver
from ordering.domain import ordering
from ordering.errors import CartNotFoundError, MenuItemNotFoundError
from ordering.selection import SelectionSet


@dataclass(frozen=True)
class CartLineResult:
    cart_id: str
    line_id: str
    quantity: int


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    selections = Text()  # JSON: {"variations": [...], "add_ons": [...]}
    special_notes = Text()


@ordering.command(part_of="Cart")
class UpdateCartLineQuantity:
    customer_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    line_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


def _existing_cart(customer_id) -> Cart:
    cart = find_cart(customer_id)
    if cart is None:
        raise CartNotFoundError(customer_id)
    return cart


@ordering.command_handler(part_of=Cart)
class ManageCartLinesHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        try:
            item = current_domain.repository_for(MenuItem).get(command.menu_item_id)
        except ObjectNotFoundError:
            raise MenuItemNotFoundError(command.menu_item_id)
        if not item.is_available:
            raise ValidationError({"menu_item_id": ["Menu item is not available"]})

        selection = SelectionSet.from_json(command.selections)
        # Resolving the price up front surfaces unknown options under the reject policy
        PriceResolver.for_selections([selection]).unit_price(item.price, selection)

        repo = current_domain.repository_for(Cart)
        cart = get_or_create_cart(command.customer_id)
        line = cart.merge_line(
            menu_item_id=item.id,
            restaurant_id=item.restaurant_id,
            quantity=command.quantity,
            selection=selection,
            special_notes=command.special_notes,
        )
        repo.add(cart)
        return CartLineResult(cart_id=str(cart.id), line_id=str(line.id), quantity=line.quantity)

    @handle(UpdateCartLineQuantity)
    def update_line_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _existing_cart(command.customer_id)
        cart.update_line_quantity(line_id=command.line_id, new_quantity=command.quantity)
        repo.add(cart)
        return CartLineResult(cart_id=str(cart.id), line_id=str(command.line_id), quantity=command.quantity)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _existing_cart(command.customer_id)
        cart.remove_line(line_id=command.line_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _existing_cart(command.customer_id)
        cart.clear(ClearReason.CUSTOMER)
        repo.add(cart)
