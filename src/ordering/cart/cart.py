"""Cart aggregate (CQRS): one per customer, emptied on successful checkout.

Lines are keyed by menu item, restaurant and the canonical signature of
their selection set. ``merge_line`` is the only way lines enter a cart: add
to cart, reorder and saved-cart restore all go through it, so the same
configuration never shows up as two lines.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, HasMany, Identifier, Integer, Text
from protean.utils.globals import current_domain

from ordering.cart.events import CartCleared, CartLineAdded, CartLineQuantityUpdated, CartLineRemoved
from ordering.domain import ordering
from ordering.errors import CartLineNotFoundError
from ordering.selection import SelectionSet


class ClearReason(Enum):
    CUSTOMER = "Customer"
    CHECKOUT = "Checkout"


@ordering.entity(part_of="Cart")
class CartLine:
    menu_item_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    special_notes = Text()
    selections = Text()  # canonical JSON of a SelectionSet
    added_at = DateTime()

    @property
    def selection(self) -> SelectionSet:
        return SelectionSet.from_json(self.selections)

    def matches(self, menu_item_id, restaurant_id, signature) -> bool:
        return (
            str(self.menu_item_id) == str(menu_item_id)
            and str(self.restaurant_id) == str(restaurant_id)
            and self.selection.signature() == signature
        )


@ordering.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def restaurant_ids(self) -> set[str]:
        return {str(line.restaurant_id) for line in self.lines}

    def _line(self, line_id) -> CartLine:
        line = next((line for line in self.lines if str(line.id) == str(line_id)), None)
        if line is None:
            raise CartLineNotFoundError(line_id)
        return line

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def find_line(self, menu_item_id, restaurant_id, selection: SelectionSet) -> CartLine | None:
        signature = selection.signature()
        return next(
            (line for line in self.lines if line.matches(menu_item_id, restaurant_id, signature)),
            None,
        )

    def merge_line(self, menu_item_id, restaurant_id, quantity, selection: SelectionSet, special_notes=None) -> CartLine:
        """Add ``quantity`` of a configuration, merging into an identical line if present."""
        now = datetime.now(UTC)
        existing = self.find_line(menu_item_id, restaurant_id, selection)

        if existing:
            existing.quantity += quantity
            if special_notes:
                existing.special_notes = special_notes
            line = existing
        else:
            line = CartLine(
                menu_item_id=menu_item_id,
                restaurant_id=restaurant_id,
                quantity=quantity,
                special_notes=special_notes,
                selections=selection.to_json(),
                added_at=now,
            )
            self.add_lines(line)

        self.updated_at = now
        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                line_id=str(line.id),
                menu_item_id=str(menu_item_id),
                restaurant_id=str(restaurant_id),
                quantity=quantity,
                new_quantity=line.quantity,
                merged=existing is not None,
            )
        )
        return line

    def update_line_quantity(self, line_id, new_quantity):
        line = self._line(line_id)
        previous_quantity = line.quantity
        line.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=str(line_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_line(self, line_id):
        line = self._line(line_id)
        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=str(line_id)))

    def clear(self, reason: ClearReason = ClearReason.CUSTOMER):
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                lines_removed=removed,
                reason=reason.value,
            )
        )


def find_cart(customer_id) -> Cart | None:
    """Return the customer's cart, or None if they never had one."""
    repo = current_domain.repository_for(Cart)
    carts = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    if not carts:
        return None
    return repo.get(carts[0].id)


def get_or_create_cart(customer_id) -> Cart:
    return find_cart(customer_id) or Cart.create(customer_id=customer_id)
