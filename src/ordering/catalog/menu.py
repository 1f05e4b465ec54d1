"""Menu catalogue as seen by the pricing engine.

Catalogue editing lives elsewhere; these aggregates are the read model the
cart and checkout price against. Options reference their group by id so a
whole cart's option prices can be fetched in one query per option kind.
"""

from enum import Enum

from protean.fields import Boolean, Float, Identifier, Integer, String

from ordering.domain import ordering


class SelectionMode(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@ordering.aggregate
class MenuItem:
    restaurant_id = Identifier(required=True)
    category_id = Identifier()
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    is_available = Boolean(default=True)


@ordering.aggregate
class ProductVariation:
    """A named choice group on a menu item, such as size."""

    menu_item_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    selection_mode = String(choices=SelectionMode, default=SelectionMode.SINGLE.value)
    is_required = Boolean(default=False)


@ordering.aggregate
class VariationOption:
    variation_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price_modifier = Float(default=0.0, min_value=0.0)


@ordering.aggregate
class ProductAddOn:
    """An optional or required group of extras, such as toppings."""

    menu_item_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    is_required = Boolean(default=False)
    max_selections = Integer(default=1, min_value=1)


@ordering.aggregate
class AddOnOption:
    add_on_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(default=0.0, min_value=0.0)
