"""Catalog price resolution for cart and order lines.

Unit price = menu item base price + the price modifiers of the chosen
variation options + the prices of the chosen add-on options.

Option prices for a whole cart are fetched up front, one query per option
kind, and each line is then priced from the in-memory maps. A resolver is
built per request and discarded with it.
"""

from collections.abc import Iterable
from decimal import Decimal

import structlog
from protean.utils.globals import current_domain

from ordering.catalog.menu import AddOnOption, VariationOption
from ordering.config import UnknownOptionPolicy, get_settings
from ordering.errors import UnknownOptionError
from ordering.money import to_decimal
from ordering.selection import SelectionSet

logger = structlog.get_logger(__name__)


def fetch_by_ids(aggregate_cls, ids) -> dict:
    """Load aggregates of one kind by id in a single query, keyed by id."""
    ids = [str(i) for i in ids if i]
    if not ids:
        return {}
    dao = current_domain.repository_for(aggregate_cls)._dao
    return {str(record.id): record for record in dao.query.filter(id__in=ids).all().items}


class PriceResolver:
    def __init__(
        self,
        variation_prices: dict[str, Decimal],
        add_on_prices: dict[str, Decimal],
        policy: UnknownOptionPolicy = UnknownOptionPolicy.SKIP,
    ):
        self.variation_prices = variation_prices
        self.add_on_prices = add_on_prices
        self.policy = policy

    @classmethod
    def for_selections(cls, selections: Iterable[SelectionSet], policy=None) -> "PriceResolver":
        """Batch-load every option referenced by ``selections``."""
        variation_ids: set[str] = set()
        add_on_ids: set[str] = set()
        for selection in selections:
            variation_ids |= selection.variation_option_ids
            add_on_ids |= selection.add_on_option_ids

        variation_options = fetch_by_ids(VariationOption, variation_ids)
        add_on_options = fetch_by_ids(AddOnOption, add_on_ids)

        return cls(
            variation_prices={k: to_decimal(v.price_modifier) for k, v in variation_options.items()},
            add_on_prices={k: to_decimal(v.price) for k, v in add_on_options.items()},
            policy=policy or get_settings().unknown_option_policy,
        )

    def unknown_option_ids(self, selection: SelectionSet) -> set[str]:
        return (selection.variation_option_ids - self.variation_prices.keys()) | (
            selection.add_on_option_ids - self.add_on_prices.keys()
        )

    def unit_price(self, base_price, selection: SelectionSet) -> Decimal:
        unknown = self.unknown_option_ids(selection)
        if unknown:
            if self.policy == UnknownOptionPolicy.REJECT:
                raise UnknownOptionError(unknown)
            logger.warning("unknown_options_skipped", option_ids=sorted(unknown))

        price = to_decimal(base_price)
        for variation in selection.variations:
            price += self.variation_prices.get(variation.selected_option_id, Decimal("0"))
        for add_on in selection.add_ons:
            for option_id in add_on.selected_option_ids:
                price += self.add_on_prices.get(option_id, Decimal("0"))
        return price
