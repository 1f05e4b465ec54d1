"""Tests for money rounding and catalogue price resolution."""

from decimal import Decimal

import pytest
from ordering.catalog.pricing import PriceResolver
from ordering.config import UnknownOptionPolicy
from ordering.errors import UnknownOptionError
from ordering.money import cents, decimal_str, money_str, round_money
from ordering.selection import SelectionSet


def _resolver(policy=UnknownOptionPolicy.SKIP):
    return PriceResolver(
        variation_prices={"large": Decimal("2.00"), "small": Decimal("0")},
        add_on_prices={"cheese": Decimal("1.00"), "olives": Decimal("0.75")},
        policy=policy,
    )


def _selection(variation_option=None, add_on_options=()):
    variations = [{"variation_id": "size", "selected_option_id": variation_option}] if variation_option else []
    add_ons = [{"add_on_id": "toppings", "selected_option_ids": list(add_on_options)}] if add_on_options else []
    return SelectionSet.build(variations, add_ons)


class TestMoney:
    def test_rounds_half_up(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money("2.344") == Decimal("2.34")

    def test_float_noise_does_not_leak(self):
        assert round_money(0.1 + 0.2) == Decimal("0.30")

    def test_money_str_has_two_decimals(self):
        assert money_str(26.5) == "26.50"
        assert money_str(None) == "0.00"

    @pytest.mark.parametrize("value,expected", [(10.0, "10"), (12.5, "12.5"), ("7.25", "7.25"), (0, "0")])
    def test_percentages_are_plain_decimals(self, value, expected):
        assert decimal_str(value) == expected

    def test_cents(self):
        assert cents("12.50") == 1250


class TestUnitPrice:
    def test_base_price_only(self):
        assert _resolver().unit_price(12.50, SelectionSet.empty()) == Decimal("12.50")

    def test_adds_variation_modifier_and_add_on_prices(self):
        selection = _selection("large", ["cheese", "olives"])
        assert _resolver().unit_price(12.50, selection) == Decimal("16.25")

    def test_zero_modifier_option(self):
        assert _resolver().unit_price(12.50, _selection("small")) == Decimal("12.50")

    def test_unknown_options_skipped_by_default(self):
        selection = _selection("gigantic", ["cheese", "truffle"])
        assert _resolver().unknown_option_ids(selection) == {"gigantic", "truffle"}
        assert _resolver().unit_price(10, selection) == Decimal("11.00")

    def test_unknown_options_rejected_under_reject_policy(self):
        with pytest.raises(UnknownOptionError) as exc:
            _resolver(UnknownOptionPolicy.REJECT).unit_price(10, _selection("gigantic"))
        assert exc.value.option_ids == ["gigantic"]
        assert exc.value.status_code == 400


class TestBatchLoading:
    def test_for_selections_loads_option_prices(self, size_large, toppings):
        _, large = size_large
        _, cheese, olives = toppings
        selection = _selection(large.id, [cheese.id])

        resolver = PriceResolver.for_selections([selection])

        assert resolver.variation_prices == {large.id: Decimal("2.0")}
        assert resolver.add_on_prices == {cheese.id: Decimal("1.0")}
        assert resolver.unit_price(12.50, selection) == Decimal("15.50")

    def test_policy_comes_from_environment(self, monkeypatch):
        monkeypatch.setenv("UNKNOWN_OPTION_POLICY", "reject")
        resolver = PriceResolver.for_selections([_selection("missing")])
        with pytest.raises(UnknownOptionError):
            resolver.unit_price(5, _selection("missing"))
