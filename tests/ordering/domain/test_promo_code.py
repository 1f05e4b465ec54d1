"""Tests for promo code validity windows and the promo engine."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from ordering.promo.engine import EXPIRED, INVALID_CODE, NOT_YET_VALID, WRONG_RESTAURANT, PromoEngine
from ordering.promo.promo_code import PromoCode
from protean import current_domain
from protean.exceptions import ValidationError

START = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
END = datetime(2026, 3, 31, 21, 0, tzinfo=UTC)


def _promo(restaurant_id=None, discount=15, code="spring15"):
    promo = PromoCode.create(
        code=code,
        discount_percentage=discount,
        start_date=START,
        end_date=END,
        restaurant_id=restaurant_id,
    )
    current_domain.repository_for(PromoCode).add(promo)
    return promo


class TestPromoCodeAggregate:
    def test_code_is_normalized(self):
        promo = PromoCode.create(code="  spring15 ", discount_percentage=15, start_date=START, end_date=END)
        assert promo.code == "SPRING15"

    def test_code_built_directly_is_normalized(self):
        promo = PromoCode(code="save10", discount_percentage=10, start_date=START, end_date=END)
        current_domain.repository_for(PromoCode).add(promo)

        assert promo.code == "SAVE10"
        assert PromoEngine().apply("save10", now=START).valid

    @pytest.mark.parametrize("discount", [-1, 100.5])
    def test_discount_must_be_a_percentage(self, discount):
        with pytest.raises(ValidationError):
            PromoCode.create(code="X", discount_percentage=discount, start_date=START, end_date=END)

    def test_window_must_not_be_inverted(self):
        with pytest.raises(ValidationError):
            PromoCode.create(code="X", discount_percentage=5, start_date=END, end_date=START)


class TestValidityWindow:
    def test_valid_at_start_boundary(self):
        _promo()
        assert PromoEngine().apply("SPRING15", now=START).valid

    def test_valid_at_end_boundary(self):
        _promo()
        assert PromoEngine().apply("SPRING15", now=END).valid

    def test_not_yet_valid(self):
        _promo()
        result = PromoEngine().apply("SPRING15", now=START - timedelta(seconds=1))
        assert not result.valid
        assert result.reason == NOT_YET_VALID

    def test_expired_one_millisecond_after_end(self):
        _promo()
        result = PromoEngine().apply("SPRING15", now=END + timedelta(milliseconds=1))
        assert result.reason == EXPIRED

    def test_naive_now_is_treated_as_utc(self):
        _promo()
        assert PromoEngine().apply("SPRING15", now=datetime(2026, 3, 15, 12, 0)).valid


class TestApplication:
    def test_lookup_is_case_insensitive(self):
        _promo()
        result = PromoEngine().apply("spring15", now=START)
        assert result.valid
        assert result.code == "SPRING15"
        assert result.discount_percentage == Decimal("15")

    def test_unknown_code(self):
        result = PromoEngine().apply("NOPE")
        assert result.reason == INVALID_CODE

    def test_empty_code(self):
        assert PromoEngine().apply("").reason == INVALID_CODE

    def test_restaurant_scoped_code(self):
        _promo(restaurant_id="rest-001")
        assert PromoEngine().apply("SPRING15", restaurant_id="rest-001", now=START).valid
        result = PromoEngine().apply("SPRING15", restaurant_id="rest-002", now=START)
        assert result.reason == WRONG_RESTAURANT

    def test_scoped_code_without_restaurant_context(self):
        _promo(restaurant_id="rest-001")
        assert PromoEngine().apply("SPRING15", now=START).valid

    def test_discount_rounds_half_up(self):
        _promo(discount=10)
        result = PromoEngine().apply("SPRING15", now=START)
        assert result.discount_for("0.25") == Decimal("0.03")

    def test_rejected_application_discounts_nothing(self):
        assert PromoEngine().apply("NOPE").discount_for(100) == Decimal("0.00")

    def test_apply_by_id(self):
        promo = _promo()
        assert PromoEngine().apply_by_id(promo.id, now=START).valid
        assert PromoEngine().apply_by_id("missing", now=START).reason == INVALID_CODE

    def test_available_codes(self):
        _promo(code="EVERYWHERE")
        _promo(code="ONLYHERE", restaurant_id="rest-001")
        _promo(code="ELSEWHERE", restaurant_id="rest-002")

        codes = {promo.code for promo in PromoEngine().available(restaurant_id="rest-001", now=START)}
        assert codes == {"EVERYWHERE", "ONLYHERE"}
        assert PromoEngine().available(now=END + timedelta(days=1)) == []
