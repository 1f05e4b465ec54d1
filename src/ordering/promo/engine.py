"""Promo engine: validates promo codes and computes discounts.

Checks run in a fixed order and stop at the first failure: the code exists,
the window has started, the window has not ended, the code is not scoped to
another restaurant. A failed check never fails checkout; it only means no
discount.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.money import ZERO, round_money, to_decimal
from ordering.promo.promo_code import PromoCode, as_utc

logger = structlog.get_logger(__name__)

INVALID_CODE = "Invalid promo code"
NOT_YET_VALID = "This promo code is not yet valid"
EXPIRED = "This promo code has expired"
WRONG_RESTAURANT = "This promo code is not applicable to this restaurant"


@dataclass(frozen=True)
class PromoApplication:
    valid: bool
    promo_code_id: str | None = None
    code: str | None = None
    discount_percentage: Decimal | None = None
    reason: str | None = None

    @classmethod
    def rejected(cls, reason, code=None) -> "PromoApplication":
        return cls(valid=False, code=code, reason=reason)

    def discount_for(self, subtotal) -> Decimal:
        """Discount on ``subtotal``, rounded to cents. Zero when the code was rejected."""
        if not self.valid:
            return ZERO
        return round_money(to_decimal(subtotal) * self.discount_percentage / Decimal("100"))


class PromoEngine:
    def apply(self, code, restaurant_id=None, now=None) -> PromoApplication:
        if not code:
            return PromoApplication.rejected(INVALID_CODE)

        normalized = code.strip().upper()
        matches = current_domain.repository_for(PromoCode)._dao.query.filter(code=normalized).all().items
        if not matches:
            return PromoApplication.rejected(INVALID_CODE, code=normalized)
        return self.evaluate(matches[0], restaurant_id, now)

    def apply_by_id(self, promo_code_id, restaurant_id=None, now=None) -> PromoApplication:
        try:
            promo = current_domain.repository_for(PromoCode).get(promo_code_id)
        except ObjectNotFoundError:
            return PromoApplication.rejected(INVALID_CODE)
        return self.evaluate(promo, restaurant_id, now)

    def evaluate(self, promo: PromoCode, restaurant_id=None, now=None) -> PromoApplication:
        now = as_utc(now or datetime.now(UTC))

        if not promo.has_started(now):
            reason = NOT_YET_VALID
        elif promo.has_expired(now):
            reason = EXPIRED
        elif not promo.applies_to(restaurant_id):
            reason = WRONG_RESTAURANT
        else:
            return PromoApplication(
                valid=True,
                promo_code_id=str(promo.id),
                code=promo.code,
                discount_percentage=to_decimal(promo.discount_percentage),
            )

        logger.info("promo_rejected", code=promo.code, restaurant_id=restaurant_id, reason=reason)
        return PromoApplication.rejected(reason, code=promo.code)

    def available(self, restaurant_id=None, now=None) -> list[PromoCode]:
        """Codes redeemable right now, optionally at one restaurant."""
        now = as_utc(now or datetime.now(UTC))
        promos = current_domain.repository_for(PromoCode)._dao.query.all().items
        return [
            promo
            for promo in promos
            if promo.has_started(now) and not promo.has_expired(now) and promo.applies_to(restaurant_id)
        ]
