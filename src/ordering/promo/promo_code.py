"""PromoCode aggregate: a time-boxed percentage discount, optionally scoped to one restaurant."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps read back from storage as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@ordering.aggregate
class PromoCode:
    code = String(required=True, max_length=50, unique=True)
    description = Text()
    discount_percentage = Float(required=True)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    restaurant_id = Identifier()  # None: valid at every restaurant

    def defaults(self):
        # Lookups match on the stored uppercase form
        if self.code:
            self.code = self.code.strip().upper()

    @invariant.post
    def discount_must_be_a_percentage(self):
        if self.discount_percentage is not None and not 0 <= self.discount_percentage <= 100:
            raise ValidationError({"discount_percentage": ["Discount percentage must be between 0 and 100"]})

    @invariant.post
    def window_must_not_end_before_it_starts(self):
        if self.start_date and self.end_date and as_utc(self.start_date) > as_utc(self.end_date):
            raise ValidationError({"end_date": ["End date must not be before start date"]})

    @classmethod
    def create(cls, code, discount_percentage, start_date, end_date, restaurant_id=None, description=None):
        return cls(
            code=code,
            discount_percentage=discount_percentage,
            start_date=start_date,
            end_date=end_date,
            restaurant_id=restaurant_id,
            description=description,
        )

    def has_started(self, now: datetime) -> bool:
        return now >= as_utc(self.start_date)

    def has_expired(self, now: datetime) -> bool:
        return now > as_utc(self.end_date)

    def applies_to(self, restaurant_id) -> bool:
        if not self.restaurant_id or restaurant_id is None:
            return True
        return str(self.restaurant_id) == str(restaurant_id)
