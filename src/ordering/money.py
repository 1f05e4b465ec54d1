"""Money helpers. Amounts are computed as Decimal and rounded half-up to cents."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 12.5 from dragging binary noise into the sum
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value) -> str:
    """Serialize an amount as a 2-decimal string, e.g. ``"26.50"``."""
    return str(round_money(value))


def cents(value) -> int:
    return int(round_money(value) * 100)


def decimal_str(value) -> str:
    """Serialize a non-money quantity such as a percentage: ``12.5`` -> ``"12.5"``, ``10.0`` -> ``"10"``."""
    normalized = to_decimal(value).normalize()
    return format(normalized, "f")
