"""Human readable order numbers.

Format: ``#`` + last four digits of the epoch milliseconds + four random
base-36 characters, e.g. ``#4821K7QZ``. Every number is reserved in the
OrderNumber registry, whose unique ``number`` field rejects a second
reservation. A collision is retried with a fresh number.
"""

import secrets
import string
import time

import structlog
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from ordering.config import get_settings
from ordering.domain import ordering
from ordering.errors import PersistenceError

logger = structlog.get_logger(__name__)

_ALPHABET = string.digits + string.ascii_uppercase


@ordering.aggregate
class OrderNumber:
    number = String(required=True, max_length=20, unique=True)
    order_id = Identifier()
    reserved_at = DateTime()


def generate_order_number(now_ms: int | None = None) -> str:
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(4))
    return f"#{str(now_ms)[-4:]}{suffix}"


def is_taken(number: str) -> bool:
    dao = current_domain.repository_for(OrderNumber)._dao
    return bool(dao.query.filter(number=number).all().items)


def reserve_order_number(reserved_at, generator=None) -> OrderNumber:
    """Pick a number nobody holds.

    The caller links the reservation to its order and adds it to the
    repository in the same Unit of Work as the order.
    """
    attempts = get_settings().order_number_attempts
    for attempt in range(1, attempts + 1):
        number = (generator or generate_order_number)()
        if is_taken(number):
            logger.info("order_number_collision", number=number, attempt=attempt)
            continue
        return OrderNumber(number=number, reserved_at=reserved_at)

    raise PersistenceError(
        "Could not allocate a unique order number",
        {"order_number": [f"Gave up after {attempts} attempts"]},
    )
