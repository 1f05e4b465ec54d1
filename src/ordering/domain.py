"""Ordering bounded context: carts, pricing, checkout and the order lifecycle.

Handles the menu catalogue used for pricing, customer carts (CQRS), promo
codes, delivery addresses, and the event-sourced Order with its status
machine, cancellation and reorder flows.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
