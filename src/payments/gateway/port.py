"""Payment gateway port (abstract interface).

The ordering core only ever asks the provider for refunds. Captures arrive
from the provider side and are recorded on the order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_refund(
        self,
        payment_reference: str,
        amount: float,
        reason: str,
        metadata: dict | None = None,
    ) -> RefundResult:
        """Refund ``amount`` of a previously captured payment."""
        ...
