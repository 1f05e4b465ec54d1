"""Configurable fake payment gateway for development and testing.

Simulates the provider without network calls. Tests configure it to
succeed, decline, or raise, and inspect ``calls`` afterwards.
"""

from uuid import uuid4

from payments.gateway.port import PaymentGateway, RefundResult


class GatewayUnavailable(Exception):
    """Raised by the fake when configured to simulate a transport failure."""


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.should_raise: bool = False
        self.failure_reason: str = "Refund declined"
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Refund declined",
        should_raise: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.should_raise = should_raise

    def create_refund(
        self,
        payment_reference: str,
        amount: float,
        reason: str,
        metadata: dict | None = None,
    ) -> RefundResult:
        self.calls.append(
            {
                "method": "create_refund",
                "payment_reference": payment_reference,
                "amount": amount,
                "reason": reason,
                "metadata": metadata or {},
            }
        )

        if self.should_raise:
            raise GatewayUnavailable(self.failure_reason)
        if self.should_succeed:
            return RefundResult(
                success=True,
                gateway_refund_id=f"fake_ref_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return RefundResult(success=False, gateway_status="failed", failure_reason=self.failure_reason)
