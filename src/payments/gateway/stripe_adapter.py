"""Stripe payment gateway adapter.

Refunds go against the PaymentIntent captured at checkout. Amounts are sent
in the smallest currency unit.
"""

import stripe
import structlog

from payments.gateway.port import PaymentGateway, RefundResult

logger = structlog.get_logger(__name__)

# Stripe refund statuses that mean the money is on its way back
_ACCEPTED_STATUSES = {"succeeded", "pending"}


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def create_refund(
        self,
        payment_reference: str,
        amount: float,
        reason: str,
        metadata: dict | None = None,
    ) -> RefundResult:
        try:
            refund = stripe.Refund.create(
                payment_intent=payment_reference,
                amount=int(round(amount * 100)),
                metadata={**(metadata or {}), "reason": reason},
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.warning(
                "stripe_refund_failed",
                payment_reference=payment_reference,
                error=str(exc),
            )
            return RefundResult(success=False, gateway_status="error", failure_reason=str(exc))

        return RefundResult(
            success=refund.status in _ACCEPTED_STATUSES,
            gateway_refund_id=refund.id,
            gateway_status=refund.status,
            failure_reason=getattr(refund, "failure_reason", None),
        )
