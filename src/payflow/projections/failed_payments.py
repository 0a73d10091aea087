"""Failed payments — operations monitoring dashboard."""

from protean.core.projector import on
from protean.fields import DateTime, Decimal, Identifier, String
from protean.utils.globals import current_domain

from payflow.domain import payflow
from payflow.payment.events import PaymentFailed
from payflow.payment.payment import Payment


@payflow.projection
class FailedPayment:
    payment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    amount = Decimal()
    reason = String()
    failed_at = DateTime()


@payflow.projector(projector_for=FailedPayment, aggregates=[Payment])
class FailedPaymentProjector:
    @on(PaymentFailed)
    def on_payment_failed(self, event):
        current_domain.repository_for(FailedPayment).add(
            FailedPayment(
                payment_id=event.payment_id,
                order_id=event.order_id,
                amount=event.amount,
                reason=event.reason,
                failed_at=event.failed_at,
            )
        )
