"""Payment status — real-time payment state view."""

from protean.core.projector import on
from protean.fields import DateTime, Decimal, Identifier, String
from protean.utils.globals import current_domain

from payflow.domain import payflow
from payflow.payment.events import (
    PaymentAuthorized,
    PaymentCaptured,
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentInvalidated,
    PaymentVoided,
)
from payflow.payment.payment import Payment


@payflow.projection
class PaymentStatusView:
    payment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    number = String(required=True)
    payment_method_id = Identifier()
    amount = Decimal()
    captured_amount = Decimal(default=0)
    currency = String(default="USD")
    state = String(required=True)
    response_code = String()
    failure_reason = String()
    created_at = DateTime()
    updated_at = DateTime()


@payflow.projector(projector_for=PaymentStatusView, aggregates=[Payment])
class PaymentStatusProjector:
    @on(PaymentCreated)
    def on_payment_created(self, event):
        current_domain.repository_for(PaymentStatusView).add(
            PaymentStatusView(
                payment_id=event.payment_id,
                order_id=event.order_id,
                number=event.number,
                payment_method_id=event.payment_method_id,
                amount=event.amount,
                currency=event.currency,
                state=event.state,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(PaymentAuthorized)
    def on_payment_authorized(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.state = "pending"
        view.response_code = event.response_code
        view.updated_at = event.authorized_at
        repo.add(view)

    @on(PaymentCaptured)
    def on_payment_captured(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.captured_amount = (view.captured_amount or 0) + event.amount
        view.updated_at = event.captured_at
        repo.add(view)

    @on(PaymentCompleted)
    def on_payment_completed(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.state = "completed"
        view.amount = event.amount
        view.captured_amount = event.captured_amount
        view.response_code = event.response_code
        view.updated_at = event.completed_at
        repo.add(view)

    @on(PaymentFailed)
    def on_payment_failed(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.state = "failed"
        view.failure_reason = event.reason
        view.updated_at = event.failed_at
        repo.add(view)

    @on(PaymentVoided)
    def on_payment_voided(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.state = "void"
        view.response_code = event.response_code
        view.updated_at = event.voided_at
        repo.add(view)

    @on(PaymentInvalidated)
    def on_payment_invalidated(self, event):
        repo = current_domain.repository_for(PaymentStatusView)
        view = repo.get(event.payment_id)
        view.state = "invalid"
        view.updated_at = event.invalidated_at
        repo.add(view)
