"""Payment creation — command and handler.

Attaches a new payment to an order. A new checkout payment supersedes any
other payment of the same order still sitting in checkout, so those are
invalidated.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Decimal, Dict, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.query import Q

from payflow.domain import payflow
from payflow.payment.payment import INITIAL_STATES, Payment, PaymentSource, PaymentState
from payflow.payment_method.payment_method import PaymentMethod
from payflow.shared.address import Address

logger = structlog.get_logger(__name__)


@payflow.command(part_of="Payment")
class CreatePayment:
    """Create a payment for an order."""

    order_id = Identifier(required=True)
    amount = Decimal(required=True)
    currency = String(max_length=3, default="USD")
    payment_method_id = Identifier()
    source = Dict()
    state = String(max_length=20, default=PaymentState.CHECKOUT.value)


def build_source(data: dict | None) -> PaymentSource | None:
    """Build a PaymentSource (and its billing address) from plain data."""
    if not data:
        return None
    data = dict(data)
    address = data.pop("address", None)
    return PaymentSource(address=Address(**address) if address else None, **data)


@payflow.command_handler(part_of=Payment)
class CreatePaymentHandler:
    @handle(CreatePayment)
    def create_payment(self, command):
        state = command.state or PaymentState.CHECKOUT.value
        if state not in {s.value for s in INITIAL_STATES}:
            raise ValidationError({"state": [f"Payments cannot be created in state {state}"]})

        if command.payment_method_id:
            method = current_domain.repository_for(PaymentMethod).get(command.payment_method_id)
            if not method.active:
                raise ValidationError({"payment_method_id": ["Payment method is inactive"]})

        repo = current_domain.repository_for(Payment)
        payment = Payment.create(
            order_id=command.order_id,
            amount=command.amount,
            currency=command.currency or "USD",
            payment_method_id=command.payment_method_id,
            source=build_source(command.source),
            state=PaymentState(state),
        )

        superseded = repo.find(Q(order_id=str(command.order_id), state=PaymentState.CHECKOUT.value)).items
        for old in superseded:
            old.invalidate()
            repo.add(old)
            logger.info(
                "Invalidated superseded checkout payment",
                order_id=str(command.order_id),
                payment_id=str(old.id),
                replaced_by=str(payment.id),
            )

        repo.add(payment)
        return str(payment.id)
