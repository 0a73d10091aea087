"""Payment authorization and purchase — commands and handler."""

from protean import handle
from protean.fields import Identifier

from payflow.domain import payflow
from payflow.payment.payment import Payment
from payflow.payment.processing import run_processing


@payflow.command(part_of="Payment")
class ProcessPayment:
    """Purchase or authorize, depending on the payment method."""

    payment_id = Identifier(required=True)


@payflow.command(part_of="Payment")
class AuthorizePayment:
    payment_id = Identifier(required=True)


@payflow.command(part_of="Payment")
class PurchasePayment:
    payment_id = Identifier(required=True)


@payflow.command_handler(part_of=Payment)
class PaymentAuthorizationHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.process())

    @handle(AuthorizePayment)
    def authorize_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.authorize())

    @handle(PurchasePayment)
    def purchase_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.purchase())
