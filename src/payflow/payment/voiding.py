"""Payment void and cancellation — commands and handler."""

from protean import handle
from protean.fields import Identifier

from payflow.domain import payflow
from payflow.payment.payment import Payment
from payflow.payment.processing import run_processing


@payflow.command(part_of="Payment")
class VoidPayment:
    payment_id = Identifier(required=True)


@payflow.command(part_of="Payment")
class CancelPayment:
    payment_id = Identifier(required=True)


@payflow.command_handler(part_of=Payment)
class PaymentVoidingHandler:
    @handle(VoidPayment)
    def void_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.void_transaction())

    @handle(CancelPayment)
    def cancel_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.cancel())
