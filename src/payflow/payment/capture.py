"""Payment capture — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer

from payflow.domain import payflow
from payflow.payment.payment import Payment
from payflow.payment.processing import run_processing


@payflow.command(part_of="Payment")
class CapturePayment:
    """Capture an authorized payment, fully or partially."""

    payment_id = Identifier(required=True)
    amount = Integer(min_value=1)  # Minor units; defaults to everything uncaptured


@payflow.command_handler(part_of=Payment)
class CapturePaymentHandler:
    @handle(CapturePayment)
    def capture_payment(self, command):
        return run_processing(command.payment_id, lambda processor: processor.capture(command.amount))
