"""Payment method registration and deactivation — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from payflow.domain import payflow
from payflow.gateway import get_gateway
from payflow.payment_method.payment_method import PaymentMethod


@payflow.command(part_of="PaymentMethod")
class RegisterPaymentMethod:
    """Make a new payment method available."""

    name = String(required=True, max_length=255)
    description = Text()
    gateway_name = String(max_length=50, default="fake")
    auto_capture = Boolean(default=False)


@payflow.command(part_of="PaymentMethod")
class DeactivatePaymentMethod:
    payment_method_id = Identifier(required=True)


@payflow.command_handler(part_of=PaymentMethod)
class PaymentMethodHandler:
    @handle(RegisterPaymentMethod)
    def register_payment_method(self, command):
        # Fails fast on a gateway name nothing is registered under
        get_gateway(command.gateway_name)

        method = PaymentMethod.register(
            name=command.name,
            gateway_name=command.gateway_name,
            auto_capture=command.auto_capture,
            description=command.description,
        )
        current_domain.repository_for(PaymentMethod).add(method)
        return str(method.id)

    @handle(DeactivatePaymentMethod)
    def deactivate_payment_method(self, command):
        repo = current_domain.repository_for(PaymentMethod)
        method = repo.get(command.payment_method_id)
        method.deactivate()
        repo.add(method)
