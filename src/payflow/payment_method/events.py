"""Domain events for the PaymentMethod aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from payflow.domain import payflow


@payflow.event(part_of="PaymentMethod")
class PaymentMethodRegistered:
    """A payment method was made available for checkout."""

    __version__ = 1

    payment_method_id = Identifier(required=True)
    name = String(required=True)
    gateway_name = String(required=True)
    auto_capture = Boolean(required=True)
    registered_at = DateTime(required=True)


@payflow.event(part_of="PaymentMethod")
class PaymentMethodDeactivated:
    """A payment method can no longer be used for new payments."""

    __version__ = 1

    payment_method_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
