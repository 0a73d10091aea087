"""PaymentMethod aggregate — how a store accepts money.

A payment method is configuration: a display name, the gateway it charges
through, and whether payments are captured immediately (purchase) or only
authorized at checkout and captured later.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text

from payflow.domain import payflow
from payflow.gateway import DEFAULT_GATEWAY, get_gateway
from payflow.gateway.port import PaymentGateway
from payflow.payment_method.events import PaymentMethodDeactivated, PaymentMethodRegistered


@payflow.aggregate
class PaymentMethod:
    name = String(required=True, max_length=255)
    description = Text()
    gateway_name = String(max_length=50, default=DEFAULT_GATEWAY)
    auto_capture = Boolean(default=False)
    active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(
        cls,
        name: str,
        gateway_name: str = DEFAULT_GATEWAY,
        auto_capture: bool = False,
        description: str | None = None,
    ):
        now = datetime.now(UTC)
        method = cls(
            name=name,
            description=description,
            gateway_name=gateway_name,
            auto_capture=auto_capture,
            created_at=now,
            updated_at=now,
        )
        method.raise_(
            PaymentMethodRegistered(
                payment_method_id=str(method.id),
                name=name,
                gateway_name=gateway_name,
                auto_capture=auto_capture,
                registered_at=now,
            )
        )
        return method

    @property
    def gateway(self) -> PaymentGateway:
        """The gateway adapter this method charges through."""
        return get_gateway(self.gateway_name)

    def deactivate(self) -> None:
        if not self.active:
            raise ValidationError({"active": ["Payment method is already inactive"]})
        now = datetime.now(UTC)
        self.active = False
        self.updated_at = now
        self.raise_(
            PaymentMethodDeactivated(
                payment_method_id=str(self.id),
                deactivated_at=now,
            )
        )
