"""Domain events for the Payment aggregate.

Raised on every state machine transition except the move into processing,
stored in the event store on commit and consumed by the projections.
"""

from protean.fields import DateTime, Decimal, Identifier, String

from payflow.domain import payflow


@payflow.event(part_of="Payment")
class PaymentCreated:
    """A new payment was attached to an order."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    number = String(required=True)
    payment_method_id = Identifier()
    amount = Decimal(required=True)
    currency = String(required=True)
    state = String(required=True)
    created_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentAuthorized:
    """The gateway authorized the payment; funds are held but not captured."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    response_code = String()
    authorized_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentCompleted:
    """The payment was fully settled."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Decimal(required=True)
    currency = String(required=True)
    captured_amount = Decimal(required=True)
    response_code = String()
    completed_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentCaptured:
    """Funds were captured, either by a purchase or by a capture of an authorization."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Decimal(required=True)
    currency = String(required=True)
    captured_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentFailed:
    """The gateway declined the payment or could not be reached."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Decimal(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentVoided:
    """The payment was voided or cancelled at the gateway."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    response_code = String()
    voided_at = DateTime(required=True)


@payflow.event(part_of="Payment")
class PaymentInvalidated:
    """The payment can never be processed (unsupported source or superseded)."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    invalidated_at = DateTime(required=True)
