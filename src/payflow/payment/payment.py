"""Payment aggregate (CQRS) — the payment state machine.

A Payment is one attempt to collect money for an order through a payment
method. It is persisted as current state (not event sourced); every gateway
interaction leaves a LogEntry behind and every successful purchase or
capture leaves a CaptureEvent behind, which together form the audit trail.

State Machine:
    CHECKOUT/BALANCE_DUE → PROCESSING → PENDING → PROCESSING → COMPLETED
    CHECKOUT/BALANCE_DUE → PROCESSING → COMPLETED (purchase)
    PROCESSING/PENDING → FAILED
    any non-terminal (and COMPLETED) → VOID
    CHECKOUT/BALANCE_DUE → INVALID
    COMPLETED → PROCESSING (re-authorization / re-purchase)

FAILED, VOID and INVALID are terminal.
"""

import secrets
import string
from datetime import UTC, datetime
from decimal import Decimal as D
from enum import Enum

from protean.fields import (
    DateTime,
    Decimal,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from payflow.domain import payflow
from payflow.payment.errors import InvalidTransitionError
from payflow.payment.events import (
    PaymentAuthorized,
    PaymentCaptured,
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentInvalidated,
    PaymentVoided,
)
from payflow.shared.address import Address
from payflow.shared.money import Money

NUMBER_PREFIX = "P"
NUMBER_LENGTH = 7
_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentState(Enum):
    CHECKOUT = "checkout"
    BALANCE_DUE = "balance_due"
    PROCESSING = "processing"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    VOID = "void"
    INVALID = "invalid"


INITIAL_STATES = frozenset({PaymentState.CHECKOUT, PaymentState.BALANCE_DUE})

_FROM_INITIAL = {
    PaymentState.PROCESSING,
    PaymentState.PENDING,
    PaymentState.COMPLETED,
    PaymentState.VOID,
    PaymentState.INVALID,
}

_VALID_TRANSITIONS = {
    PaymentState.CHECKOUT: _FROM_INITIAL,
    PaymentState.BALANCE_DUE: _FROM_INITIAL,
    PaymentState.PROCESSING: {
        PaymentState.PROCESSING,
        PaymentState.PENDING,
        PaymentState.COMPLETED,
        PaymentState.FAILED,
        PaymentState.VOID,
    },
    PaymentState.PENDING: {
        PaymentState.PROCESSING,
        PaymentState.COMPLETED,
        PaymentState.FAILED,
        PaymentState.VOID,
    },
    PaymentState.COMPLETED: {PaymentState.PROCESSING, PaymentState.VOID},
    PaymentState.FAILED: set(),  # Terminal
    PaymentState.VOID: set(),  # Terminal
    PaymentState.INVALID: set(),  # Terminal
}


def generate_payment_number() -> str:
    suffix = "".join(secrets.choice(_NUMBER_ALPHABET) for _ in range(NUMBER_LENGTH))
    return f"{NUMBER_PREFIX}{suffix}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@payflow.value_object(part_of="Payment")
class PaymentSource:
    """The instrument charged by the gateway (usually a credit card).

    A source holding a gateway customer or payment profile id is
    token-based: the gateway already knows the card, so it can be charged
    even when the gateway cannot validate the card details itself.
    """

    source_type = String(max_length=50, default="credit_card")
    name = String(max_length=255)
    last_digits = String(max_length=4)
    month = Integer(min_value=1, max_value=12)
    year = Integer()
    cc_type = String(max_length=50)
    gateway_customer_profile_id = String(max_length=255)
    gateway_payment_profile_id = String(max_length=255)
    address = ValueObject(Address)

    @property
    def token_based(self) -> bool:
        return bool(self.gateway_customer_profile_id or self.gateway_payment_profile_id)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@payflow.entity(part_of="Payment")
class CaptureEvent:
    """An amount of money actually collected against this payment."""

    amount = Decimal(required=True)
    authorization = String(max_length=255)
    created_at = DateTime(required=True)


@payflow.entity(part_of="Payment")
class LogEntry:
    """Serialized raw gateway response (or transport error) for auditing."""

    details = Text(required=True)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@payflow.aggregate
class Payment:
    order_id = Identifier(required=True)
    number = String(required=True, max_length=20)
    amount = ValueObject(Money, required=True)
    state = String(
        choices=PaymentState,
        default=PaymentState.CHECKOUT.value,
    )
    payment_method_id = Identifier()
    source = ValueObject(PaymentSource)
    response_code = String(max_length=255)
    avs_response = String(max_length=255)
    cvv_response_code = String(max_length=255)
    cvv_response_message = String(max_length=255)
    capture_events = HasMany(CaptureEvent)
    log_entries = HasMany(LogEntry)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        amount,
        currency: str = "USD",
        payment_method_id: str | None = None,
        source: PaymentSource | None = None,
        state: PaymentState = PaymentState.CHECKOUT,
    ):
        """Create a new payment for an order."""
        now = datetime.now(UTC)
        payment = cls(
            order_id=order_id,
            number=generate_payment_number(),
            amount=Money(value=D(str(amount)), currency=currency),
            state=state.value,
            payment_method_id=payment_method_id,
            source=source,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentCreated(
                payment_id=str(payment.id),
                order_id=str(order_id),
                number=payment.number,
                payment_method_id=payment_method_id,
                amount=payment.amount.value,
                currency=payment.amount.currency,
                state=payment.state,
                created_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_state: PaymentState) -> None:
        current = PaymentState(self.state)
        if target_state not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError({"state": [f"Cannot transition from {current.value} to {target_state.value}"]})

    def _transition(self, target_state: PaymentState) -> datetime:
        self.assert_can_transition(target_state)
        now = datetime.now(UTC)
        self.state = target_state.value
        self.updated_at = now
        return now

    def in_state(self, *states: PaymentState) -> bool:
        return PaymentState(self.state) in states

    @property
    def can_capture(self) -> bool:
        return self.in_state(PaymentState.PENDING, *INITIAL_STATES)

    @property
    def can_void(self) -> bool:
        return PaymentState.VOID in _VALID_TRANSITIONS[PaymentState(self.state)]

    # -------------------------------------------------------------------
    # Amounts
    # -------------------------------------------------------------------
    @property
    def captured_amount(self) -> D:
        return sum((D(event.amount) for event in (self.capture_events or [])), D("0"))

    @property
    def uncaptured_amount(self) -> D:
        return D(self.amount.value) - self.captured_amount

    def captured_for(self, authorization: str | None) -> D:
        """Total captured against one gateway authorization."""
        return sum(
            (D(event.amount) for event in (self.capture_events or []) if event.authorization == authorization),
            D("0"),
        )

    def uncaptured_for(self, authorization: str | None) -> D:
        """What is left to capture on ``authorization``.

        A completed payment that is authorized again starts from its full
        amount, since earlier captures belong to the earlier authorization.
        """
        return D(self.amount.value) - self.captured_for(authorization)

    # -------------------------------------------------------------------
    # State machine events
    # -------------------------------------------------------------------
    def start_processing(self) -> None:
        """Move into processing ahead of a gateway call."""
        self._transition(PaymentState.PROCESSING)

    def pend(self) -> None:
        """Mark the payment authorized and awaiting capture."""
        now = self._transition(PaymentState.PENDING)
        self.raise_(
            PaymentAuthorized(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                response_code=self.response_code,
                authorized_at=now,
            )
        )

    def complete(self) -> None:
        now = self._transition(PaymentState.COMPLETED)
        self.raise_(
            PaymentCompleted(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                amount=self.amount.value,
                currency=self.amount.currency,
                captured_amount=self.captured_amount,
                response_code=self.response_code,
                completed_at=now,
            )
        )

    def fail(self, reason: str = "") -> None:
        now = self._transition(PaymentState.FAILED)
        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                amount=self.amount.value,
                reason=reason or "Payment failed",
                failed_at=now,
            )
        )

    def void(self) -> None:
        now = self._transition(PaymentState.VOID)
        self.raise_(
            PaymentVoided(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                response_code=self.response_code,
                voided_at=now,
            )
        )

    def invalidate(self) -> None:
        now = self._transition(PaymentState.INVALID)
        self.raise_(
            PaymentInvalidated(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                invalidated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Audit trail
    # -------------------------------------------------------------------
    def record_capture(self, amount, authorization: str | None = None) -> None:
        """Append a capture event for money actually collected.

        The event is booked against ``authorization``, or against the
        current response code when none is given.
        """
        now = datetime.now(UTC)
        amount = D(str(amount))
        self.add_capture_events(
            CaptureEvent(
                amount=amount,
                authorization=authorization or self.response_code,
                created_at=now,
            )
        )
        self.raise_(
            PaymentCaptured(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                amount=amount,
                currency=self.amount.currency,
                captured_at=now,
            )
        )

    def record_log_entry(self, details: str) -> None:
        self.add_log_entries(LogEntry(details=details, created_at=datetime.now(UTC)))

    def record_verification(self, response_code=None, avs_response=None, cvv_code=None, cvv_message=None) -> None:
        """Store gateway verification metadata; absent values leave fields untouched."""
        if response_code:
            self.response_code = response_code
        if avs_response:
            self.avs_response = avs_response
        if cvv_code:
            self.cvv_response_code = cvv_code
        if cvv_message:
            self.cvv_response_message = cvv_message

    # -------------------------------------------------------------------
    # Partial capture
    # -------------------------------------------------------------------
    def split_uncaptured(self, response_code: str | None = None):
        """Shrink this payment to what was captured and return a new pending
        payment for the remainder, or None when nothing is left over.

        The remainder is later captured against the original authorization,
        so callers pass that reference in when `response_code` has already
        been overwritten by the capture response.
        """
        authorization = response_code or self.response_code
        remainder = self.uncaptured_for(authorization)
        if remainder <= 0:
            return None
        captured = self.captured_for(authorization)

        sibling = Payment.create(
            order_id=str(self.order_id),
            amount=remainder,
            currency=self.amount.currency,
            payment_method_id=self.payment_method_id,
            source=self.source,
            state=PaymentState.PENDING,
        )
        sibling.record_verification(
            response_code=authorization,
            avs_response=self.avs_response,
            cvv_code=self.cvv_response_code,
            cvv_message=self.cvv_response_message,
        )

        self.amount = Money(value=captured, currency=self.amount.currency)
        self.updated_at = datetime.now(UTC)
        return sibling
