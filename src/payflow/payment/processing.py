"""Payment processing — drives a Payment through its gateway.

PaymentProcessor decides, for each operation, whether it is a no-op, an
illegal request or a real gateway call, executes the call, records the raw
response on the payment and maps the outcome onto a state transition:

    process    → purchase when the method auto-captures, else authorize
    authorize  → PROCESSING → PENDING | FAILED
    purchase   → PROCESSING → COMPLETED | FAILED (plus a capture event)
    capture    → PROCESSING → COMPLETED | FAILED (plus a capture event and,
                 for a partial capture, a new pending payment for the rest)
    void       → VOID (a declined void leaves the state untouched)
    cancel     → VOID (a declined cancel leaves the state untouched)

Void and cancel check the VOID transition before the gateway is called, so
a payment that cannot be voided never reaches the gateway.

Declines raise GatewayDeclineError after the payment has been moved to
FAILED; unreachable gateways raise GatewayConnectionError; payments without
a usable source raise PreconditionError.
"""

import json
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from payflow.gateway.port import GatewayConnectionFailure, GatewayResponse, PaymentGateway
from payflow.order.port import OrderDirectory
from payflow.payment.errors import (
    CONNECTION_ERROR_MESSAGE,
    PROCESSING_FAILED_MESSAGE,
    UNSUPPORTED_SOURCE_MESSAGE,
    GatewayConnectionError,
    GatewayDeclineError,
    GatewayError,
    PreconditionError,
)
from payflow.payment.gateway_options import GatewayOptions, build_gateway_options
from payflow.payment.payment import Payment, PaymentState
from payflow.payment_method.payment_method import PaymentMethod
from payflow.shared.money import Money

logger = structlog.get_logger(__name__)


def _serialize(details: dict) -> str:
    return json.dumps(details, default=str, sort_keys=True)


class PaymentProcessor:
    """Orchestrates gateway interactions for a single payment.

    After a partial capture, the new payment holding the uncaptured
    remainder is available as ``split_payment``; the caller persists it.
    """

    def __init__(
        self,
        payment: Payment,
        payment_method: PaymentMethod | None = None,
        gateway: PaymentGateway | None = None,
        order_directory: OrderDirectory | None = None,
    ) -> None:
        self.payment = payment
        self.payment_method = payment_method
        self.order_directory = order_directory
        self.split_payment: Payment | None = None
        self._gateway = gateway

    @classmethod
    def for_payment(cls, payment: Payment, **kwargs) -> "PaymentProcessor":
        """Build a processor with the payment's method loaded from its repository."""
        payment_method = None
        if payment.payment_method_id:
            payment_method = current_domain.repository_for(PaymentMethod).get(payment.payment_method_id)
        return cls(payment, payment_method=payment_method, **kwargs)

    @property
    def gateway(self) -> PaymentGateway | None:
        if self._gateway is None and self.payment_method is not None:
            self._gateway = self.payment_method.gateway
        return self._gateway

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def process(self):
        """Run whatever checkout needs: a purchase or an authorization."""
        if self.payment_method is None:
            return None
        if self.payment_method.auto_capture:
            return self.purchase()
        if self.payment.in_state(PaymentState.PENDING):
            return None
        return self.authorize()

    def authorize(self):
        return self._handle_payment_preconditions(lambda: self._gateway_action("authorize", self.payment.pend))

    def purchase(self):
        amount = self.payment.amount.value

        def _complete_purchase() -> None:
            self.payment.record_capture(amount, authorization=self.payment.response_code)
            self.payment.complete()

        return self._handle_payment_preconditions(lambda: self._gateway_action("purchase", _complete_purchase))

    def capture(self, amount: int | None = None):
        """Capture ``amount`` minor units of the current authorization.

        Captures everything the authorization still holds when ``amount``
        is omitted.
        """
        if self.payment.in_state(PaymentState.COMPLETED):
            return True

        authorization = self.payment.response_code
        currency = self.payment.amount.currency
        uncaptured = Money(value=self.payment.uncaptured_for(authorization), currency=currency).cents
        amount = uncaptured if amount is None else int(amount)
        if amount <= 0 or amount > uncaptured:
            raise ValidationError({"amount": [f"Capture amount must be between 1 and {uncaptured} ({currency} minor units)"]})

        gateway = self._require_gateway()
        options = self.gateway_options().to_dict()
        captured = Money.from_cents(amount, currency).value

        def _complete_capture() -> None:
            self.payment.record_capture(captured, authorization=authorization)
            self.split_payment = self.payment.split_uncaptured(response_code=authorization)
            self.payment.complete()

        self.payment.start_processing()
        with self._connection_guard("capture"):
            response = gateway.capture(amount, authorization, options)
        return self._handle_response(response, _complete_capture, self.payment.fail)

    def void_transaction(self):
        if self.payment.in_state(PaymentState.VOID):
            return True

        self.payment.assert_can_transition(PaymentState.VOID)
        gateway = self._require_gateway()
        options = self.gateway_options().to_dict()
        with self._connection_guard("void"):
            if gateway.payment_profiles_supported:
                response = gateway.void(self.payment.response_code, options, source=self.payment.source)
            else:
                response = gateway.void(self.payment.response_code, options)
        return self._handle_void_response(response)

    def cancel(self):
        self.payment.assert_can_transition(PaymentState.VOID)
        gateway = self._require_gateway()
        with self._connection_guard("cancel"):
            response = gateway.cancel(self.payment.response_code)
        return self._handle_void_response(response)

    def gateway_options(self) -> GatewayOptions:
        return build_gateway_options(self.payment, order_directory=self.order_directory)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _require_gateway(self) -> PaymentGateway:
        try:
            gateway = self.gateway
        except ValueError as exc:
            logger.error(
                "Payment method names an unregistered gateway",
                payment_id=str(self.payment.id),
                gateway_name=self.payment_method.gateway_name,
                error=str(exc),
            )
            raise PreconditionError(PROCESSING_FAILED_MESSAGE) from exc
        if gateway is None:
            raise PreconditionError(PROCESSING_FAILED_MESSAGE)
        return gateway

    def _handle_payment_preconditions(self, action: Callable[[], bool]):
        if self.payment_method is None:
            return None

        gateway = self._require_gateway()
        if not gateway.source_required:
            return None

        # Another operation is already talking to the gateway
        if self.payment.in_state(PaymentState.PROCESSING):
            return None

        source = self.payment.source
        if source is None:
            raise PreconditionError(PROCESSING_FAILED_MESSAGE)

        if gateway.supports(source) or source.token_based:
            return action()

        self.payment.invalidate()
        raise PreconditionError(UNSUPPORTED_SOURCE_MESSAGE)

    def _gateway_action(self, action: str, success: Callable[[], None]) -> bool:
        options = self.gateway_options().to_dict()
        self.payment.start_processing()
        with self._connection_guard(action):
            response = getattr(self.gateway, action)(self.payment.amount.cents, self.payment.source, options)
        return self._handle_response(response, success, self.payment.fail)

    def _handle_response(
        self,
        response: GatewayResponse,
        success: Callable[[], None],
        failure: Callable[[str], None],
    ) -> bool:
        self._record_response(response)

        if response.success:
            self.payment.record_verification(
                response_code=response.authorization,
                avs_response=response.avs_code,
                cvv_code=response.cvv_code,
                cvv_message=response.cvv_message,
            )
            success()
            return True

        error = self._gateway_error(response)
        failure(error.message)
        raise error

    def _handle_void_response(self, response: GatewayResponse) -> bool:
        self._record_response(response)

        if response.success:
            self.payment.record_verification(response_code=response.authorization)
            self.payment.void()
            return True

        raise self._gateway_error(response)

    def _record_response(self, response: GatewayResponse) -> None:
        self.payment.record_log_entry(_serialize(response.to_dict()))

    def _gateway_error(self, response: GatewayResponse) -> GatewayDeclineError:
        params = response.params or {}
        message = params.get("message") or params.get("response_reason_text") or response.message
        logger.error(
            "Gateway declined payment",
            payment_id=str(self.payment.id),
            payment_number=self.payment.number,
            message=message,
            response=response.to_dict(),
        )
        return GatewayDeclineError(message, response=response)

    @contextmanager
    def _connection_guard(self, action: str):
        """Turn transport failures into GatewayConnectionError.

        The failure is recorded on the payment and a payment left in
        PROCESSING is failed, so it never stays locked.
        """
        try:
            yield
        except GatewayConnectionFailure as exc:
            self.payment.record_log_entry(
                _serialize(
                    {
                        "success": False,
                        "action": action,
                        "message": CONNECTION_ERROR_MESSAGE,
                        "error": str(exc),
                        "occurred_at": datetime.now(UTC),
                    }
                )
            )
            logger.error(
                "Unable to connect to gateway",
                payment_id=str(self.payment.id),
                payment_number=self.payment.number,
                action=action,
                error=str(exc),
            )
            if self.payment.in_state(PaymentState.PROCESSING):
                self.payment.fail(CONNECTION_ERROR_MESSAGE)
            raise GatewayConnectionError() from exc


# ---------------------------------------------------------------------------
# Command handler support
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of a processing command, returned to the caller."""

    payment_id: str
    state: str
    response_code: str | None = None
    error: str | None = None
    error_kind: str | None = None
    split_payment_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def run_processing(payment_id: str, operation: Callable[[PaymentProcessor], object]) -> ProcessingResult:
    """Load a payment, run ``operation`` on its processor and persist the outcome.

    Gateway errors are reported in the result rather than raised: raising
    would roll back the unit of work, losing the failed state and the log
    entry that records the gateway's answer.
    """
    repo = current_domain.repository_for(Payment)
    payment = repo.get(payment_id)
    processor = PaymentProcessor.for_payment(payment)

    error = None
    try:
        operation(processor)
    except GatewayError as exc:
        error = exc
        logger.warning(
            "Payment operation failed",
            payment_id=str(payment.id),
            state=payment.state,
            error=exc.message,
            error_kind=exc.kind,
        )

    repo.add(payment)
    if processor.split_payment is not None:
        repo.add(processor.split_payment)

    return ProcessingResult(
        payment_id=str(payment.id),
        state=payment.state,
        response_code=payment.response_code,
        error=error.message if error else None,
        error_kind=error.kind if error else None,
        split_payment_id=str(processor.split_payment.id) if processor.split_payment else None,
    )
