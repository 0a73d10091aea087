"""FastAPI routes for the Payflow domain — payment methods and payments."""

import os

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain

from payflow.api.schemas import (
    CapturePaymentRequest,
    ConfigureGatewayRequest,
    CreatePaymentRequest,
    GatewayConfigResponse,
    PaymentIdResponse,
    PaymentMethodIdResponse,
    PaymentResponse,
    ProcessingResponse,
    RegisterPaymentMethodRequest,
)
from payflow.gateway import get_gateway
from payflow.gateway.fake_adapter import FakeGateway
from payflow.payment.authorization import AuthorizePayment, ProcessPayment, PurchasePayment
from payflow.payment.capture import CapturePayment
from payflow.payment.creation import CreatePayment
from payflow.payment.errors import InvalidTransitionError
from payflow.payment.payment import Payment
from payflow.payment.processing import ProcessingResult
from payflow.payment.voiding import CancelPayment, VoidPayment
from payflow.payment_method.registration import DeactivatePaymentMethod, RegisterPaymentMethod

_ERROR_STATUS = {
    "precondition": 422,
    "decline": 422,
    "connection": 502,
}


def register_error_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses.

    Protean's standard mapping handles validation (400) and lookups (404);
    illegal state transitions are conflicts with the payment's current state.
    """
    register_exception_handlers(app)

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": exc.messages})


def _processing_response(result: ProcessingResult) -> ProcessingResponse:
    if not result.succeeded:
        raise HTTPException(
            status_code=_ERROR_STATUS.get(result.error_kind, 422),
            detail={
                "error": result.error,
                "kind": result.error_kind,
                "payment_id": result.payment_id,
                "state": result.state,
            },
        )
    return ProcessingResponse(
        payment_id=result.payment_id,
        state=result.state,
        response_code=result.response_code,
        split_payment_id=result.split_payment_id,
    )


# ---------------------------------------------------------------------------
# Payment Method Router
# ---------------------------------------------------------------------------
payment_method_router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@payment_method_router.post("", status_code=201, response_model=PaymentMethodIdResponse)
async def register_payment_method(body: RegisterPaymentMethodRequest) -> PaymentMethodIdResponse:
    """Register a payment method backed by a named gateway."""
    command = RegisterPaymentMethod(
        name=body.name,
        description=body.description,
        gateway_name=body.gateway_name,
        auto_capture=body.auto_capture,
    )
    result = current_domain.process(command, asynchronous=False)
    return PaymentMethodIdResponse(payment_method_id=result)


@payment_method_router.post("/{payment_method_id}/deactivate", status_code=204)
async def deactivate_payment_method(payment_method_id: str) -> None:
    current_domain.process(DeactivatePaymentMethod(payment_method_id=payment_method_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentIdResponse)
async def create_payment(body: CreatePaymentRequest) -> PaymentIdResponse:
    """Attach a new payment to an order."""
    # Absent optional fields are left out rather than sent as None
    command = CreatePayment(**body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return PaymentIdResponse(payment_id=result)


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str) -> PaymentResponse:
    payment = current_domain.repository_for(Payment).get(payment_id)
    return PaymentResponse(
        payment_id=str(payment.id),
        order_id=str(payment.order_id),
        number=payment.number,
        state=payment.state,
        amount=payment.amount.value,
        currency=payment.amount.currency,
        captured_amount=payment.captured_amount,
        uncaptured_amount=payment.uncaptured_amount,
        payment_method_id=str(payment.payment_method_id) if payment.payment_method_id else None,
        response_code=payment.response_code,
        avs_response=payment.avs_response,
        cvv_response_code=payment.cvv_response_code,
        can_capture=payment.can_capture,
        can_void=payment.can_void,
        log_entry_count=len(payment.log_entries or []),
    )


@payment_router.post("/{payment_id}/process", response_model=ProcessingResponse)
async def process_payment(payment_id: str) -> ProcessingResponse:
    """Purchase or authorize, depending on the payment method."""
    result = current_domain.process(ProcessPayment(payment_id=payment_id), asynchronous=False)
    return _processing_response(result)


@payment_router.post("/{payment_id}/authorize", response_model=ProcessingResponse)
async def authorize_payment(payment_id: str) -> ProcessingResponse:
    result = current_domain.process(AuthorizePayment(payment_id=payment_id), asynchronous=False)
    return _processing_response(result)


@payment_router.post("/{payment_id}/purchase", response_model=ProcessingResponse)
async def purchase_payment(payment_id: str) -> ProcessingResponse:
    result = current_domain.process(PurchasePayment(payment_id=payment_id), asynchronous=False)
    return _processing_response(result)


@payment_router.post("/{payment_id}/capture", response_model=ProcessingResponse)
async def capture_payment(payment_id: str, body: CapturePaymentRequest | None = None) -> ProcessingResponse:
    """Capture an authorized payment; a partial capture splits off the remainder."""
    command = CapturePayment(
        payment_id=payment_id,
        amount=body.amount if body else None,
    )
    result = current_domain.process(command, asynchronous=False)
    return _processing_response(result)


@payment_router.post("/{payment_id}/void", response_model=ProcessingResponse)
async def void_payment(payment_id: str) -> ProcessingResponse:
    result = current_domain.process(VoidPayment(payment_id=payment_id), asynchronous=False)
    return _processing_response(result)


@payment_router.post("/{payment_id}/cancel", response_model=ProcessingResponse)
async def cancel_payment(payment_id: str) -> ProcessingResponse:
    result = current_domain.process(CancelPayment(payment_id=payment_id), asynchronous=False)
    return _processing_response(result)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows toggling success, decline and connection-failure behavior for
    manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        connection_failure=body.connection_failure,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        connection_failure=gateway.connection_failure,
    )
