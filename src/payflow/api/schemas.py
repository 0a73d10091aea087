"""Pydantic request/response schemas for the Payflow API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    firstname: str | None = None
    lastname: str | None = None
    company: str | None = None
    address1: str
    address2: str | None = None
    city: str
    state_name: str | None = None
    zipcode: str | None = None
    country_iso: str | None = Field(default=None, max_length=2)
    phone: str | None = None


class PaymentSourceSchema(BaseModel):
    source_type: str = "credit_card"
    name: str | None = None
    last_digits: str | None = Field(default=None, max_length=4)
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = None
    cc_type: str | None = None
    gateway_customer_profile_id: str | None = None
    gateway_payment_profile_id: str | None = None
    address: AddressSchema | None = None


# ---------------------------------------------------------------------------
# Payment Method Schemas
# ---------------------------------------------------------------------------
class RegisterPaymentMethodRequest(BaseModel):
    name: str
    description: str | None = None
    gateway_name: str = "fake"
    auto_capture: bool = False


class PaymentMethodIdResponse(BaseModel):
    payment_method_id: str


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class CreatePaymentRequest(BaseModel):
    order_id: str
    amount: Decimal = Field(gt=0)
    currency: str = "USD"
    payment_method_id: str | None = None
    source: PaymentSourceSchema | None = None
    state: str = "checkout"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord-001",
                    "amount": "50.00",
                    "currency": "USD",
                    "payment_method_id": "pm-001",
                    "source": {
                        "source_type": "credit_card",
                        "name": "Jane Doe",
                        "last_digits": "4242",
                        "month": 12,
                        "year": 2030,
                        "cc_type": "visa",
                    },
                }
            ]
        }
    }


class CapturePaymentRequest(BaseModel):
    amount: int | None = Field(default=None, gt=0, description="Minor currency units")


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"
    connection_failure: bool = False


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentIdResponse(BaseModel):
    payment_id: str


class ProcessingResponse(BaseModel):
    payment_id: str
    state: str
    response_code: str | None = None
    split_payment_id: str | None = None


class PaymentResponse(BaseModel):
    payment_id: str
    order_id: str
    number: str
    state: str
    amount: Decimal
    currency: str
    captured_amount: Decimal
    uncaptured_amount: Decimal
    payment_method_id: str | None = None
    response_code: str | None = None
    avs_response: str | None = None
    cvv_response_code: str | None = None
    can_capture: bool
    can_void: bool
    log_entry_count: int


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    connection_failure: bool
