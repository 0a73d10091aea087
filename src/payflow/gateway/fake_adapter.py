"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
It can be configured at runtime to succeed, decline, or be unreachable,
making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials
"""

from uuid import uuid4

from payflow.gateway.port import GatewayConnectionFailure, GatewayResponse, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(
        self,
        source_required: bool = True,
        payment_profiles_supported: bool = False,
        supported_source_types=("credit_card",),
    ) -> None:
        self.source_required = source_required
        self.payment_profiles_supported = payment_profiles_supported
        self.supported_source_types = frozenset(supported_source_types)
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.connection_failure: bool = False
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Card declined",
        connection_failure: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.connection_failure = connection_failure

    def _respond(self, method: str, message: str, **call) -> GatewayResponse:
        self.calls.append({"method": method, **call})

        if self.connection_failure:
            raise GatewayConnectionFailure(f"Connection refused during {method}")

        if self.should_succeed:
            return GatewayResponse(
                success=True,
                message=message,
                params={"status": "succeeded"},
                authorization=f"fake_{method}_{uuid4().hex[:12]}",
                avs_result={"code": "Y", "message": "Street address and 5-digit postal code match."},
                cvv_result={"code": "M", "message": "CVV matches"},
                test=True,
            )
        return GatewayResponse(
            success=False,
            message=f"{method} failed",
            params={"status": "failed", "message": self.failure_reason},
            avs_result={},
            cvv_result=None,
            test=True,
        )

    def authorize(self, amount: int, source, options: dict) -> GatewayResponse:
        return self._respond("authorize", "Transaction authorized", amount=amount, source=source, options=options)

    def purchase(self, amount: int, source, options: dict) -> GatewayResponse:
        return self._respond("purchase", "Transaction purchased", amount=amount, source=source, options=options)

    def capture(self, amount: int, authorization: str, options: dict) -> GatewayResponse:
        return self._respond(
            "capture", "Transaction captured", amount=amount, authorization=authorization, options=options
        )

    def void(self, authorization: str, options: dict, source=None) -> GatewayResponse:
        return self._respond("void", "Transaction voided", authorization=authorization, options=options, source=source)

    def cancel(self, authorization: str) -> GatewayResponse:
        return self._respond("cancel", "Transaction cancelled", authorization=authorization)
