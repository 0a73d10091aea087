"""Integration tests for Payflow API endpoints via TestClient."""

from decimal import Decimal

import pytest
from payflow.payment.payment import Payment, PaymentState
from protean import current_domain

pytestmark = pytest.mark.usefixtures("order_directory", "gateway")

_CARD = {
    "source_type": "credit_card",
    "name": "Jane Doe",
    "last_digits": "4242",
    "month": 12,
    "year": 2030,
    "cc_type": "visa",
}


def _register_method(client, **overrides):
    defaults = {"name": "Credit Card", "auto_capture": False}
    defaults.update(overrides)
    response = client.post("/payment-methods", json=defaults)
    assert response.status_code == 201
    return response.json()["payment_method_id"]


def _create_payment(client, **overrides):
    defaults = {
        "order_id": "ord-001",
        "amount": "50.00",
        "currency": "USD",
        "payment_method_id": _register_method(client),
        "source": _CARD,
    }
    defaults.update(overrides)
    response = client.post("/payments", json=defaults)
    assert response.status_code == 201
    return response.json()["payment_id"]


class TestPaymentMethodAPI:
    def test_register_returns_201(self, client):
        response = client.post("/payment-methods", json={"name": "Credit Card"})
        assert response.status_code == 201
        assert "payment_method_id" in response.json()

    def test_unknown_gateway_returns_400(self, client):
        response = client.post("/payment-methods", json={"name": "Mystery", "gateway_name": "mystery"})
        assert response.status_code == 400

    def test_deactivate_returns_204(self, client):
        method_id = _register_method(client)
        response = client.post(f"/payment-methods/{method_id}/deactivate")
        assert response.status_code == 204


class TestCreatePaymentAPI:
    def test_create_returns_201(self, client):
        payment_id = _create_payment(client)
        payment = current_domain.repository_for(Payment).get(payment_id)
        assert payment.state == PaymentState.CHECKOUT.value

    def test_rejects_non_positive_amount(self, client):
        response = client.post("/payments", json={"order_id": "ord-001", "amount": "0"})
        assert response.status_code == 422

    def test_rejects_initial_state_other_than_checkout(self, client):
        response = client.post("/payments", json={"order_id": "ord-001", "amount": "10.00", "state": "completed"})
        assert response.status_code == 400


class TestGetPaymentAPI:
    def test_returns_payment(self, client):
        payment_id = _create_payment(client)
        response = client.get(f"/payments/{payment_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "checkout"
        assert body["currency"] == "USD"
        assert body["can_capture"] is True
        assert body["log_entry_count"] == 0

    def test_unknown_payment_returns_404(self, client):
        response = client.get("/payments/does-not-exist")
        assert response.status_code == 404


class TestProcessingAPI:
    def test_authorize_then_capture(self, client):
        payment_id = _create_payment(client)

        response = client.post(f"/payments/{payment_id}/authorize")
        assert response.status_code == 200
        assert response.json()["state"] == "pending"

        response = client.post(f"/payments/{payment_id}/capture")
        assert response.status_code == 200
        assert response.json()["state"] == "completed"

    def test_process_with_auto_capture_purchases(self, client):
        method_id = _register_method(client, auto_capture=True)
        payment_id = _create_payment(client, payment_method_id=method_id)
        response = client.post(f"/payments/{payment_id}/process")
        assert response.status_code == 200
        assert response.json()["state"] == "completed"

    def test_partial_capture_returns_split_payment(self, client):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/authorize")

        response = client.post(f"/payments/{payment_id}/capture", json={"amount": 2000})

        assert response.status_code == 200
        split_id = response.json()["split_payment_id"]
        split = client.get(f"/payments/{split_id}").json()
        assert split["state"] == "pending"
        assert Decimal(split["amount"]) == Decimal("30.00")

    def test_purchase_then_void(self, client):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/purchase")
        response = client.post(f"/payments/{payment_id}/void")
        assert response.status_code == 200
        assert response.json()["state"] == "void"

    def test_cancel(self, client):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/authorize")
        response = client.post(f"/payments/{payment_id}/cancel")
        assert response.status_code == 200
        assert response.json()["state"] == "void"


class TestProcessingErrorsAPI:
    def test_decline_returns_422(self, client, gateway):
        gateway.configure(should_succeed=False, failure_reason="Insufficient funds")
        payment_id = _create_payment(client)

        response = client.post(f"/payments/{payment_id}/authorize")

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "Insufficient funds"
        assert detail["kind"] == "decline"
        assert detail["state"] == "failed"

    def test_missing_source_returns_422(self, client):
        payment_id = _create_payment(client, source=None)
        response = client.post(f"/payments/{payment_id}/authorize")
        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "precondition"

    def test_connection_failure_returns_502(self, client, gateway):
        gateway.configure(should_succeed=True, connection_failure=True)
        payment_id = _create_payment(client)
        response = client.post(f"/payments/{payment_id}/purchase")
        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "Unable to connect to gateway."

    def test_invalid_transition_returns_409(self, client, gateway):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/void")
        response = client.post(f"/payments/{payment_id}/purchase")
        assert response.status_code == 409

    def test_second_cancel_returns_409(self, client, gateway):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/authorize")
        assert client.post(f"/payments/{payment_id}/cancel").status_code == 200

        response = client.post(f"/payments/{payment_id}/cancel")

        assert response.status_code == 409
        assert [call["method"] for call in gateway.calls].count("cancel") == 1

    def test_over_capture_returns_400(self, client):
        payment_id = _create_payment(client)
        client.post(f"/payments/{payment_id}/authorize")
        response = client.post(f"/payments/{payment_id}/capture", json={"amount": 999999})
        assert response.status_code == 400


class TestConfigureGatewayAPI:
    def test_configure_gateway(self, client, gateway):
        response = client.post(
            "/payments/gateway/configure",
            json={"should_succeed": False, "failure_reason": "Do not honor"},
        )
        assert response.status_code == 200
        assert response.json()["should_succeed"] is False
        assert gateway.failure_reason == "Do not honor"

    def test_configure_gateway_forbidden_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = client.post("/payments/gateway/configure", json={"should_succeed": True})
        assert response.status_code == 403
