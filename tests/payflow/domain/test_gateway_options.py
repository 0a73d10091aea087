"""Tests for building gateway options from the order and payment."""

from dataclasses import FrozenInstanceError, replace
from decimal import Decimal

import pytest
from payflow.payment.gateway_options import GatewayOptions, build_gateway_options
from payflow.payment.payment import Payment, PaymentSource
from payflow.shared.address import Address
from protean.exceptions import ObjectNotFoundError


def _make_payment(**overrides):
    defaults = {
        "order_id": "ord-001",
        "amount": Decimal("50.00"),
        "source": PaymentSource(name="Jane Doe", last_digits="4242", month=12, year=2030, cc_type="visa"),
    }
    defaults.update(overrides)
    return Payment.create(**defaults)


class TestBuildGatewayOptions:
    def test_order_id_combines_order_and_payment_numbers(self, order_directory):
        payment = _make_payment()
        options = build_gateway_options(payment)
        assert options.order_id == f"R123456789-{payment.number}"

    def test_customer_details(self, order_directory):
        options = build_gateway_options(_make_payment())
        assert options.email == "jane@example.com"
        assert options.customer == "jane@example.com"
        assert options.customer_id == "user-001"
        assert options.ip == "127.0.0.1"

    def test_totals_in_minor_units(self, order_directory):
        options = build_gateway_options(_make_payment())
        assert options.subtotal == 4000
        assert options.shipping == 500
        assert options.tax == 500
        assert options.discount == 0
        assert options.currency == "USD"

    def test_billing_address_falls_back_to_order(self, order_directory):
        options = build_gateway_options(_make_payment())
        assert options.billing_address["address1"] == "1 Billing Way"
        assert options.billing_address["name"] == "Jane Doe"
        assert options.billing_address["zip"] == "62701"

    def test_billing_address_prefers_source_address(self, order_directory):
        source = PaymentSource(
            name="Card Holder",
            last_digits="4242",
            address=Address(firstname="Card", lastname="Holder", address1="77 Card St", city="Capital City"),
        )
        options = build_gateway_options(_make_payment(source=source))
        assert options.billing_address["address1"] == "77 Card St"

    def test_shipping_address_from_order(self, order_directory):
        options = build_gateway_options(_make_payment())
        assert options.shipping_address["address1"] == "9 Shipping Lane"

    def test_refetches_order_every_time(self, order_directory):
        payment = _make_payment()
        build_gateway_options(payment)
        first = build_gateway_options(payment)

        order = order_directory.orders["ord-001"]
        order_directory.register(replace(order, ship_total=Decimal("12.50")))
        second = build_gateway_options(payment)

        assert order_directory.fetches == ["ord-001", "ord-001", "ord-001"]
        assert first.shipping == 500
        assert second.shipping == 1250

    def test_explicit_order_skips_lookup(self, order_directory):
        order = order_directory.orders["ord-001"]
        build_gateway_options(_make_payment(), order=order)
        assert order_directory.fetches == []

    def test_unknown_order_raises(self, order_directory):
        with pytest.raises(ObjectNotFoundError):
            build_gateway_options(_make_payment(order_id="ord-missing"))


class TestGatewayOptionsValue:
    def test_is_immutable(self):
        options = GatewayOptions(order_id="R1-P1", currency="USD")
        with pytest.raises(FrozenInstanceError):
            options.tax = 10

    def test_to_dict(self):
        options = GatewayOptions(order_id="R1-P1", currency="USD", tax=100)
        data = options.to_dict()
        assert data["order_id"] == "R1-P1"
        assert data["tax"] == 100
        assert data["billing_address"] is None
