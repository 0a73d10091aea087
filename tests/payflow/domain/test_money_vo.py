"""Tests for the Money value object."""

from decimal import Decimal

import pytest
from payflow.shared.money import Money, currency_exponent
from protean.exceptions import ValidationError


class TestMoneyConstruction:
    def test_defaults_to_usd(self):
        money = Money(value=Decimal("10.00"))
        assert money.currency == "USD"

    def test_negative_amounts_are_allowed(self):
        money = Money(value=Decimal("-5.00"))
        assert money.value == Decimal("-5.00")

    def test_rejects_unknown_currency(self):
        with pytest.raises(ValidationError) as exc:
            Money(value=Decimal("10.00"), currency="XYZ")
        assert "currency" in exc.value.messages

    def test_equality_is_by_value(self):
        assert Money(value=Decimal("10.00"), currency="EUR") == Money(value=Decimal("10.00"), currency="EUR")


class TestMinorUnits:
    def test_cents_for_two_decimal_currency(self):
        assert Money(value=Decimal("50.00")).cents == 5000

    def test_cents_round_half_up(self):
        assert Money(value=Decimal("10.005")).cents == 1001

    def test_zero_decimal_currency(self):
        assert currency_exponent("JPY") == 0
        assert Money(value=Decimal("500"), currency="JPY").cents == 500

    def test_from_cents(self):
        money = Money.from_cents(2000, "USD")
        assert money.value == Decimal("20")
        assert money.currency == "USD"

    def test_from_cents_zero_decimal_currency(self):
        assert Money.from_cents(1500, "KRW").value == Decimal("1500")
