"""Money value object for payment amounts."""

from decimal import ROUND_HALF_UP
from decimal import Decimal as D

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Decimal, String

from payflow.domain import payflow

VALID_CURRENCIES = frozenset(
    {
        "USD",
        "EUR",
        "GBP",
        "JPY",
        "CAD",
        "AUD",
        "CHF",
        "CNY",
        "INR",
        "MXN",
        "BRL",
        "KRW",
        "SGD",
        "HKD",
        "NOK",
        "SEK",
        "DKK",
        "NZD",
        "ZAR",
        "TWD",
    }
)

# Currencies whose smallest unit is the major unit
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW", "TWD"})


def currency_exponent(currency: str) -> int:
    """Number of minor-unit digits for an ISO-4217 currency."""
    return 0 if currency in ZERO_DECIMAL_CURRENCIES else 2


@payflow.value_object
class Money:
    """A signed decimal amount with its ISO-4217 currency.

    Gateways are always addressed in minor units (cents), so the conversion
    lives here rather than in every caller.
    """

    value = Decimal(required=True)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def currency_must_be_valid_iso_4217(self):
        if self.currency not in VALID_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    @property
    def cents(self) -> int:
        """The amount in minor currency units, rounded half-up."""
        factor = D(10) ** currency_exponent(self.currency)
        return int((D(self.value) * factor).quantize(D("1"), rounding=ROUND_HALF_UP))

    @classmethod
    def from_cents(cls, cents: int, currency: str = "USD") -> "Money":
        factor = D(10) ** currency_exponent(currency)
        return cls(value=D(cents) / factor, currency=currency)
