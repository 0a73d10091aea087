"""Order directory port.

Payments belong to orders that live in another bounded context. The
processor only needs a read-only snapshot of the order's contact details,
totals and addresses when it builds gateway options, so that is all this
interface exposes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from payflow.shared.address import Address


@dataclass(frozen=True)
class OrderSnapshot:
    """Current totals and contact details of an order."""

    order_id: str
    number: str
    email: str | None = None
    user_id: str | None = None
    last_ip_address: str | None = None
    currency: str = "USD"
    item_total: Decimal = Decimal("0")
    ship_total: Decimal = Decimal("0")
    additional_tax_total: Decimal = Decimal("0")
    promo_total: Decimal = Decimal("0")
    bill_address: Address | None = None
    ship_address: Address | None = None


class OrderDirectory(ABC):
    """Looks up orders by id."""

    @abstractmethod
    def fetch(self, order_id: str) -> OrderSnapshot:
        """Return a fresh snapshot of the order.

        Raises ObjectNotFoundError when the order is unknown.
        """
        ...
