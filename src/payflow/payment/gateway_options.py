"""Gateway options — the order context sent along with every gateway call.

Totals are re-read from the order directory each time options are built,
since the order may have changed since the payment was created.
"""

from dataclasses import asdict, dataclass

from payflow.order import get_order_directory
from payflow.order.port import OrderDirectory, OrderSnapshot
from payflow.shared.money import Money


@dataclass(frozen=True)
class GatewayOptions:
    """Immutable description of the order context for a gateway call.

    Money fields are in minor currency units.
    """

    order_id: str
    currency: str
    email: str | None = None
    customer: str | None = None
    customer_id: str | None = None
    ip: str | None = None
    shipping: int = 0
    tax: int = 0
    subtotal: int = 0
    discount: int = 0
    billing_address: dict | None = None
    shipping_address: dict | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def _cents(amount, currency: str) -> int:
    return Money(value=amount, currency=currency).cents


def build_gateway_options(
    payment,
    order: OrderSnapshot | None = None,
    order_directory: OrderDirectory | None = None,
) -> GatewayOptions:
    """Build options for ``payment`` from a fresh snapshot of its order."""
    if order is None:
        directory = order_directory or get_order_directory()
        order = directory.fetch(str(payment.order_id))

    currency = payment.amount.currency
    source = payment.source

    billing_address = None
    if source is not None and source.address is not None:
        billing_address = source.address.to_gateway_hash()
    elif order.bill_address is not None:
        billing_address = order.bill_address.to_gateway_hash()

    return GatewayOptions(
        email=order.email,
        customer=order.email,
        customer_id=order.user_id,
        ip=order.last_ip_address,
        # Unique per payment so gateways that reject duplicate order ids
        # accept a second payment on the same order
        order_id=f"{order.number}-{payment.number}",
        shipping=_cents(order.ship_total, currency),
        tax=_cents(order.additional_tax_total, currency),
        subtotal=_cents(order.item_total, currency),
        discount=_cents(order.promo_total, currency),
        currency=currency,
        billing_address=billing_address,
        shipping_address=order.ship_address.to_gateway_hash() if order.ship_address is not None else None,
    )
