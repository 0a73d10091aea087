"""Payment gateway registry.

Payment methods name the gateway they charge through; get_gateway() /
set_gateway() resolve and swap implementations by that name. FakeGateway
is registered under "fake" on first use.
"""

from payflow.gateway.fake_adapter import FakeGateway
from payflow.gateway.port import PaymentGateway

DEFAULT_GATEWAY = "fake"

_gateways: dict[str, PaymentGateway] = {}


def get_gateway(name: str = DEFAULT_GATEWAY) -> PaymentGateway:
    """Return the gateway registered under ``name``. Defaults to FakeGateway."""
    if name not in _gateways:
        if name != DEFAULT_GATEWAY:
            raise ValueError(f"Unknown payment gateway: {name}")
        _gateways[name] = FakeGateway()
    return _gateways[name]


def set_gateway(gateway: PaymentGateway, name: str = DEFAULT_GATEWAY) -> None:
    """Override the gateway registered under ``name`` (useful for tests)."""
    _gateways[name] = gateway


def reset_gateway() -> None:
    """Reset to the default gateway."""
    _gateways.clear()
