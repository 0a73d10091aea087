"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement. The
processor only ever talks to this interface, so a real gateway can be
dropped in without touching any domain or application code.

Amounts are always passed in minor currency units (cents).
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field


class GatewayConnectionFailure(Exception):
    """Raised by adapters when the gateway cannot be reached at all."""


@dataclass(frozen=True)
class GatewayResponse:
    """Outcome of a single gateway call."""

    success: bool
    message: str = ""
    params: dict = field(default_factory=dict)
    authorization: str | None = None
    avs_result: dict = field(default_factory=dict)
    cvv_result: dict | None = None
    test: bool = False

    @property
    def avs_code(self) -> str | None:
        return self.avs_result.get("code") if self.avs_result else None

    @property
    def cvv_code(self) -> str | None:
        return self.cvv_result.get("code") if self.cvv_result else None

    @property
    def cvv_message(self) -> str | None:
        return self.cvv_result.get("message") if self.cvv_result else None

    def to_dict(self) -> dict:
        return asdict(self)


class PaymentGateway(ABC):
    """Abstract payment gateway interface.

    Class attributes describe capabilities:
    - ``source_required``: whether the gateway needs a payment source at all
      (store credit, check and similar methods do not)
    - ``payment_profiles_supported``: whether the gateway stores cards on its
      side and wants the source passed back on void
    - ``supported_source_types``: source types this gateway can charge
    """

    source_required: bool = True
    payment_profiles_supported: bool = False
    supported_source_types: frozenset[str] = frozenset({"credit_card"})

    def supports(self, source) -> bool:
        """Whether this gateway can charge the given source."""
        return source is not None and source.source_type in self.supported_source_types

    @abstractmethod
    def authorize(self, amount: int, source, options: dict) -> GatewayResponse:
        """Hold funds on the source without collecting them."""
        ...

    @abstractmethod
    def purchase(self, amount: int, source, options: dict) -> GatewayResponse:
        """Authorize and capture in one step."""
        ...

    @abstractmethod
    def capture(self, amount: int, authorization: str, options: dict) -> GatewayResponse:
        """Collect (part of) a previous authorization."""
        ...

    @abstractmethod
    def void(self, authorization: str, options: dict, source=None) -> GatewayResponse:
        """Release a previous authorization or reverse an unsettled charge."""
        ...

    @abstractmethod
    def cancel(self, authorization: str) -> GatewayResponse:
        """Cancel a transaction, voiding or refunding it as the gateway sees fit."""
        ...
