"""Errors raised while driving a payment through the gateway.

Every failure the processor can surface is one of these, so callers can
branch on the exception type instead of parsing messages.
"""

from protean.exceptions import ValidationError

UNSUPPORTED_SOURCE_MESSAGE = "That payment method is unsupported. Please choose another one."
PROCESSING_FAILED_MESSAGE = "Payment could not be processed, please check the details you entered"
CONNECTION_ERROR_MESSAGE = "Unable to connect to gateway."


class GatewayError(Exception):
    """Base class for failures of a gateway interaction.

    ``response`` carries the raw gateway response (or None when the gateway
    never answered).
    """

    kind = "gateway_error"

    def __init__(self, message: str, response=None) -> None:
        super().__init__(message)
        self.message = message
        self.response = response


class PreconditionError(GatewayError):
    """The payment has no usable source for its payment method."""

    kind = "precondition"


class GatewayDeclineError(GatewayError):
    """The gateway answered and refused the operation."""

    kind = "decline"


class GatewayConnectionError(GatewayError):
    """The gateway could not be reached."""

    kind = "connection"

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE, response=None) -> None:
        super().__init__(message, response)


class InvalidTransitionError(ValidationError):
    """A state machine event was fired from a state that does not allow it."""
