"""Payflow bounded context — payment lifecycle processing.

Governs how a payment attached to an order moves through authorization,
capture and void against a pluggable payment gateway, and keeps an audit
trail of every gateway interaction.
"""

import structlog
from protean.domain import Domain

payflow = Domain(name="payflow")

logger = structlog.get_logger(__name__)
