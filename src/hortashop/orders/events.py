"""Domain events for the Orders module.

Published after the backend acknowledged the request; screens subscribe
to re-fetch instead of updating their copy optimistically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hortashop.shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when the backend accepted a status change request."""

    new_status: str = ""
    role: Optional[str] = None


@dataclass(frozen=True)
class OrderAccepted(DomainEvent):
    """Raised when a courier claimed an order."""


@dataclass(frozen=True)
class OrderReadyForPickup(DomainEvent):
    """Raised when a producer notified the buyer the order can be collected."""
