"""Delivery fee and ETA estimation.

The backend does not compute delivery fees or times yet, so couriers see
an estimate derived from the shipping address.  Repositories depend on
``IDeliveryEstimator`` only; a distance-matrix implementation can replace
``AddressHeuristicEstimator`` without touching them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence, Tuple


@dataclass(frozen=True)
class DeliveryEstimate:
    fee: Decimal
    eta: str


@dataclass(frozen=True)
class FeeTier:
    keywords: Tuple[str, ...]
    estimate: DeliveryEstimate


class IDeliveryEstimator(ABC):
    @abstractmethod
    def estimate(self, shipping_address: str) -> DeliveryEstimate:
        """Return the fee and ETA shown for an order shipped to *shipping_address*."""


DEFAULT_TIERS: Tuple[FeeTier, ...] = (
    FeeTier(
        keywords=("vila madalena", "consolação"),
        estimate=DeliveryEstimate(fee=Decimal("8.50"), eta="20-35 min"),
    ),
    FeeTier(
        keywords=("paulista", "centro"),
        estimate=DeliveryEstimate(fee=Decimal("12.50"), eta="30-45 min"),
    ),
)
DEFAULT_ESTIMATE = DeliveryEstimate(fee=Decimal("15.90"), eta="45-60 min")


class AddressHeuristicEstimator(IDeliveryEstimator):
    """Case-insensitive keyword match on the address; first tier wins."""

    def __init__(
        self,
        tiers: Sequence[FeeTier] = DEFAULT_TIERS,
        fallback: DeliveryEstimate = DEFAULT_ESTIMATE,
    ) -> None:
        self._tiers = tuple(tiers)
        self._fallback = fallback

    def estimate(self, shipping_address: str) -> DeliveryEstimate:
        address = (shipping_address or "").casefold()
        for tier in self._tiers:
            if any(keyword.casefold() in address for keyword in tier.keywords):
                return tier.estimate
        return self._fallback
