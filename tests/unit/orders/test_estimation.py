"""Unit tests for the address-based delivery estimator."""

from __future__ import annotations

from decimal import Decimal

import pytest

from hortashop.orders.estimation import (
    AddressHeuristicEstimator,
    DeliveryEstimate,
    FeeTier,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "address, fee, eta",
    [
        ("Rua Harmonia, 123 - Vila Madalena", Decimal("8.50"), "20-35 min"),
        ("Rua Augusta, 10 - CONSOLAÇÃO", Decimal("8.50"), "20-35 min"),
        ("Av. Paulista, 1000", Decimal("12.50"), "30-45 min"),
        ("Praça da Sé - Centro", Decimal("12.50"), "30-45 min"),
        ("Rua das Flores, 5 - Mooca", Decimal("15.90"), "45-60 min"),
        ("", Decimal("15.90"), "45-60 min"),
    ],
)
def test_default_tiers(address, fee, eta):
    assert AddressHeuristicEstimator().estimate(address) == DeliveryEstimate(fee=fee, eta=eta)


def test_custom_tiers_and_fallback():
    estimator = AddressHeuristicEstimator(
        tiers=[FeeTier(("moema",), DeliveryEstimate(Decimal("5.00"), "10-15 min"))],
        fallback=DeliveryEstimate(Decimal("20.00"), "60-90 min"),
    )

    assert estimator.estimate("Av. Ibirapuera - Moema").fee == Decimal("5.00")
    assert estimator.estimate("Av. Paulista").fee == Decimal("20.00")
