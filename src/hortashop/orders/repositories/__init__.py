"""Order repositories package."""

from hortashop.orders.repositories.http_repository import (
    BuyerOrderRepository,
    CourierOrderRepository,
    HttpTrackingRepository,
    ProducerOrderRepository,
)
from hortashop.orders.repositories.interfaces import (
    ICourierOrderRepository,
    IOrderRepository,
    IProducerOrderRepository,
    IStatusUpdatingRepository,
    ITrackingRepository,
)

__all__ = [
    "BuyerOrderRepository",
    "CourierOrderRepository",
    "HttpTrackingRepository",
    "ICourierOrderRepository",
    "IOrderRepository",
    "IProducerOrderRepository",
    "IStatusUpdatingRepository",
    "ITrackingRepository",
    "ProducerOrderRepository",
]
