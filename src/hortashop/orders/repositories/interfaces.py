"""Role-scoped order repository contracts.

Every role sees a JWT-scoped subset of orders.  All implementations share
one look-up contract: ``get_details`` returns ``None`` when the backend
answers 404 and raises for every other failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from hortashop.core.pagination import Page
    from hortashop.core.session import Role
    from hortashop.orders.dtos import (
        DeliveryHistoryItemDTO,
        EarningsDTO,
        OrderDTO,
        StatusHistoryDTO,
        TrackingDTO,
    )


class IOrderRepository(ABC):
    """Read access shared by every role."""

    role: Role

    @abstractmethod
    def list(self, scope: Optional[str] = None) -> List[OrderDTO]:
        """List the orders in *scope* (the role's default scope when ``None``)."""

    @abstractmethod
    def get_details(self, order_id: str) -> Optional[OrderDTO]:
        """Retrieve one order with its items, or ``None`` if it does not exist."""


class IStatusUpdatingRepository(IOrderRepository):
    @abstractmethod
    def update_status(
        self, order_id: str, new_status: str, notes: Optional[str] = None
    ) -> bool:
        """Ask the backend to move the order to *new_status*.

        Returns ``True`` once the backend acknowledged; the caller re-fetches
        to observe the new state.
        """


class IProducerOrderRepository(IStatusUpdatingRepository):
    @abstractmethod
    def get_status_history(self, order_id: str) -> List[StatusHistoryDTO]:
        """Status change audit trail of one order."""

    @abstractmethod
    def notify_ready_for_pickup(
        self, order_id: str, message: Optional[str] = None
    ) -> bool:
        """Tell the buyer the order can be collected at the producer."""


class ICourierOrderRepository(IStatusUpdatingRepository):
    @abstractmethod
    def accept(self, order_id: str) -> bool:
        """Claim an unassigned order for the current courier."""

    @abstractmethod
    def get_history(self, page: int = 1, limit: int = 20) -> Page[DeliveryHistoryItemDTO]:
        """Completed deliveries, most recent first."""

    @abstractmethod
    def get_earnings(self, period: str = "week") -> EarningsDTO:
        """Earnings report for ``week``, ``month`` or ``all``."""


class ITrackingRepository(ABC):
    """Live order tracking: public read, courier position reports."""

    @abstractmethod
    def get_tracking(self, order_id: str) -> Optional[TrackingDTO]:
        """Current tracking of one order, or ``None`` if it does not exist."""

    @abstractmethod
    def update_tracking(
        self, order_id: str, latitude: float, longitude: float, status: str
    ) -> bool:
        """Report the courier's position and the status at that point."""
