"""Order services (use cases) per role.

Services sit between screens and the role repositories: they publish
domain events once the backend acknowledged a request and keep the
courier's local lists.  No service updates an order optimistically;
after every command the affected lists are re-fetched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, List, Optional, Tuple

import structlog

from hortashop.core.exceptions import HortaShopError
from hortashop.orders.constants import (
    COURIER_ACTIONS,
    PRODUCER_ACTIONS,
    OrderStatus,
    available_actions,
    normalize_status,
)
from hortashop.orders.events import OrderAccepted, OrderReadyForPickup, OrderStatusChanged
from hortashop.shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from hortashop.core.pagination import Page
    from hortashop.orders.dtos import (
        DeliveryHistoryItemDTO,
        OrderDTO,
        StatusHistoryDTO,
        TrackingDTO,
    )
    from hortashop.orders.repositories.interfaces import (
        ICourierOrderRepository,
        IOrderRepository,
        IProducerOrderRepository,
        ITrackingRepository,
    )
    from hortashop.shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class BuyerOrderService:
    """Read-only order access for the buyer."""

    def __init__(self, repository: IOrderRepository) -> None:
        self._repo = repository

    def list_orders(self) -> List[OrderDTO]:
        return self._repo.list()

    def get_order(self, order_id: str) -> Optional[OrderDTO]:
        return self._repo.get_details(order_id)


class ProducerOrderService:
    """Order management for the producer (pending → processing → shipped)."""

    def __init__(
        self,
        repository: IProducerOrderRepository,
        bus: Optional[IEventBus] = None,
    ) -> None:
        self._repo = repository
        self._bus = bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def update_status(
        self, order_id: str, new_status: str, notes: Optional[str] = None
    ) -> bool:
        """Request a status change and announce it once acknowledged.

        Raises whatever the repository raises; nothing is published then.
        """
        self._repo.update_status(order_id, new_status, notes)
        self._bus.publish(
            OrderStatusChanged(
                aggregate_id=order_id,
                new_status=normalize_status(new_status).value,
                role="producer",
            )
        )
        return True

    def notify_ready_for_pickup(
        self, order_id: str, message: Optional[str] = None
    ) -> bool:
        self._repo.notify_ready_for_pickup(order_id, message)
        self._bus.publish(OrderReadyForPickup(aggregate_id=order_id))
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self) -> List[OrderDTO]:
        return self._repo.list()

    def get_order(self, order_id: str) -> Optional[OrderDTO]:
        return self._repo.get_details(order_id)

    def get_status_history(self, order_id: str) -> List[StatusHistoryDTO]:
        return self._repo.get_status_history(order_id)

    @staticmethod
    def available_actions(order: OrderDTO) -> Tuple[str, ...]:
        return available_actions(order.status or order.raw_status, PRODUCER_ACTIONS)


# ---------------------------------------------------------------------------
# Producer dashboard
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderStats:
    pending_orders: int
    completed_orders: int
    total_sales: int


@dataclass(frozen=True)
class EarningsSummary:
    monthly_earnings: Decimal
    growth_percentage: Decimal


def _as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _month_start(moment: datetime, months_back: int = 0) -> datetime:
    year, month = moment.year, moment.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return moment.replace(
        year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0
    )


class ProducerDashboardService:
    """Aggregates the producer's order list into dashboard figures."""

    OPEN_STATUSES = frozenset(
        {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED}
    )

    def __init__(self, repository: IProducerOrderRepository) -> None:
        self._repo = repository

    def order_stats(self, orders: Optional[List[OrderDTO]] = None) -> OrderStats:
        orders = self._repo.list() if orders is None else orders
        return OrderStats(
            pending_orders=sum(1 for o in orders if o.status in self.OPEN_STATUSES),
            completed_orders=sum(
                1 for o in orders if o.status is OrderStatus.DELIVERED
            ),
            total_sales=len(orders),
        )

    def earnings_summary(
        self,
        now: Optional[datetime] = None,
        orders: Optional[List[OrderDTO]] = None,
    ) -> EarningsSummary:
        """Delivered revenue this month and growth against last month.

        Growth is 100 when last month earned nothing and this month did.
        """
        now = _as_utc(now or datetime.now(timezone.utc))
        orders = self._repo.list() if orders is None else orders

        current_start = _month_start(now)
        last_start = _month_start(now, months_back=1)

        current = Decimal("0")
        previous = Decimal("0")
        for order in orders:
            if order.status is not OrderStatus.DELIVERED or order.created_at is None:
                continue
            created = _as_utc(order.created_at)
            if created >= current_start:
                current += order.total_price
            elif last_start <= created < current_start:
                previous += order.total_price

        if previous > 0:
            growth = (current - previous) / previous * 100
        else:
            growth = Decimal("100") if current > 0 else Decimal("0")

        return EarningsSummary(
            monthly_earnings=current,
            growth_percentage=growth.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP),
        )


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


class OrderTrackingService:
    """Live tracking: the buyer follows an order, the courier reports positions."""

    def __init__(self, repository: ITrackingRepository) -> None:
        self._repo = repository

    def get_tracking(self, order_id: str) -> Optional[TrackingDTO]:
        return self._repo.get_tracking(order_id)

    def report_position(
        self, order_id: str, latitude: float, longitude: float, status: str
    ) -> bool:
        return self._repo.update_tracking(order_id, latitude, longitude, status)


# ---------------------------------------------------------------------------
# Courier
# ---------------------------------------------------------------------------


class CourierWorkspace:
    """The courier's view: available orders and "my orders".

    Both lists only ever change by re-fetching from the backend, so an
    order the courier failed to accept never shows up in ``my_orders``.
    """

    def __init__(
        self,
        repository: ICourierOrderRepository,
        bus: Optional[IEventBus] = None,
    ) -> None:
        self._repo = repository
        self._bus = bus or default_event_bus
        self.available_orders: List[OrderDTO] = []
        self.my_orders: List[OrderDTO] = []

    def refresh(self) -> None:
        available = self._repo.list("available")
        accepted = self._repo.list("accepted")
        self.available_orders, self.my_orders = available, accepted
        logger.info(
            "courier.workspace_refreshed",
            available=len(self.available_orders),
            accepted=len(self.my_orders),
        )

    def accept(self, order_id: str) -> bool:
        """Claim *order_id*; raises ``OrderAcceptError`` if the backend refuses.

        Once the backend accepted, a failed re-fetch is logged and the
        lists keep their previous content until the next ``refresh``.
        """
        self._repo.accept(order_id)
        self._bus.publish(OrderAccepted(aggregate_id=order_id))
        self._refresh_after("accept", order_id)
        return True

    def update_status(self, order_id: str, new_status: str) -> bool:
        self._repo.update_status(order_id, new_status)
        self._bus.publish(
            OrderStatusChanged(
                aggregate_id=order_id,
                new_status=normalize_status(new_status).value,
                role="courier",
            )
        )
        self._refresh_after("update_status", order_id)
        return True

    def _refresh_after(self, command: str, order_id: str) -> None:
        try:
            self.refresh()
        except HortaShopError as exc:
            logger.warning(
                "courier.refresh_failed",
                command=command,
                order_id=order_id,
                error=str(exc),
            )

    def mark_delivered(self, order_id: str) -> bool:
        return self.update_status(order_id, OrderStatus.DELIVERED)

    def get_order(self, order_id: str) -> Optional[OrderDTO]:
        return self._repo.get_details(order_id)

    def get_current_active_delivery(self) -> Optional[OrderDTO]:
        """First accepted order not yet delivered or canceled, in full detail."""
        for order in self._repo.list("accepted"):
            if not order.is_terminal:
                return self._repo.get_details(order.id)
        return None

    def history(self, page: int = 1, limit: int = 20) -> Page[DeliveryHistoryItemDTO]:
        return self._repo.get_history(page=page, limit=limit)

    def get_todays_earnings(self, today: Optional[date] = None) -> Decimal:
        today = today or datetime.now(timezone.utc).date()
        return self._repo.get_earnings("week").for_day(today)

    @staticmethod
    def available_actions(order: OrderDTO) -> Tuple[str, ...]:
        return available_actions(order.status or order.raw_status, COURIER_ACTIONS)
