"""Unit tests for the order services.

Covers:
- Producer status updates publish ``OrderStatusChanged`` only once acknowledged.
- Producer dashboard figures (order stats, monthly earnings growth).
- Courier workspace: accept / deliver re-fetch, failed accept leaves lists intact.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from hortashop.core.exceptions import ServerError
from hortashop.orders.constants import OrderStatus
from hortashop.orders.dtos import EarningsDTO, OrderDTO
from hortashop.orders.events import OrderAccepted, OrderReadyForPickup, OrderStatusChanged
from hortashop.orders.exceptions import OrderAcceptError, OrderStatusUpdateError
from hortashop.orders.repositories.interfaces import (
    ICourierOrderRepository,
    IProducerOrderRepository,
)
from hortashop.orders.services import (
    BuyerOrderService,
    CourierWorkspace,
    ProducerDashboardService,
    ProducerOrderService,
)

pytestmark = pytest.mark.unit


def _order(order_id, status, total="10.00", created_at=None):
    return OrderDTO.model_validate(
        {"id": order_id, "status": status, "totalPrice": total, "createdAt": created_at}
    )


class RecordingBus:
    def __init__(self):
        self.published = []

    def publish(self, event):
        self.published.append(event)

    def subscribe(self, event_class, handler):
        pass


@pytest.fixture()
def recording_bus():
    return RecordingBus()


# ---------------------------------------------------------------------------
# Buyer
# ---------------------------------------------------------------------------


def test_buyer_service_delegates_to_repository():
    repo = MagicMock()
    repo.list.return_value = [_order("1", "pending")]
    repo.get_details.return_value = None
    service = BuyerOrderService(repo)

    assert [o.id for o in service.list_orders()] == ["1"]
    assert service.get_order("missing") is None


# ---------------------------------------------------------------------------
# Producer
# ---------------------------------------------------------------------------


class TestProducerOrderService:
    def test_update_publishes_after_acknowledgement(self, recording_bus):
        repo = MagicMock(spec=IProducerOrderRepository)
        repo.update_status.return_value = True
        service = ProducerOrderService(repo, recording_bus)

        assert service.update_status("abc123", "SHIPPED") is True

        repo.update_status.assert_called_once_with("abc123", "SHIPPED", None)
        (event,) = recording_bus.published
        assert isinstance(event, OrderStatusChanged)
        assert event.aggregate_id == "abc123"
        assert event.new_status == "shipped"
        assert event.role == "producer"

    def test_cancelled_alias_is_published_canonically(self, recording_bus):
        repo = MagicMock(spec=IProducerOrderRepository)
        service = ProducerOrderService(repo, recording_bus)

        service.update_status("o1", "CANCELLED")

        assert recording_bus.published[0].new_status == "canceled"

    def test_rejected_update_publishes_nothing(self, recording_bus):
        repo = MagicMock(spec=IProducerOrderRepository)
        repo.update_status.side_effect = OrderStatusUpdateError()
        service = ProducerOrderService(repo, recording_bus)

        with pytest.raises(OrderStatusUpdateError):
            service.update_status("abc123", "shipped")

        assert recording_bus.published == []

    def test_notify_ready_publishes_event(self, recording_bus):
        repo = MagicMock(spec=IProducerOrderRepository)
        service = ProducerOrderService(repo, recording_bus)

        service.notify_ready_for_pickup("abc123")

        repo.notify_ready_for_pickup.assert_called_once_with("abc123", None)
        assert isinstance(recording_bus.published[0], OrderReadyForPickup)

    def test_available_actions(self):
        assert ProducerOrderService.available_actions(_order("1", "PENDING")) == (
            "processing",
            "canceled",
        )
        assert ProducerOrderService.available_actions(_order("1", "delivered")) == ()


class TestProducerDashboard:
    NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def test_order_stats(self):
        orders = [
            _order("1", "pending"),
            _order("2", "PROCESSING"),
            _order("3", "shipped"),
            _order("4", "delivered"),
            _order("5", "canceled"),
        ]
        stats = ProducerDashboardService(MagicMock()).order_stats(orders)

        assert (stats.pending_orders, stats.completed_orders, stats.total_sales) == (3, 1, 5)

    def test_order_stats_fetches_when_not_given(self):
        repo = MagicMock()
        repo.list.return_value = [_order("1", "delivered")]

        assert ProducerDashboardService(repo).order_stats().completed_orders == 1

    def test_growth_against_last_month(self):
        orders = [
            _order("1", "delivered", "150.00", "2026-10-02T10:00:00Z"),
            _order("2", "delivered", "100.00", "2026-09-15T10:00:00Z"),
            _order("3", "pending", "999.00", "2026-10-03T10:00:00Z"),
            _order("4", "delivered", "500.00", "2026-08-15T10:00:00Z"),
        ]

        summary = ProducerDashboardService(MagicMock()).earnings_summary(self.NOW, orders)

        assert summary.monthly_earnings == Decimal("150.00")
        assert summary.growth_percentage == Decimal("50.0")

    def test_growth_is_100_when_last_month_was_empty(self):
        orders = [_order("1", "delivered", "80.00", "2026-10-05T10:00:00Z")]

        summary = ProducerDashboardService(MagicMock()).earnings_summary(self.NOW, orders)

        assert summary.growth_percentage == Decimal("100.0")

    def test_no_earnings_at_all(self):
        summary = ProducerDashboardService(MagicMock()).earnings_summary(self.NOW, [])

        assert summary.monthly_earnings == Decimal("0")
        assert summary.growth_percentage == Decimal("0.0")

    def test_naive_now_with_utc_timestamps(self):
        orders = [
            _order("1", "delivered", "80.00", "2026-10-05T10:00:00Z"),
            _order("2", "delivered", "40.00", "2026-09-05T10:00:00"),
        ]

        summary = ProducerDashboardService(MagicMock()).earnings_summary(
            datetime(2026, 10, 18), orders
        )

        assert summary.monthly_earnings == Decimal("80.00")
        assert summary.growth_percentage == Decimal("100.0")

    def test_january_compares_with_december(self):
        orders = [
            _order("1", "delivered", "30.00", "2027-01-10T10:00:00Z"),
            _order("2", "delivered", "40.00", "2026-12-20T10:00:00Z"),
        ]
        now = datetime(2027, 1, 15, tzinfo=timezone.utc)

        summary = ProducerDashboardService(MagicMock()).earnings_summary(now, orders)

        assert summary.growth_percentage == Decimal("-25.0")


# ---------------------------------------------------------------------------
# Courier
# ---------------------------------------------------------------------------


@pytest.fixture()
def courier_repo():
    repo = MagicMock(spec=ICourierOrderRepository)
    repo.list.side_effect = lambda scope=None: {
        "available": [_order("abc123", "processing")],
        "accepted": [_order("o1", "shipped")],
    }[scope]
    return repo


class TestCourierWorkspace:
    def test_refresh_loads_both_lists(self, courier_repo, recording_bus):
        workspace = CourierWorkspace(courier_repo, recording_bus)

        workspace.refresh()

        assert [o.id for o in workspace.available_orders] == ["abc123"]
        assert [o.id for o in workspace.my_orders] == ["o1"]

    def test_failed_accept_leaves_my_orders_unchanged(self, courier_repo, recording_bus):
        workspace = CourierWorkspace(courier_repo, recording_bus)
        workspace.refresh()
        before = list(workspace.my_orders)
        courier_repo.list.reset_mock()
        courier_repo.accept.side_effect = OrderAcceptError()

        with pytest.raises(OrderAcceptError) as exc_info:
            workspace.accept("abc123")

        assert exc_info.value.user_message == "Não foi possível aceitar o pedido."
        assert workspace.my_orders == before
        assert "abc123" not in [o.id for o in workspace.my_orders]
        courier_repo.list.assert_not_called()
        assert recording_bus.published == []

    def test_accept_refetches_and_publishes(self, courier_repo, recording_bus):
        workspace = CourierWorkspace(courier_repo, recording_bus)
        courier_repo.accept.return_value = True

        assert workspace.accept("abc123") is True

        courier_repo.accept.assert_called_once_with("abc123")
        assert courier_repo.list.call_count == 2
        assert isinstance(recording_bus.published[0], OrderAccepted)

    def test_accept_survives_failed_refetch(self, courier_repo, recording_bus):
        workspace = CourierWorkspace(courier_repo, recording_bus)
        workspace.refresh()
        before = (list(workspace.available_orders), list(workspace.my_orders))
        courier_repo.accept.return_value = True
        courier_repo.list.side_effect = ServerError("boom")

        assert workspace.accept("abc123") is True

        assert (workspace.available_orders, workspace.my_orders) == before
        assert isinstance(recording_bus.published[0], OrderAccepted)

    def test_mark_delivered(self, courier_repo, recording_bus):
        workspace = CourierWorkspace(courier_repo, recording_bus)

        workspace.mark_delivered("o1")

        courier_repo.update_status.assert_called_once_with("o1", OrderStatus.DELIVERED)
        event = recording_bus.published[0]
        assert (event.new_status, event.role) == ("delivered", "courier")

    def test_current_active_delivery_skips_finished_orders(self, recording_bus):
        repo = MagicMock(spec=ICourierOrderRepository)
        repo.list.return_value = [_order("done", "delivered"), _order("live", "shipped")]
        repo.get_details.return_value = _order("live", "shipped")

        active = CourierWorkspace(repo, recording_bus).get_current_active_delivery()

        assert active.id == "live"
        repo.get_details.assert_called_once_with("live")

    def test_no_active_delivery(self, recording_bus):
        repo = MagicMock(spec=ICourierOrderRepository)
        repo.list.return_value = [_order("done", "canceled")]

        assert CourierWorkspace(repo, recording_bus).get_current_active_delivery() is None

    def test_todays_earnings(self, recording_bus):
        repo = MagicMock(spec=ICourierOrderRepository)
        repo.get_earnings.return_value = EarningsDTO.model_validate(
            {"daily": [{"date": "2026-10-18", "totalEarnings": "21.00"}]}
        )
        workspace = CourierWorkspace(repo, recording_bus)

        assert workspace.get_todays_earnings(date(2026, 10, 18)) == Decimal("21.00")
        assert workspace.get_todays_earnings(date(2026, 10, 17)) == Decimal("0")
        repo.get_earnings.assert_called_with("week")
