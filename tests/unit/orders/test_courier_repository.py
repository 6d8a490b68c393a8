"""Unit tests for the courier order repository."""

from __future__ import annotations

from decimal import Decimal

import pytest

from hortashop.core.exceptions import ValidationError
from hortashop.orders.estimation import DeliveryEstimate, IDeliveryEstimator
from hortashop.orders.exceptions import (
    InvalidEarningsPeriod,
    OrderAcceptError,
    OrderStatusUpdateError,
)
from hortashop.orders.repositories import CourierOrderRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repository(api, courier_session):
    return CourierOrderRepository(api)


def _history_page(page, limit, total):
    start = (page - 1) * limit
    ids = range(start, min(start + limit, total))
    total_pages = -(-total // limit)
    return {
        "deliveries": [
            {"id": f"d{i}", "orderId": f"o{i}", "totalPrice": "30.00", "deliveryFee": "8.50"}
            for i in ids
        ],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        },
    }


class TestAccept:
    def test_accept_posts_to_accept_endpoint(self, repository, http, make_response):
        http.request.return_value = make_response(201, {"success": True})

        assert repository.accept("abc123") is True

        method, url = http.request.call_args.args
        assert method == "POST"
        assert url.endswith("/delivery-orders/abc123/accept")

    def test_taken_order_raises_could_not_accept(self, repository, http, make_response):
        http.request.return_value = make_response(409, {"message": "Order already accepted"})

        with pytest.raises(OrderAcceptError) as exc_info:
            repository.accept("abc123")

        assert exc_info.value.user_message == "Não foi possível aceitar o pedido."
        assert exc_info.value.status_code == 409

    def test_missing_order_raises_could_not_accept(self, repository, http, make_response):
        http.request.return_value = make_response(404)

        with pytest.raises(OrderAcceptError):
            repository.accept("abc123")

    def test_success_false_body_is_a_failure(self, repository, http, make_response):
        http.request.return_value = make_response(200, {"success": False})

        with pytest.raises(OrderAcceptError):
            repository.accept("abc123")


class TestStatusUpdate:
    def test_patch_with_status_only(self, repository, http, make_response):
        http.request.return_value = make_response(200, {})

        assert repository.update_status("abc123", "delivered") is True

        method, url = http.request.call_args.args
        assert method == "PATCH"
        assert url.endswith("/delivery-orders/abc123/status")
        assert http.request.call_args.kwargs["json"] == {"status": "delivered"}

    def test_rejection(self, repository, http, make_response):
        http.request.return_value = make_response(400, {"message": "Invalid transition"})

        with pytest.raises(OrderStatusUpdateError):
            repository.update_status("abc123", "delivered")


class TestEstimation:
    def test_fee_and_eta_filled_from_estimator(self, repository, http, make_response):
        http.request.return_value = make_response(
            200, [{"id": "abc123", "status": "processing", "shippingAddress": "Vila Madalena"}]
        )

        (order,) = repository.list("available")

        assert order.delivery_fee == Decimal("8.50")
        assert order.estimated_delivery_time == "20-35 min"
        assert order.tracking_code == "HRTABC123"

    def test_backend_fee_wins(self, repository, http, make_response):
        http.request.return_value = make_response(
            200, {"id": "abc123", "status": "shipped", "deliveryFee": "3.00", "shippingAddress": "Centro"}
        )

        order = repository.get_details("abc123")

        assert order.delivery_fee == Decimal("3.00")
        assert order.estimated_delivery_time == "30-45 min"

    def test_injected_estimator(self, api, courier_session, http, make_response):
        class FlatEstimator(IDeliveryEstimator):
            def estimate(self, shipping_address):
                return DeliveryEstimate(fee=Decimal("1.00"), eta="agora")

        http.request.return_value = make_response(200, [{"id": "x", "status": "pending"}])

        (order,) = CourierOrderRepository(api, FlatEstimator()).list("accepted")

        assert order.delivery_fee == Decimal("1.00")
        assert http.request.call_args.args[1].endswith("/delivery-orders/me/accepted")


class TestHistory:
    def test_consecutive_pages_are_disjoint(self, repository, http, make_response):
        http.request.side_effect = [
            make_response(200, _history_page(1, 20, 45)),
            make_response(200, _history_page(2, 20, 45)),
        ]

        first = repository.get_history(page=1, limit=20)
        second = repository.get_history(page=2, limit=20)

        first_ids = {d.order_id for d in first.items}
        second_ids = {d.order_id for d in second.items}
        assert len(first_ids) == len(second_ids) == 20
        assert first_ids.isdisjoint(second_ids)
        assert (first.has_next, first.has_prev) == (True, False)
        assert (second.has_next, second.has_prev) == (True, True)
        assert http.request.call_args.kwargs["params"] == {"page": 2, "limit": 20}

    def test_last_page(self, repository, http, make_response):
        http.request.return_value = make_response(200, _history_page(3, 20, 45))

        page = repository.get_history(page=3, limit=20)

        assert len(page.items) == 5
        assert page.has_next is False
        assert page.pagination.total_pages == 3

    def test_invalid_page_rejected_locally(self, repository, http):
        with pytest.raises(ValidationError):
            repository.get_history(page=0)

        http.request.assert_not_called()


class TestEarnings:
    def test_period_sent_as_query(self, repository, http, make_response):
        http.request.return_value = make_response(200, {"daily": [], "stats": {}})

        earnings = repository.get_earnings("month")

        assert earnings.daily == []
        assert http.request.call_args.kwargs["params"] == {"period": "month"}

    def test_unknown_period_rejected_locally(self, repository, http):
        with pytest.raises(InvalidEarningsPeriod):
            repository.get_earnings("year")

        http.request.assert_not_called()
