"""Unit tests for the role-scoped order repositories (shared contract)."""

from __future__ import annotations

from decimal import Decimal

import pytest

from hortashop.core.exceptions import AuthError, NetworkError, ServerError, ValidationError
from hortashop.core.session import Role
from hortashop.orders.exceptions import (
    InvalidOrderStatus,
    OrderLoadError,
    OrderStatusUpdateError,
)
from hortashop.orders.repositories import (
    BuyerOrderRepository,
    CourierOrderRepository,
    ProducerOrderRepository,
)

pytestmark = pytest.mark.unit

ORDER = {
    "id": "abc123",
    "status": "PROCESSING",
    "shippingAddress": "Av. Paulista, 1000",
    "totalPrice": "42.00",
    "items": [],
}


@pytest.fixture()
def all_sessions(sessions):
    sessions.open(Role.BUYER, "user-token")
    sessions.open(Role.COURIER, "courier-token")
    return sessions


@pytest.fixture(params=["buyer", "producer", "courier"])
def repository(request, api):
    return {
        "buyer": BuyerOrderRepository,
        "producer": ProducerOrderRepository,
        "courier": CourierOrderRepository,
    }[request.param](api)


class TestSharedContract:
    def test_get_details_returns_none_on_404(self, repository, all_sessions, http, make_response):
        http.request.return_value = make_response(404, {"message": "Not found"})

        assert repository.get_details("missing-id") is None

    def test_get_details_raises_on_other_failures(
        self, repository, all_sessions, http, make_response
    ):
        http.request.return_value = make_response(500, {"message": "boom"})

        with pytest.raises(ServerError):
            repository.get_details("abc123")

    def test_get_details_parses_order(self, repository, all_sessions, http, make_response):
        http.request.return_value = make_response(200, ORDER)

        order = repository.get_details("abc123")

        assert order.id == "abc123"
        assert order.total_price == Decimal("42.00")

    def test_list_without_token_sends_nothing(self, repository, http):
        with pytest.raises(AuthError):
            repository.list()

        http.request.assert_not_called()

    def test_list_invalidates_token_on_401(
        self, repository, all_sessions, http, make_response
    ):
        http.request.return_value = make_response(401)

        with pytest.raises(AuthError):
            repository.list()

        assert all_sessions.get(repository.role) is None

    def test_unknown_scope_rejected_locally(self, repository, all_sessions, http):
        with pytest.raises(ValidationError):
            repository.list("everything")

        http.request.assert_not_called()

    def test_list_404_is_a_load_error(self, repository, all_sessions, http, make_response):
        http.request.return_value = make_response(404, {"message": "Not found"})

        with pytest.raises(NetworkError) as exc_info:
            repository.list()

        assert isinstance(exc_info.value, OrderLoadError)
        assert exc_info.value.user_message == repository.load_error_message
        assert exc_info.value.status_code == 404

    def test_malformed_list_payload(self, repository, all_sessions, http, make_response):
        http.request.return_value = make_response(200, {"orders": []})

        with pytest.raises(OrderLoadError):
            repository.list()


@pytest.mark.parametrize(
    "repository_class, path",
    [
        (BuyerOrderRepository, "/orders/me"),
        (ProducerOrderRepository, "/producers/me/orders"),
        (CourierOrderRepository, "/delivery-orders/available"),
    ],
)
def test_default_list_endpoint(repository_class, path, api, all_sessions, http, make_response):
    http.request.return_value = make_response(200, [ORDER])

    orders = repository_class(api).list()

    assert [o.id for o in orders] == ["abc123"]
    method, url = http.request.call_args.args
    assert method == "GET"
    assert url.endswith(path)


def test_order_id_is_url_quoted(api, all_sessions, http, make_response):
    http.request.return_value = make_response(200, ORDER)

    BuyerOrderRepository(api).get_details("a/b c")

    assert http.request.call_args.args[1].endswith("/orders/a%2Fb%20c")


class TestProducerStatusUpdate:
    def test_sends_only_the_target_status(self, api, all_sessions, http, make_response):
        http.request.return_value = make_response(200, {"id": "abc123", "status": "shipped"})

        result = ProducerOrderRepository(api).update_status("abc123", "SHIPPED")

        assert result is True
        method, url = http.request.call_args.args
        assert method == "PUT"
        assert url.endswith("/producers/me/orders/abc123/status")
        assert http.request.call_args.kwargs["json"] == {"status": "shipped"}

    def test_illegal_transition_is_still_requested(self, api, all_sessions, http, make_response):
        http.request.return_value = make_response(200, {})

        ProducerOrderRepository(api).update_status("abc123", "pending")

        assert http.request.call_args.kwargs["json"] == {"status": "pending"}

    @pytest.mark.parametrize(
        "status_code, message",
        [
            (400, "Dados inválidos para atualização do status"),
            (403, "Você não tem permissão para atualizar este pedido"),
            (404, "Pedido não encontrado"),
        ],
    )
    def test_rejections_map_to_messages(
        self, api, all_sessions, http, make_response, status_code, message
    ):
        http.request.return_value = make_response(status_code, {"message": "raw"})

        with pytest.raises(OrderStatusUpdateError) as exc_info:
            ProducerOrderRepository(api).update_status("abc123", "shipped")

        assert exc_info.value.user_message == message

    def test_unknown_target_rejected_locally(self, api, all_sessions, http):
        with pytest.raises(InvalidOrderStatus):
            ProducerOrderRepository(api).update_status("abc123", "teleported")

        http.request.assert_not_called()


def test_producer_status_history(api, all_sessions, http, make_response):
    http.request.return_value = make_response(
        200,
        [
            {"id": 1, "status": "PROCESSING", "previousStatus": "PENDING"},
            {"id": 2, "status": "SHIPPED", "previousStatus": "PROCESSING"},
        ],
    )

    history = ProducerOrderRepository(api).get_status_history("abc123")

    assert [h.status.value for h in history] == ["processing", "shipped"]
    assert http.request.call_args.args[1].endswith("/producers/me/orders/abc123/status-history")


def test_producer_notify_ready(api, all_sessions, http, make_response):
    http.request.return_value = make_response(201, {"success": True})

    assert ProducerOrderRepository(api).notify_ready_for_pickup("abc123", "Pode buscar")

    method, url = http.request.call_args.args
    assert method == "POST"
    assert url.endswith("/producers/me/orders/abc123/notify-ready")
    assert http.request.call_args.kwargs["json"] == {"message": "Pode buscar"}
