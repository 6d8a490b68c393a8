"""End-to-end flows through the composed client over a mocked transport.

Covers:
- Buyer without a token: no request issued.
- Courier accepts a taken order: error, "my orders" unchanged.
- Courier accepts successfully: lists re-fetched, event handled.
- Buyer reviews a delivered item.
- Push token registration on login.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from structlog.testing import capture_logs

from hortashop.client import HortaShopClient
from hortashop.core.exceptions import AuthError
from hortashop.core.session import InMemoryTokenStore, Role
from hortashop.core.sync import BackgroundSyncQueue
from hortashop.notifications.push import IPushMessaging, PushRegistrationState
from hortashop.orders.exceptions import OrderAcceptError
from hortashop.shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.integration


class Backend:
    """Routes ``(method, path)`` to canned responses."""

    def __init__(self, make_response):
        self._make_response = make_response
        self.routes = {}
        self.calls = []

    def on(self, method, path, status_code=200, payload=None):
        self.routes[(method, path)] = (status_code, payload)

    def __call__(self, method, url, **kwargs):
        path = url.replace("http://api.hortashop.test", "")
        self.calls.append((method, path, kwargs))
        status_code, payload = self.routes.get((method, path), (404, {"message": "Not Found"}))
        return self._make_response(status_code, payload)


@pytest.fixture()
def backend(make_response):
    return Backend(make_response)


@pytest.fixture()
def client(backend):
    http = MagicMock(spec=requests.Session)
    http.request.side_effect = backend
    client = HortaShopClient(
        base_url="http://api.hortashop.test",
        store=InMemoryTokenStore(),
        http=http,
        bus=InMemoryEventBus(),
        sync_queue=BackgroundSyncQueue(max_attempts=2, sleep=lambda _: None),
    )
    yield client
    client.close(timeout=5)


def test_buyer_without_token_issues_no_request(client, backend):
    with pytest.raises(AuthError):
        client.buyer_orders.list_orders()

    assert backend.calls == []


def test_taken_order_is_not_added_to_my_orders(client, backend):
    backend.on("POST", "/delivery-auth/login", 200, {"token": "jwt-c", "user": {"id": 1}})
    backend.on("GET", "/delivery-orders/available", 200, [{"id": "abc123", "status": "processing"}])
    backend.on("GET", "/delivery-orders/me/accepted", 200, [{"id": "o9", "status": "shipped"}])
    backend.on("POST", "/delivery-orders/abc123/accept", 409, {"message": "Order already taken"})

    client.auth.login_courier("carlos@hortashop.com.br", "s3cret")
    client.courier.refresh()

    with pytest.raises(OrderAcceptError) as exc_info:
        client.courier.accept("abc123")

    assert exc_info.value.user_message == "Não foi possível aceitar o pedido."
    assert [o.id for o in client.courier.my_orders] == ["o9"]


def test_successful_accept_refetches_and_logs(client, backend):
    client.sessions.open(Role.COURIER, "jwt-c")
    backend.on("POST", "/delivery-orders/abc123/accept", 201, {"success": True})
    backend.on("GET", "/delivery-orders/available", 200, [])
    backend.on(
        "GET",
        "/delivery-orders/me/accepted",
        200,
        [{"id": "abc123", "status": "processing", "shippingAddress": "Av. Paulista"}],
    )

    with capture_logs() as logs:
        client.courier.accept("abc123")

    (order,) = client.courier.my_orders
    assert order.id == "abc123"
    assert str(order.delivery_fee) == "12.50"
    assert any("aceito para entrega" in entry["event"] for entry in logs)


def test_buyer_reviews_delivered_item(client, backend):
    backend.on("POST", "/auth/login", 201, {"access_token": "jwt-b"})
    backend.on(
        "GET",
        "/orders/o1",
        200,
        {
            "id": "o1",
            "status": "DELIVERED",
            "items": [{"id": "i1", "productId": "p1", "quantity": 1, "reviewed": False}],
        },
    )
    backend.on("POST", "/reviews", 201, {"id": "r1", "productId": "p1", "rating": 5})

    client.auth.login_buyer("ana@hortashop.com.br", "s3cret")
    order = client.buyer_orders.get_order("o1")
    review = client.reviews.review_item(order, order.items[0], 5)

    assert review.id == "r1"
    method, path, kwargs = backend.calls[-1]
    assert (method, path) == ("POST", "/reviews")
    assert kwargs["json"] == {"productId": "p1", "rating": 5, "orderItemId": "i1"}


def test_missing_order_is_none_for_buyer(client, backend):
    client.sessions.open(Role.BUYER, "jwt-b")

    assert client.buyer_orders.get_order("nope") is None


def test_push_token_registered_after_login(client, backend):
    class GrantingMessaging(IPushMessaging):
        platform = "ios"

        def has_permission(self):
            return True

        def request_permission(self):
            return True

        def get_token(self):
            return "apns-1"

        def on_token_refresh(self, callback):
            return lambda: None

    client.sessions.open(Role.BUYER, "jwt-b")
    backend.on("POST", "/notifications/register-token", 201, {})

    registrar = client.push_registrar(GrantingMessaging())

    registrar.initialize()

    assert client.sync_queue.wait_idle(timeout=5)
    assert registrar.state is PushRegistrationState.TOKEN_REGISTERED
    method, path, kwargs = backend.calls[-1]
    assert path == "/notifications/register-token"
    assert kwargs["json"] == {"token": "apns-1", "platform": "ios"}
