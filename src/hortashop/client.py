"""Composition root.

Builds one ``ApiClient`` over a shared ``SessionManager`` and wires every
repository and service on top of it.  Order event handlers are
subscribed to the bus; subscribing the same handler twice is a no-op.
"""

from __future__ import annotations

from functools import cached_property
from typing import Optional

import requests

from hortashop.accounts.services import AuthService
from hortashop.core.http import ApiClient
from hortashop.core.session import ITokenStore, SessionManager
from hortashop.core.sync import BackgroundSyncQueue
from hortashop.notifications.push import IPushMessaging, PushTokenRegistrar
from hortashop.notifications.repositories import HttpNotificationRepository
from hortashop.notifications.services import NotificationService
from hortashop.orders.estimation import IDeliveryEstimator
from hortashop.orders.handlers import register_order_handlers
from hortashop.orders.repositories import (
    BuyerOrderRepository,
    CourierOrderRepository,
    HttpTrackingRepository,
    ProducerOrderRepository,
)
from hortashop.orders.services import (
    BuyerOrderService,
    CourierWorkspace,
    OrderTrackingService,
    ProducerDashboardService,
    ProducerOrderService,
)
from hortashop.reviews.repositories import HttpReviewRepository
from hortashop.reviews.services import ReviewService
from hortashop.shared.infrastructure.bus import InMemoryEventBus
from hortashop.shared.infrastructure.bus import event_bus as default_event_bus


class HortaShopClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        store: Optional[ITokenStore] = None,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        bus: Optional[InMemoryEventBus] = None,
        estimator: Optional[IDeliveryEstimator] = None,
        sync_queue: Optional[BackgroundSyncQueue] = None,
    ) -> None:
        self.sessions = SessionManager(store)
        self.api = ApiClient(self.sessions, base_url=base_url, timeout=timeout, http=http)
        self.bus = bus or default_event_bus
        self.sync_queue = sync_queue or BackgroundSyncQueue()
        self._estimator = estimator
        register_order_handlers(self.bus)

    @cached_property
    def auth(self) -> AuthService:
        return AuthService(self.api)

    @cached_property
    def buyer_orders(self) -> BuyerOrderService:
        return BuyerOrderService(BuyerOrderRepository(self.api))

    @cached_property
    def producer_orders(self) -> ProducerOrderService:
        return ProducerOrderService(ProducerOrderRepository(self.api), self.bus)

    @cached_property
    def producer_dashboard(self) -> ProducerDashboardService:
        return ProducerDashboardService(ProducerOrderRepository(self.api))

    @cached_property
    def courier(self) -> CourierWorkspace:
        return CourierWorkspace(
            CourierOrderRepository(self.api, self._estimator), self.bus
        )

    @cached_property
    def tracking(self) -> OrderTrackingService:
        return OrderTrackingService(HttpTrackingRepository(self.api))

    @cached_property
    def reviews(self) -> ReviewService:
        return ReviewService(HttpReviewRepository(self.api))

    @cached_property
    def notifications(self) -> NotificationService:
        return NotificationService(HttpNotificationRepository(self.api), self.sync_queue)

    def push_registrar(self, messaging: IPushMessaging) -> PushTokenRegistrar:
        return PushTokenRegistrar(
            messaging,
            HttpNotificationRepository(self.api),
            self.sync_queue,
            self.sessions.store,
        )

    def close(self, timeout: Optional[float] = None) -> None:
        """Drain the background sync queue and stop its worker."""
        self.sync_queue.close(timeout)
