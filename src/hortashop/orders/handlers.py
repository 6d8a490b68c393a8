"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from hortashop.orders.events import OrderAccepted, OrderReadyForPickup, OrderStatusChanged
from hortashop.shared.domain.bus import IEventHandler
from hortashop.shared.infrastructure.bus import InMemoryEventBus

logger = structlog.get_logger(__name__)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            f"Status do pedido {event.aggregate_id} atualizado para {event.new_status}",
            order_id=event.aggregate_id,
            new_status=event.new_status,
            role=event.role,
        )


class OrderAcceptedHandler(IEventHandler[OrderAccepted]):
    def handle(self, event: OrderAccepted) -> None:
        logger.info(
            f"Pedido {event.aggregate_id} aceito para entrega",
            order_id=event.aggregate_id,
        )


class OrderReadyForPickupHandler(IEventHandler[OrderReadyForPickup]):
    def handle(self, event: OrderReadyForPickup) -> None:
        logger.info(
            f"Pedido {event.aggregate_id} pronto para coleta",
            order_id=event.aggregate_id,
        )


order_status_changed_handler = OrderStatusChangedHandler()
order_accepted_handler = OrderAcceptedHandler()
order_ready_for_pickup_handler = OrderReadyForPickupHandler()


def register_order_handlers(bus: InMemoryEventBus) -> None:
    bus.subscribe(OrderStatusChanged, order_status_changed_handler)
    bus.subscribe(OrderAccepted, order_accepted_handler)
    bus.subscribe(OrderReadyForPickup, order_ready_for_pickup_handler)
