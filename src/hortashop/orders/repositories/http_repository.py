"""HTTP implementations of the role-scoped order repositories.

Each repository adapts one role's endpoints onto the shared contracts in
``interfaces``.  Transport and status handling live in ``ApiClient``;
what stays here is the endpoint table, the per-role user messages and the
JSON → DTO adaptation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from hortashop.core.exceptions import (
    NotFoundError,
    ServerError,
    ValidationError,
)
from hortashop.core.http import ApiClient
from hortashop.core.pagination import Page, PaginationDTO
from hortashop.core.session import Role
from hortashop.orders.dtos import (
    DeliveryHistoryItemDTO,
    EarningsDTO,
    EarningsPeriodDTO,
    NotifyReadyDTO,
    OrderDTO,
    StatusHistoryDTO,
    TrackingDTO,
    UpdateStatusDTO,
    UpdateTrackingDTO,
)
from hortashop.orders.estimation import AddressHeuristicEstimator, IDeliveryEstimator
from hortashop.orders.exceptions import (
    InvalidEarningsPeriod,
    InvalidOrderStatus,
    InvalidTrackingUpdate,
    OrderAcceptError,
    OrderLoadError,
    OrderStatusUpdateError,
    TrackingUpdateError,
)
from hortashop.orders.repositories.interfaces import (
    ICourierOrderRepository,
    IOrderRepository,
    IProducerOrderRepository,
    ITrackingRepository,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

INVALID_RESPONSE_MESSAGE = "Resposta inválida do servidor."


def _parse(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        logger.error("order.invalid_payload", model=model.__name__, error=str(exc))
        raise OrderLoadError(INVALID_RESPONSE_MESSAGE, payload=payload) from exc


def _parse_list(model: Type[M], payload: Any) -> List[M]:
    if not isinstance(payload, list):
        logger.error("order.invalid_payload", model=model.__name__, error="not a list")
        raise OrderLoadError(INVALID_RESPONSE_MESSAGE, payload=payload)
    return [_parse(model, item) for item in payload]


def _status_request(new_status: str, notes: Optional[str]) -> UpdateStatusDTO:
    try:
        return UpdateStatusDTO(status=new_status, notes=notes)
    except PydanticValidationError as exc:
        raise InvalidOrderStatus(payload={"status": new_status}) from exc


class HttpOrderRepository(IOrderRepository):
    """Shared list / detail behaviour for every role."""

    role: Role
    scopes: Dict[str, str] = {}
    default_scope: str = ""
    detail_path: str = ""
    load_error_message = "Não foi possível carregar os pedidos."
    detail_error_message = "Não foi possível carregar os detalhes do pedido."

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    @staticmethod
    def _quote(order_id: str) -> str:
        return quote(str(order_id), safe="")

    def _adapt(self, order: OrderDTO) -> OrderDTO:
        return order

    def list(self, scope: Optional[str] = None) -> List[OrderDTO]:
        scope = scope or self.default_scope
        if scope not in self.scopes:
            raise ValidationError(f"Escopo de pedidos desconhecido: {scope}.")

        log = logger.bind(role=str(self.role), scope=scope)
        log.info("order.list_requested")
        try:
            payload = self._api.get(
                self.scopes[scope],
                role=self.role,
                fallback_message=self.load_error_message,
            )
        except NotFoundError as exc:
            log.warning("order.list_not_found")
            raise OrderLoadError(
                self.load_error_message, status_code=exc.status_code, payload=exc.payload
            ) from exc
        orders = [self._adapt(order) for order in _parse_list(OrderDTO, payload)]
        log.info("order.list_loaded", count=len(orders))
        return orders

    def get_details(self, order_id: str) -> Optional[OrderDTO]:
        log = logger.bind(role=str(self.role), order_id=order_id)
        try:
            payload = self._api.get(
                self.detail_path.format(id=self._quote(order_id)),
                role=self.role,
                fallback_message=self.detail_error_message,
            )
        except NotFoundError:
            log.info("order.not_found")
            return None
        return self._adapt(_parse(OrderDTO, payload))


class BuyerOrderRepository(HttpOrderRepository):
    """Orders placed by the authenticated buyer (read only)."""

    role = Role.BUYER
    scopes = {"mine": "/orders/me"}
    default_scope = "mine"
    detail_path = "/orders/{id}"


class ProducerOrderRepository(HttpOrderRepository, IProducerOrderRepository):
    """Orders containing products of the authenticated producer."""

    role = Role.PRODUCER
    scopes = {"produced": "/producers/me/orders"}
    default_scope = "produced"
    detail_path = "/producers/me/orders/{id}"

    status_error_messages = {
        400: "Dados inválidos para atualização do status",
        403: "Você não tem permissão para atualizar este pedido",
        404: "Pedido não encontrado",
    }
    notify_error_messages = {
        400: "Dados inválidos para notificação",
        403: "Você não tem permissão para notificar este pedido",
        404: "Pedido não encontrado",
    }

    def update_status(
        self, order_id: str, new_status: str, notes: Optional[str] = None
    ) -> bool:
        dto = _status_request(new_status, notes)
        log = logger.bind(role=str(self.role), order_id=order_id, new_status=dto.status.value)
        log.info("order.status_update_requested")
        try:
            self._api.put(
                f"/producers/me/orders/{self._quote(order_id)}/status",
                role=self.role,
                json=dto.to_payload(),
                error_messages=self.status_error_messages,
                fallback_message=OrderStatusUpdateError.default_message,
            )
        except (ServerError, NotFoundError) as exc:
            log.warning("order.status_update_rejected", status_code=exc.status_code)
            raise OrderStatusUpdateError(
                exc.user_message, status_code=exc.status_code, payload=exc.payload
            ) from exc
        log.info("order.status_update_acknowledged")
        return True

    def get_status_history(self, order_id: str) -> List[StatusHistoryDTO]:
        payload = self._api.get(
            f"/producers/me/orders/{self._quote(order_id)}/status-history",
            role=self.role,
            fallback_message="Não foi possível carregar o histórico do pedido.",
        )
        return _parse_list(StatusHistoryDTO, payload)

    def notify_ready_for_pickup(
        self, order_id: str, message: Optional[str] = None
    ) -> bool:
        dto = NotifyReadyDTO(message=message)
        logger.info("order.notify_ready_requested", order_id=order_id)
        self._api.post(
            f"/producers/me/orders/{self._quote(order_id)}/notify-ready",
            role=self.role,
            json=dto.to_payload(),
            error_messages=self.notify_error_messages,
            fallback_message="Não foi possível notificar o cliente.",
        )
        return True


class CourierOrderRepository(HttpOrderRepository, ICourierOrderRepository):
    """Orders offered to, or accepted by, the authenticated courier.

    Delivery fee and ETA are filled by the injected estimator unless the
    backend already sent a fee.
    """

    role = Role.COURIER
    scopes = {
        "available": "/delivery-orders/available",
        "accepted": "/delivery-orders/me/accepted",
    }
    default_scope = "available"
    detail_path = "/delivery-orders/{id}"

    def __init__(
        self, api: ApiClient, estimator: Optional[IDeliveryEstimator] = None
    ) -> None:
        super().__init__(api)
        self._estimator = estimator or AddressHeuristicEstimator()

    def _adapt(self, order: OrderDTO) -> OrderDTO:
        estimate = self._estimator.estimate(order.shipping_address)
        return order.model_copy(
            update={
                "tracking_code": order.display_tracking_code,
                "delivery_fee": (
                    order.delivery_fee
                    if order.delivery_fee is not None
                    else estimate.fee
                ),
                "estimated_delivery_time": (
                    order.estimated_delivery_time or estimate.eta
                ),
            }
        )

    def accept(self, order_id: str) -> bool:
        log = logger.bind(role=str(self.role), order_id=order_id)
        log.info("order.accept_requested")
        try:
            payload = self._api.post(
                f"/delivery-orders/{self._quote(order_id)}/accept",
                role=self.role,
                fallback_message=OrderAcceptError.default_message,
            )
        except (ServerError, NotFoundError) as exc:
            log.warning("order.accept_rejected", status_code=exc.status_code)
            raise OrderAcceptError(
                status_code=exc.status_code, payload=exc.payload
            ) from exc

        if isinstance(payload, dict) and payload.get("success") is False:
            log.warning("order.accept_rejected", reason="success=false")
            raise OrderAcceptError(payload=payload)
        log.info("order.accepted")
        return True

    def update_status(
        self, order_id: str, new_status: str, notes: Optional[str] = None
    ) -> bool:
        dto = _status_request(new_status, notes)
        log = logger.bind(role=str(self.role), order_id=order_id, new_status=dto.status.value)
        log.info("order.status_update_requested")
        try:
            self._api.patch(
                f"/delivery-orders/{self._quote(order_id)}/status",
                role=self.role,
                json=dto.to_payload(),
                fallback_message=OrderStatusUpdateError.default_message,
            )
        except (ServerError, NotFoundError) as exc:
            log.warning("order.status_update_rejected", status_code=exc.status_code)
            raise OrderStatusUpdateError(
                status_code=exc.status_code, payload=exc.payload
            ) from exc
        log.info("order.status_update_acknowledged")
        return True

    def get_history(
        self, page: int = 1, limit: int = 20
    ) -> Page[DeliveryHistoryItemDTO]:
        if page < 1 or limit < 1:
            raise ValidationError("Página e limite devem ser maiores que zero.")
        payload = self._api.get(
            "/delivery-orders/me/history",
            role=self.role,
            params={"page": page, "limit": limit},
            fallback_message="Erro ao carregar histórico",
        )
        if not isinstance(payload, dict):
            raise OrderLoadError(INVALID_RESPONSE_MESSAGE, payload=payload)
        return Page[DeliveryHistoryItemDTO](
            items=_parse_list(DeliveryHistoryItemDTO, payload.get("deliveries") or []),
            pagination=_parse(PaginationDTO, payload.get("pagination") or {}),
        )

    def get_earnings(self, period: str = "week") -> EarningsDTO:
        try:
            EarningsPeriodDTO(period=period)
        except PydanticValidationError as exc:
            raise InvalidEarningsPeriod(payload={"period": period}) from exc
        payload = self._api.get(
            "/delivery-orders/me/earnings",
            role=self.role,
            params={"period": period},
            fallback_message="Erro ao carregar ganhos",
        )
        return _parse(EarningsDTO, payload)


class HttpTrackingRepository(ITrackingRepository):
    """``/tracking`` endpoints.

    Reading is public, like the product reviews; position reports are sent
    with the courier token.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def get_tracking(self, order_id: str) -> Optional[TrackingDTO]:
        log = logger.bind(order_id=order_id)
        try:
            payload = self._api.get(
                f"/tracking/{quote(str(order_id), safe='')}",
                fallback_message="Não foi possível carregar o rastreamento do pedido.",
            )
        except NotFoundError:
            log.info("tracking.not_found")
            return None
        return _parse(TrackingDTO, payload)

    def update_tracking(
        self, order_id: str, latitude: float, longitude: float, status: str
    ) -> bool:
        try:
            dto = UpdateTrackingDTO(latitude=latitude, longitude=longitude, status=status)
        except PydanticValidationError as exc:
            raise InvalidTrackingUpdate(
                payload={"latitude": latitude, "longitude": longitude, "status": status}
            ) from exc

        log = logger.bind(role=str(Role.COURIER), order_id=order_id, status=dto.status.value)
        log.info("tracking.update_requested")
        try:
            self._api.post(
                f"/tracking/{quote(str(order_id), safe='')}/update",
                role=Role.COURIER,
                json=dto.to_payload(),
                fallback_message=TrackingUpdateError.default_message,
            )
        except (ServerError, NotFoundError) as exc:
            log.warning("tracking.update_rejected", status_code=exc.status_code)
            raise TrackingUpdateError(
                status_code=exc.status_code, payload=exc.payload
            ) from exc
        log.info("tracking.update_acknowledged")
        return True
