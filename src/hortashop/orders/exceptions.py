"""Order domain exceptions.

Raised by the role repositories and services; screens render
``user_message`` and offer a retry.
"""

from __future__ import annotations

from hortashop.core.exceptions import NetworkError, ServerError, ValidationError


class OrderLoadError(NetworkError):
    """An order list or detail could not be loaded."""

    default_message = "Não foi possível carregar os pedidos."


class OrderStatusUpdateError(ServerError):
    """The backend refused or failed a status change request."""

    default_message = "Não foi possível atualizar o status do pedido."


class OrderAcceptError(ServerError):
    """The courier could not claim the order (usually taken by someone else)."""

    default_message = "Não foi possível aceitar o pedido."


class InvalidEarningsPeriod(ValidationError):
    default_message = "Período inválido. Use 'week', 'month' ou 'all'."


class InvalidOrderStatus(ValidationError):
    """The requested target is not a known order status."""

    default_message = "Status de pedido inválido."


class TrackingUpdateError(ServerError):
    """The backend refused or failed a courier position report."""

    default_message = "Não foi possível atualizar o rastreamento do pedido."


class InvalidTrackingUpdate(ValidationError):
    """Coordinates out of range or unknown status; nothing was sent."""

    default_message = "Localização ou status de rastreamento inválido."
