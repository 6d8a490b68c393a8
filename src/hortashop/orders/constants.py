"""Order status model.

The backend sends status strings in mixed case (``PENDING`` from some
producer endpoints, ``pending`` elsewhere, and both ``canceled`` and
``CANCELLED``).  Everything is normalized at the boundary into
``OrderStatus``; the tables below are presentation helpers only.  The
client never blocks a transition request: the backend is the authority.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Dict, FrozenSet, Optional, Tuple


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELED = "canceled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return STATUS_COLORS[self]


_ALIASES: Dict[str, OrderStatus] = {"cancelled": OrderStatus.CANCELED}

STATUS_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pendente",
    OrderStatus.PROCESSING: "Processando",
    OrderStatus.SHIPPED: "Enviado",
    OrderStatus.DELIVERED: "Entregue",
    OrderStatus.CANCELED: "Cancelado",
}

STATUS_COLORS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "#FFA500",
    OrderStatus.PROCESSING: "#007AFF",
    OrderStatus.SHIPPED: "#32D74B",
    OrderStatus.DELIVERED: "#34C759",
    OrderStatus.CANCELED: "#FF3B30",
}
UNKNOWN_STATUS_COLOR = "#8E8E93"
UNKNOWN_STATUS_LABEL = "Desconhecido"

# Buyer order timeline
TIMELINE_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pedido Recebido",
    OrderStatus.PROCESSING: "Em Preparação",
    OrderStatus.SHIPPED: "Enviado",
    OrderStatus.DELIVERED: "Entregue",
    OrderStatus.CANCELED: "Cancelado",
}
TIMELINE_ICONS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "time-outline",
    OrderStatus.PROCESSING: "construct-outline",
    OrderStatus.SHIPPED: "car-outline",
    OrderStatus.DELIVERED: "checkmark-circle-outline",
    OrderStatus.CANCELED: "close-circle-outline",
}
UNKNOWN_TIMELINE_ICON = "help-circle-outline"

# Server-side rule, mirrored for presentation: forward only, cancel from
# any state before delivery.
VALID_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}

TERMINAL_STATES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELED}
)

NOTIFY_READY = "notify_ready"

# Actions offered on the producer order screen, in display order.
PRODUCER_ACTIONS: Dict[OrderStatus, Tuple[str, ...]] = {
    OrderStatus.PENDING: (OrderStatus.PROCESSING, OrderStatus.CANCELED),
    OrderStatus.PROCESSING: (NOTIFY_READY, OrderStatus.SHIPPED),
    OrderStatus.SHIPPED: (OrderStatus.DELIVERED,),
}

COURIER_ACTIONS: Dict[OrderStatus, Tuple[str, ...]] = {
    OrderStatus.PROCESSING: (OrderStatus.SHIPPED,),
    OrderStatus.SHIPPED: (OrderStatus.DELIVERED,),
}

DELIVERY_EARNINGS_PERIODS: FrozenSet[str] = frozenset({"week", "month", "all"})

TRACKING_CODE_PREFIX = "HRT"


def normalize_status(raw: object) -> Optional[OrderStatus]:
    """Map a backend status string onto ``OrderStatus``; ``None`` if unknown."""
    if isinstance(raw, OrderStatus):
        return raw
    if not isinstance(raw, str):
        return None
    key = raw.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return OrderStatus(key)
    except ValueError:
        return None


def status_label(raw: object) -> str:
    status = normalize_status(raw)
    if status is not None:
        return status.label
    if isinstance(raw, str) and raw.strip():
        return raw
    return UNKNOWN_STATUS_LABEL


def status_color(raw: object) -> str:
    status = normalize_status(raw)
    return status.color if status is not None else UNKNOWN_STATUS_COLOR


def timeline_label(raw: object) -> str:
    status = normalize_status(raw)
    if status is not None:
        return TIMELINE_LABELS[status]
    return str(raw).upper() if raw else UNKNOWN_STATUS_LABEL


def timeline_icon(raw: object) -> str:
    status = normalize_status(raw)
    return TIMELINE_ICONS[status] if status is not None else UNKNOWN_TIMELINE_ICON


def is_terminal(raw: object) -> bool:
    return normalize_status(raw) in TERMINAL_STATES


def available_actions(raw: object, actions: Dict[OrderStatus, Tuple[str, ...]]) -> Tuple[str, ...]:
    status = normalize_status(raw)
    if status is None:
        return ()
    return tuple(str(action) for action in actions.get(status, ()))
