"""Notification type tags and their presentation."""

from __future__ import annotations

from typing import Dict

ORDER_DELIVERED = "order_delivered"

NOTIFICATION_ICONS: Dict[str, str] = {
    "order": "bag-outline",
    "order_shipped": "airplane-outline",
    ORDER_DELIVERED: "checkmark-circle-outline",
    "product": "pricetag-outline",
    "promotion": "gift-outline",
}
DEFAULT_NOTIFICATION_ICON = "notifications-outline"

NOTIFICATION_COLORS: Dict[str, str] = {
    "order": "#3498DB",
    "order_shipped": "#9B59B6",
    ORDER_DELIVERED: "#27AE60",
    "product": "#E67E22",
    "promotion": "#E74C3C",
}
DEFAULT_NOTIFICATION_COLOR = "#95A5A6"

# Secure-store key flagging a push token the backend has not acknowledged.
PENDING_PUSH_TOKEN_KEY = "pending_push_token"


def notification_icon(kind: str | None) -> str:
    return NOTIFICATION_ICONS.get(kind or "", DEFAULT_NOTIFICATION_ICON)


def notification_color(kind: str | None) -> str:
    return NOTIFICATION_COLORS.get(kind or "", DEFAULT_NOTIFICATION_COLOR)
