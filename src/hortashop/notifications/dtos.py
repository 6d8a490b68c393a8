"""Notification DTOs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from hortashop.notifications.constants import notification_color, notification_icon
from hortashop.orders.constants import OrderStatus, normalize_status
from hortashop.shared.domain.dtos import CamelModel, coerce_id


class NotificationDTO(CamelModel):
    id: str
    title: str = ""
    body: str = ""
    read: bool = False
    type: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, v: Any) -> Any:
        return v if v is not None else {}

    @property
    def order_id(self) -> Optional[str]:
        value = coerce_id(self.data.get("orderId"))
        return value or None

    @property
    def order_status(self) -> Optional[OrderStatus]:
        return normalize_status(self.data.get("status"))

    @property
    def icon(self) -> str:
        return notification_icon(self.type)

    @property
    def color(self) -> str:
        return notification_color(self.type)


class RegisterPushTokenDTO(CamelModel):
    token: str = Field(min_length=1)
    platform: str = "android"
