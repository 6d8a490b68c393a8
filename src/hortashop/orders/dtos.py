"""Order DTOs.

Immutable (``frozen=True``) Pydantic v2 models adapting the backend's
camelCase JSON into the client view-model shape.  One ``OrderDTO`` serves
all three roles; fields a role's endpoint does not send stay at their
defaults.

- ``OrderItemDTO``: a line item (buyer, producer and courier shapes).
- ``OrderDTO``: summary or detail of an order.
- ``StatusHistoryDTO``: one entry of the producer status history.
- ``UpdateStatusDTO`` / ``NotifyReadyDTO``: request bodies.
- ``DeliveryHistoryItemDTO`` / ``EarningsDTO``: courier reports.
- ``TrackingDTO`` / ``UpdateTrackingDTO``: live tracking and courier position reports.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from hortashop.orders.constants import (
    DELIVERY_EARNINGS_PERIODS,
    TERMINAL_STATES,
    TRACKING_CODE_PREFIX,
    OrderStatus,
    normalize_status,
    status_color,
    status_label,
    timeline_icon,
    timeline_label,
)
from hortashop.shared.domain.dtos import CamelModel


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemDTO(CamelModel):
    id: str
    product_id: Optional[str] = None
    product_name: str = Field(
        default="",
        validation_alias=AliasChoices("productName", "name", "product_name"),
    )
    product_image: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("productImage", "image", "product_image"),
    )
    quantity: int = Field(ge=0)
    unit_price: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("unitPrice", "price", "unit_price"),
    )
    total_price: Optional[Decimal] = None
    producer_id: Optional[str] = None
    producer_name: Optional[str] = None
    notes: Optional[str] = None
    reviewed: bool = False

    @field_validator("id", "product_id", "producer_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def subtotal(self) -> Decimal:
        if self.total_price is not None:
            return self.total_price
        return self.unit_price * self.quantity


class OrderDTO(CamelModel):
    """An order as seen by one role.

    ``status`` is the canonical enum, or ``None`` when the backend sent a
    value the client does not know; ``raw_status`` always keeps what was
    received.
    """

    id: str
    status: Optional[OrderStatus] = None
    raw_status: str = ""
    user_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: str = ""
    total_price: Decimal = Decimal("0")
    payment_method: Optional[str] = None
    tracking_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemDTO] = Field(default_factory=list)
    item_count: Optional[int] = None
    delivery_fee: Optional[Decimal] = None
    estimated_delivery_time: Optional[str] = None
    special_instructions: str = ""
    ready_for_pickup: bool = False

    @model_validator(mode="before")
    @classmethod
    def split_status(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("status")
            if "rawStatus" not in data and "raw_status" not in data:
                data["rawStatus"] = raw if isinstance(raw, str) else ""
            data["status"] = normalize_status(raw)
            if data.get("specialInstructions") is None:
                data.pop("specialInstructions", None)
        return data

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def label(self) -> str:
        return status_label(self.status or self.raw_status)

    @property
    def color(self) -> str:
        return status_color(self.status or self.raw_status)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def display_tracking_code(self) -> str:
        """Tracking code, or the ``HRT`` + id prefix fallback couriers use."""
        if self.tracking_code:
            return self.tracking_code
        return f"{TRACKING_CODE_PREFIX}{self.id[:6].upper()}"

    @property
    def total_items(self) -> int:
        if self.item_count is not None:
            return self.item_count
        return sum(item.quantity for item in self.items)


class StatusHistoryDTO(CamelModel):
    id: str
    status: Optional[OrderStatus] = None
    previous_status: Optional[OrderStatus] = None
    notes: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("status", "previous_status", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Optional[OrderStatus]:
        return normalize_status(v)

    @field_validator("id", "updated_by", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class DeliveryHistoryItemDTO(CamelModel):
    id: str
    order_id: str
    tracking_code: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: str = ""
    total_price: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("0")
    distance: float = 0.0
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemDTO] = Field(default_factory=list)
    special_instructions: Optional[str] = None


class EarningsDeliveryDTO(CamelModel):
    id: str
    order_id: Optional[str] = None
    customer_name: Optional[str] = None
    delivery_fee: Decimal = Decimal("0")
    distance: float = 0.0
    completed_at: Optional[datetime] = None
    address: Optional[str] = None


class DailyEarningsDTO(CamelModel):
    day: date = Field(validation_alias=AliasChoices("date", "day"))
    total_earnings: Decimal = Decimal("0")
    delivery_count: int = 0
    deliveries: List[EarningsDeliveryDTO] = Field(default_factory=list)


class EarningsStatsDTO(CamelModel):
    total_earnings: Decimal = Decimal("0")
    total_deliveries: int = 0
    average_earnings_per_delivery: Decimal = Decimal("0")
    current_month_earnings: Decimal = Decimal("0")


class EarningsDTO(CamelModel):
    daily: List[DailyEarningsDTO] = Field(default_factory=list)
    stats: EarningsStatsDTO = Field(default_factory=EarningsStatsDTO)

    def for_day(self, day: date) -> Decimal:
        for entry in self.daily:
            if entry.day == day:
                return entry.total_earnings
        return Decimal("0")


class GeoPointDTO(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class TimelineEntryDTO(CamelModel):
    """One step of the buyer-facing order timeline."""

    id: Optional[str] = None
    status: Optional[OrderStatus] = None
    raw_status: str = ""
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def split_status(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("status")
            data.setdefault("rawStatus", raw if isinstance(raw, str) else "")
            data["status"] = normalize_status(raw)
        return data

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def label(self) -> str:
        return timeline_label(self.status or self.raw_status)

    @property
    def icon(self) -> str:
        return timeline_icon(self.status or self.raw_status)


class TrackingDTO(CamelModel):
    """Live tracking of one order: current status, timeline, ETA and position."""

    current_status: Optional[OrderStatus] = None
    raw_status: str = ""
    timeline: List[TimelineEntryDTO] = Field(default_factory=list)
    estimated_time: Optional[str] = None
    location: Optional[GeoPointDTO] = None

    @model_validator(mode="before")
    @classmethod
    def split_status(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            raw = data.get("currentStatus", data.get("current_status"))
            data.setdefault("rawStatus", raw if isinstance(raw, str) else "")
            data["currentStatus"] = normalize_status(raw)
            data.pop("current_status", None)
            if data.get("timeline") is None:
                data.pop("timeline", None)
        return data

    @property
    def label(self) -> str:
        return status_label(self.current_status or self.raw_status)

    def is_current(self, entry: TimelineEntryDTO) -> bool:
        if self.current_status is not None:
            return entry.status is self.current_status
        return bool(self.raw_status) and entry.raw_status.lower() == self.raw_status.lower()


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class UpdateStatusDTO(BaseModel):
    """Status change request body.

    Only the target status (and notes, when given) is sent.  Whether the
    transition is legal is for the backend to decide.
    """

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> OrderStatus:
        status = normalize_status(v)
        if status is None:
            raise ValueError(f"Unknown order status: {v!r}.")
        return status

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"status": self.status.value}
        if self.notes:
            payload["notes"] = self.notes
        return payload


class NotifyReadyDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message} if self.message else {}


class EarningsPeriodDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: str = "week"

    @model_validator(mode="after")
    def known_period(self) -> Self:
        if self.period not in DELIVERY_EARNINGS_PERIODS:
            raise ValueError(f"Unknown earnings period: {self.period!r}.")
        return self


class UpdateTrackingDTO(BaseModel):
    """Courier position report for one order."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> OrderStatus:
        status = normalize_status(v)
        if status is None:
            raise ValueError(f"Unknown order status: {v!r}.")
        return status

    def to_payload(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status.value,
        }
