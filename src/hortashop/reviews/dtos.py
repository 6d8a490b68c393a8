"""Review DTOs.

- ``CreateReviewDTO``: submission body; the rating range is checked here,
  before any request is built.
- ``ReviewDTO`` / ``ProductReviewsDTO``: backend output.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from hortashop.shared.domain.dtos import CamelModel, coerce_id

MIN_RATING = 1
MAX_RATING = 5


class CreateReviewDTO(CamelModel):
    """A buyer's rating of one product, optionally tied to an order item.

    Optional fields left as ``None`` are not sent.
    """

    product_id: str
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING, strict=True)
    comment: Optional[str] = None
    order_item_id: Optional[str] = None
    producer_id: Optional[str] = None
    producer_rating: Optional[int] = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    producer_comment: Optional[str] = None
    order_rating: Optional[int] = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    order_comment: Optional[str] = None

    @field_validator("product_id", "order_item_id", "producer_id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)

    @field_validator("comment", mode="before")
    @classmethod
    def _blank_comment(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ReviewDTO(CamelModel):
    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    product_id: str
    product_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    order_item_id: Optional[str] = None
    producer_id: Optional[str] = None
    producer_name: Optional[str] = None
    producer_rating: Optional[int] = None
    producer_comment: Optional[str] = None
    order_rating: Optional[int] = None
    order_comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "user_id", "product_id", "order_item_id", "producer_id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)


class ProductReviewsDTO(CamelModel):
    product_id: str
    product_name: Optional[str] = None
    average_rating: Decimal = Decimal("0")
    total_reviews: int = 0
    reviews: List[ReviewDTO] = Field(default_factory=list)

    @field_validator("product_id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)
