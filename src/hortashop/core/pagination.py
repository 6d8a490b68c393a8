"""Page metadata for paginated history-style endpoints."""

from __future__ import annotations

import math
from typing import Generic, List, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PaginationDTO(BaseModel):
    """``pagination`` block returned by the backend.

    ``has_next`` / ``has_prev`` are recomputed from ``page`` and
    ``total_pages`` when the backend omits them, and must agree with them
    when it does not.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_prev: bool

    @model_validator(mode="before")
    @classmethod
    def fill_flags(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        page = int(data.get("page") or 1)
        limit = int(data.get("limit") or 1)
        total = int(data.get("total") or 0)
        if data.get("totalPages") is None and data.get("total_pages") is None:
            data["totalPages"] = math.ceil(total / limit) if limit else 0
        total_pages = int(data.get("totalPages", data.get("total_pages")) or 0)
        if data.get("hasNext") is None and data.get("has_next") is None:
            data["hasNext"] = page < total_pages
        if data.get("hasPrev") is None and data.get("has_prev") is None:
            data["hasPrev"] = page > 1
        return data

    @model_validator(mode="after")
    def flags_match_totals(self) -> Self:
        if self.has_next != (self.page < self.total_pages):
            raise ValueError("hasNext is inconsistent with page/totalPages.")
        if self.has_prev != (self.page > 1):
            raise ValueError("hasPrev is inconsistent with page.")
        return self


class Page(BaseModel, Generic[T]):
    """A page of results together with its pagination block."""

    model_config = ConfigDict(frozen=True)

    items: List[T]
    pagination: PaginationDTO

    @property
    def has_next(self) -> bool:
        return self.pagination.has_next

    @property
    def has_prev(self) -> bool:
        return self.pagination.has_prev
