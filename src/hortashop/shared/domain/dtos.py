"""Base model shared by every backend payload DTO."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for backend payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def coerce_id(v: Any) -> Any:
    """Backend ids are opaque strings; some endpoints send them as numbers."""
    return str(v) if isinstance(v, int) and not isinstance(v, bool) else v
