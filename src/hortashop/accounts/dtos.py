"""Account DTOs.

- ``LoginDTO``: credentials for either login endpoint.
- ``RegisterBuyerDTO`` / ``RegisterCourierDTO``: sign-up bodies; the
  courier's CPF is sanitised and checked with *validate-docbr*.
- ``UserProfileDTO`` / ``DeliveryManDTO``: account read models.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field, field_validator
from validate_docbr import CPF

from hortashop.shared.domain.dtos import CamelModel, coerce_id


class LoginDTO(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RegisterBuyerDTO(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RegisterCourierDTO(CamelModel):
    """Courier sign-up.

    ``cpf`` accepts formatted or raw input and is sent digits only.
    """

    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: str = Field(min_length=1)
    cpf: str
    cnh_number: str = Field(min_length=1)

    @field_validator("cpf", mode="before")
    @classmethod
    def sanitize_cpf(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        return re.sub(r"\D", "", v)

    @field_validator("cpf")
    @classmethod
    def validate_cpf(cls, v: str) -> str:
        if not CPF().validate(v):
            raise ValueError("Invalid CPF number.")
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserProfileDTO(CamelModel):
    id: str
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)


class DeliveryManDTO(CamelModel):
    id: str
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    cpf: Optional[str] = None
    cnh_number: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[str] = None
    vehicle_plate: Optional[str] = None
    vehicle_color: Optional[str] = None
    is_active: bool = True
    is_available: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _ids(cls, v: Any) -> Any:
        return coerce_id(v)

    @field_validator("vehicle_year", mode="before")
    @classmethod
    def _year(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v
