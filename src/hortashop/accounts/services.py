"""Authentication use cases.

Buyer and producer authenticate against ``/auth`` and share one stored
token; the courier authenticates against ``/delivery-auth`` with its own.
Logging out one role leaves the other session untouched.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar
from urllib.parse import parse_qs, urlparse

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from hortashop.accounts.dtos import (
    DeliveryManDTO,
    LoginDTO,
    RegisterBuyerDTO,
    RegisterCourierDTO,
    UserProfileDTO,
)
from hortashop.accounts.exceptions import (
    InvalidCredentials,
    InvalidRegistrationData,
    LoginError,
    RegistrationError,
)
from hortashop.core.exceptions import AuthError, NetworkError, ServerError, ValidationError
from hortashop.core.http import ApiClient
from hortashop.core.session import Role, Session

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _build(model: Type[M], error: Type[ValidationError], **data: Any) -> M:
    try:
        return model(**data)
    except PydanticValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise error(payload={"fields": fields}) from exc


def _parse(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise NetworkError("Resposta inválida do servidor.", payload=payload) from exc


class AuthService:
    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._sessions = api.sessions

    # ------------------------------------------------------------------
    # Buyer / producer
    # ------------------------------------------------------------------

    def login_buyer(self, email: str, password: str, role: Role = Role.BUYER) -> Session:
        """Log in through ``/auth/login`` and store ``access_token``."""
        if role == Role.COURIER:
            raise ValueError("Couriers log in with login_courier().")
        credentials = _build(
            LoginDTO, ValidationError, email=email, password=password
        )
        payload = self._login("/auth/login", credentials)
        token = payload.get("access_token") if isinstance(payload, dict) else None
        return self._sessions.open(role, token)

    def register_buyer(self, **data: Any) -> UserProfileDTO:
        dto = _build(RegisterBuyerDTO, InvalidRegistrationData, **data)
        payload = self._register("/auth/register", dto)
        return _parse(UserProfileDTO, payload)

    def get_profile(self, role: Role = Role.BUYER) -> UserProfileDTO:
        payload = self._api.get(
            "/auth/profile", role=role, fallback_message="Erro ao buscar perfil"
        )
        return _parse(UserProfileDTO, payload)

    def handle_oauth_callback(self, url: str) -> Optional[Session]:
        """Store the token carried by an OAuth redirect URL.

        A callback without a token clears any buyer session left behind.
        """
        token = (parse_qs(urlparse(url).query).get("token") or [None])[0]
        if not token:
            logger.warning("auth.oauth_callback_without_token")
            self._sessions.close(Role.BUYER)
            return None
        return self._sessions.open(Role.BUYER, token)

    # ------------------------------------------------------------------
    # Courier
    # ------------------------------------------------------------------

    def login_courier(self, email: str, password: str) -> DeliveryManDTO:
        credentials = _build(
            LoginDTO, ValidationError, email=email, password=password
        )
        payload = self._login("/delivery-auth/login", credentials)
        if not isinstance(payload, dict):
            raise LoginError(payload=payload)
        self._sessions.open(Role.COURIER, payload.get("token"))
        return _parse(DeliveryManDTO, payload.get("user") or {})

    def register_courier(self, **data: Any) -> DeliveryManDTO:
        dto = _build(RegisterCourierDTO, InvalidRegistrationData, **data)
        payload = self._register("/delivery-auth/register", dto)
        return _parse(DeliveryManDTO, payload)

    def get_courier_profile(self) -> DeliveryManDTO:
        payload = self._api.get(
            "/delivery-auth/profile",
            role=Role.COURIER,
            fallback_message="Erro ao obter perfil",
        )
        return _parse(DeliveryManDTO, payload)

    # ------------------------------------------------------------------
    # Common
    # ------------------------------------------------------------------

    def logout(self, role: Role) -> None:
        self._sessions.close(role)

    def is_authenticated(self, role: Role) -> bool:
        return self._sessions.is_authenticated(role)

    def _login(self, path: str, credentials: LoginDTO) -> Any:
        log = logger.bind(path=path)
        try:
            return self._api.post(
                path,
                json=credentials.to_payload(),
                fallback_message=LoginError.default_message,
            )
        except AuthError as exc:
            log.info("auth.login_rejected")
            raise InvalidCredentials(
                status_code=exc.status_code, payload=exc.payload
            ) from exc
        except ServerError as exc:
            log.warning("auth.login_failed", status_code=exc.status_code)
            raise LoginError(
                exc.user_message, status_code=exc.status_code, payload=exc.payload
            ) from exc

    def _register(self, path: str, dto: Any) -> Any:
        try:
            return self._api.post(
                path,
                json=dto.to_payload(),
                fallback_message=RegistrationError.default_message,
            )
        except ServerError as exc:
            logger.warning("auth.register_failed", path=path, status_code=exc.status_code)
            raise RegistrationError(
                exc.user_message, status_code=exc.status_code, payload=exc.payload
            ) from exc
