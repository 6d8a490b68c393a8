"""HTTP implementation of the notification repository."""

from __future__ import annotations

from urllib.parse import quote

import structlog
from pydantic import ValidationError as PydanticValidationError

from hortashop.core.exceptions import NetworkError, ValidationError
from hortashop.core.http import ApiClient
from hortashop.core.pagination import Page, PaginationDTO
from hortashop.core.session import Role
from hortashop.notifications.dtos import NotificationDTO, RegisterPushTokenDTO
from hortashop.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class HttpNotificationRepository(INotificationRepository):
    """Notifications of the user holding the ``role`` token."""

    def __init__(self, api: ApiClient, role: Role = Role.BUYER) -> None:
        self._api = api
        self.role = role

    @staticmethod
    def _path(notification_id: str) -> str:
        return f"/notifications/{quote(str(notification_id), safe='')}"

    def list(self, page: int = 1, limit: int = 20) -> Page[NotificationDTO]:
        if page < 1 or limit < 1:
            raise ValidationError("Página e limite devem ser maiores que zero.")
        payload = self._api.get(
            "/notifications",
            role=self.role,
            params={"page": page, "limit": limit},
            fallback_message="Não foi possível carregar as notificações.",
        )
        payload = payload if isinstance(payload, dict) else {}
        try:
            return Page[NotificationDTO](
                items=[
                    NotificationDTO.model_validate(item)
                    for item in payload.get("notifications") or []
                ],
                pagination=PaginationDTO.model_validate(
                    {
                        "page": payload.get("page") or page,
                        "limit": limit,
                        "total": payload.get("total") or 0,
                        "totalPages": payload.get("totalPages"),
                    }
                ),
            )
        except PydanticValidationError as exc:
            logger.error("notification.invalid_payload", error=str(exc))
            raise NetworkError("Resposta inválida do servidor.", payload=payload) from exc

    def get_unread_count(self) -> int:
        payload = self._api.get("/notifications/unread-count", role=self.role)
        if isinstance(payload, dict):
            return int(payload.get("count") or 0)
        return 0

    def mark_read(self, notification_id: str) -> bool:
        self._api.post(f"{self._path(notification_id)}/mark-read", role=self.role)
        return True

    def mark_all_read(self) -> bool:
        self._api.post("/notifications/mark-all-read", role=self.role)
        return True

    def register_token(self, token: str, platform: str) -> bool:
        dto = RegisterPushTokenDTO(token=token, platform=platform)
        self._api.post(
            "/notifications/register-token",
            role=self.role,
            json=dto.model_dump(by_alias=True),
        )
        logger.info("notification.token_registered", platform=platform)
        return True

    def delete(self, notification_id: str) -> bool:
        self._api.delete(
            self._path(notification_id),
            role=self.role,
            fallback_message="Não foi possível excluir a notificação.",
        )
        return True

    def clear_all(self) -> bool:
        self._api.delete(
            "/notifications/clear-all",
            role=self.role,
            fallback_message="Não foi possível limpar as notificações.",
        )
        return True
