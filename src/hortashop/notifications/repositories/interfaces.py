"""Notification repository contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hortashop.core.pagination import Page
    from hortashop.notifications.dtos import NotificationDTO


class INotificationRepository(ABC):
    @abstractmethod
    def list(self, page: int = 1, limit: int = 20) -> Page[NotificationDTO]:
        """One page of the user's notifications, newest first."""

    @abstractmethod
    def get_unread_count(self) -> int: ...

    @abstractmethod
    def mark_read(self, notification_id: str) -> bool: ...

    @abstractmethod
    def mark_all_read(self) -> bool: ...

    @abstractmethod
    def register_token(self, token: str, platform: str) -> bool:
        """Associate a push token with the authenticated user."""

    @abstractmethod
    def delete(self, notification_id: str) -> bool: ...

    @abstractmethod
    def clear_all(self) -> bool: ...
