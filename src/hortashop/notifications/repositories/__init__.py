"""Notification repositories package."""

from hortashop.notifications.repositories.http_repository import HttpNotificationRepository
from hortashop.notifications.repositories.interfaces import INotificationRepository

__all__ = ["HttpNotificationRepository", "INotificationRepository"]
