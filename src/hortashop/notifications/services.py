"""Notification inbox service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional

import structlog

from hortashop.config import settings
from hortashop.core.sync import BackgroundSyncQueue, SyncJob
from hortashop.notifications.constants import ORDER_DELIVERED
from hortashop.notifications.exceptions import NotificationNotDeletable
from hortashop.orders.constants import OrderStatus

if TYPE_CHECKING:
    from hortashop.core.pagination import Page
    from hortashop.notifications.dtos import NotificationDTO
    from hortashop.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


def can_delete(notification: NotificationDTO) -> bool:
    """Only notifications about a delivered order may be removed."""
    return (
        notification.type == ORDER_DELIVERED
        or notification.order_status is OrderStatus.DELIVERED
    )


class NotificationService:
    def __init__(
        self,
        repository: INotificationRepository,
        queue: Optional[BackgroundSyncQueue] = None,
    ) -> None:
        self._repo = repository
        self._queue = queue or BackgroundSyncQueue()

    def list(self, page: int = 1, limit: Optional[int] = None) -> Page[NotificationDTO]:
        return self._repo.list(page=page, limit=limit or settings.DEFAULT_PAGE_SIZE)

    def get_unread_count(self) -> int:
        return self._repo.get_unread_count()

    def mark_read(self, notification_id: str) -> bool:
        return self._repo.mark_read(notification_id)

    def mark_all_read(self) -> bool:
        return self._repo.mark_all_read()

    def clear_all(self) -> bool:
        return self._repo.clear_all()

    def delete_with_related(
        self,
        notification: NotificationDTO,
        notifications: Iterable[NotificationDTO],
        on_deleted: Optional[Callable[[str], None]] = None,
    ) -> Dict[str, SyncJob]:
        """Queue deletion of *notification* and every other one about the same order.

        Returns at once with the queued job per notification id.
        ``on_deleted`` is called with each id the backend confirmed, so the
        caller drops exactly those from its list.
        """
        if not can_delete(notification):
            raise NotificationNotDeletable(payload={"id": notification.id})

        order_id = notification.order_id
        if order_id is None:
            related = [notification]
        else:
            related = [n for n in notifications if n.order_id == order_id]
            if notification.id not in {n.id for n in related}:
                related.append(notification)

        log = logger.bind(order_id=order_id, count=len(related))
        log.info("notification.delete_requested")
        return {n.id: self._queue_delete(n.id, on_deleted, log) for n in related}

    def _queue_delete(self, notification_id, on_deleted, log) -> SyncJob:
        def _deleted(_result) -> None:
            if on_deleted is not None:
                on_deleted(notification_id)

        def _failed(exc: BaseException) -> None:
            log.warning(
                "notification.delete_failed",
                notification_id=notification_id,
                error=str(exc),
            )

        return self._queue.submit(
            "notification.delete",
            lambda: self._repo.delete(notification_id),
            on_success=_deleted,
            on_failure=_failed,
        )
