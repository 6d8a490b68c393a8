"""Notification domain exceptions."""

from __future__ import annotations

from hortashop.core.exceptions import ValidationError


class NotificationNotDeletable(ValidationError):
    """Only notifications about delivered orders may be deleted."""

    default_message = "Você só pode excluir notificações de pedidos já finalizados."
