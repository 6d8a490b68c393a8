"""Push notification token lifecycle.

    UNREGISTERED → PERMISSION_REQUESTED → GRANTED | DENIED
    GRANTED → TOKEN_OBTAINED → TOKEN_REGISTERED

``DENIED`` is terminal: the user is not asked again.  Registration with
the backend goes through the background sync queue; until the backend
acknowledges it the token is kept in the secure store under
``PENDING_PUSH_TOKEN_KEY`` so an interrupted registration is resumed on
the next start.  A token refresh re-runs registration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from hortashop.notifications.constants import PENDING_PUSH_TOKEN_KEY

if TYPE_CHECKING:
    from hortashop.core.session import ITokenStore
    from hortashop.core.sync import BackgroundSyncQueue, SyncJob
    from hortashop.notifications.repositories.interfaces import INotificationRepository

logger = structlog.get_logger(__name__)


class PushRegistrationState(StrEnum):
    UNREGISTERED = "unregistered"
    PERMISSION_REQUESTED = "permission_requested"
    GRANTED = "granted"
    DENIED = "denied"
    TOKEN_OBTAINED = "token_obtained"
    TOKEN_REGISTERED = "token_registered"


class IPushMessaging(ABC):
    """The platform push SDK (FCM/APNs) as seen by the client."""

    platform: str = "android"

    @abstractmethod
    def has_permission(self) -> bool: ...

    @abstractmethod
    def request_permission(self) -> bool:
        """Prompt the user; ``True`` when notifications were allowed."""

    @abstractmethod
    def get_token(self) -> Optional[str]: ...

    @abstractmethod
    def on_token_refresh(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to token rotation; returns an unsubscribe function."""


class PushTokenRegistrar:
    def __init__(
        self,
        messaging: IPushMessaging,
        repository: INotificationRepository,
        queue: BackgroundSyncQueue,
        store: ITokenStore,
    ) -> None:
        self._messaging = messaging
        self._repo = repository
        self._queue = queue
        self._store = store
        self.state = PushRegistrationState.UNREGISTERED
        self.token: Optional[str] = None

    @property
    def pending_token(self) -> Optional[str]:
        return self._store.get(PENDING_PUSH_TOKEN_KEY)

    def initialize(self) -> PushRegistrationState:
        """Walk the lifecycle as far as it goes right now."""
        if self.state is PushRegistrationState.DENIED:
            return self.state

        if not self._messaging.has_permission():
            self._transition(PushRegistrationState.PERMISSION_REQUESTED)
            if not self._messaging.request_permission():
                self._transition(PushRegistrationState.DENIED)
                return self.state
        self._transition(PushRegistrationState.GRANTED)

        token = self._messaging.get_token()
        if not token:
            logger.warning("push.token_unavailable")
            return self.state
        self._register(token)
        return self.state

    def resume_pending(self) -> Optional[SyncJob]:
        """Re-submit a registration the backend never acknowledged."""
        token = self.pending_token
        if not token or self.state is PushRegistrationState.DENIED:
            return None
        return self._register(token)

    def on_token_refresh(self, token: str) -> Optional[SyncJob]:
        if self.state is PushRegistrationState.DENIED or not token:
            return None
        logger.info("push.token_rotated")
        return self._register(token)

    def listen(self) -> Callable[[], None]:
        return self._messaging.on_token_refresh(self.on_token_refresh)

    def _register(self, token: str) -> SyncJob:
        self.token = token
        self._transition(PushRegistrationState.TOKEN_OBTAINED)
        self._store.set(PENDING_PUSH_TOKEN_KEY, token)
        platform = self._messaging.platform

        def _succeeded(_result) -> None:
            if self._store.get(PENDING_PUSH_TOKEN_KEY) == token:
                self._store.delete(PENDING_PUSH_TOKEN_KEY)
            if self.token == token:
                self._transition(PushRegistrationState.TOKEN_REGISTERED)

        def _failed(exc: BaseException) -> None:
            logger.warning("push.registration_failed", error=str(exc))

        return self._queue.submit(
            "push.register_token",
            lambda: self._repo.register_token(token, platform),
            on_success=_succeeded,
            on_failure=_failed,
        )

    def _transition(self, state: PushRegistrationState) -> None:
        if state is not self.state:
            logger.info("push.state_changed", previous=str(self.state), state=str(state))
            self.state = state
