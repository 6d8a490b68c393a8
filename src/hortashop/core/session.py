"""Per-role authenticated sessions.

One ``Session`` value object, parameterized by ``Role``, replaces the
scattered per-module token look-ups.  Tokens live in a single key/value
``ITokenStore`` keyed by role: buyer and producer share ``userToken``
(they authenticate against the same ``/auth`` endpoints), the courier has
its own ``delivery_token``.
"""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Dict, Optional

import jwt as pyjwt
import structlog
from jwt.exceptions import PyJWTError

from hortashop.core.exceptions import AuthError

logger = structlog.get_logger(__name__)

MISSING_TOKEN_MESSAGE = "Token de autenticação não encontrado"


class Role(StrEnum):
    BUYER = "buyer"
    PRODUCER = "producer"
    COURIER = "courier"


TOKEN_KEYS: Dict[Role, str] = {
    Role.BUYER: "userToken",
    Role.PRODUCER: "userToken",
    Role.COURIER: "delivery_token",
}


# ---------------------------------------------------------------------------
# Token storage
# ---------------------------------------------------------------------------


class ITokenStore(ABC):
    """Key/value secure storage contract (the device keychain equivalent)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""


class InMemoryTokenStore(ITokenStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileTokenStore(ITokenStore):
    """JSON file backed store; survives process restarts."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        tmp.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)


def default_token_store() -> ITokenStore:
    from hortashop.config import settings

    if settings.TOKEN_STORE_PATH:
        return FileTokenStore(settings.TOKEN_STORE_PATH)
    return InMemoryTokenStore()


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    """An authenticated identity for one role."""

    role: Role
    token: str

    @property
    def expires_at(self) -> Optional[datetime]:
        """``exp`` claim of the token, when it is a JWT carrying one.

        The signature is not verified: the backend remains the authority,
        this only avoids sending requests that are bound to fail.
        """
        try:
            payload = pyjwt.decode(
                self.token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except PyJWTError:
            return None
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= expires_at

    @property
    def authorization(self) -> str:
        return f"Bearer {self.token}"


class SessionManager:
    """Reads and writes role sessions in a token store."""

    def __init__(self, store: Optional[ITokenStore] = None) -> None:
        self._store = store if store is not None else default_token_store()

    @property
    def store(self) -> ITokenStore:
        return self._store

    def get(self, role: Role) -> Optional[Session]:
        token = self._store.get(TOKEN_KEYS[role])
        if not token:
            return None
        return Session(role=role, token=token)

    def require(self, role: Role) -> Session:
        """Return the role session or raise ``AuthError``.

        Expired tokens are dropped from the store before raising.
        """
        session = self.get(role)
        if session is None:
            logger.info("session.missing", role=str(role))
            raise AuthError(MISSING_TOKEN_MESSAGE)
        if session.is_expired():
            logger.info("session.expired", role=str(role))
            self.close(role)
            raise AuthError()
        return session

    def open(self, role: Role, token: str) -> Session:
        if not token:
            raise AuthError("Token não recebido na resposta de login.")
        self._store.set(TOKEN_KEYS[role], token)
        logger.info("session.opened", role=str(role))
        return Session(role=role, token=token)

    def close(self, role: Role) -> None:
        self._store.delete(TOKEN_KEYS[role])
        logger.info("session.closed", role=str(role))

    def invalidate(self, role: Role) -> None:
        """Drop a token the backend rejected with 401."""
        logger.warning("session.invalidated", role=str(role))
        self._store.delete(TOKEN_KEYS[role])

    def is_authenticated(self, role: Role) -> bool:
        session = self.get(role)
        return session is not None and not session.is_expired()
