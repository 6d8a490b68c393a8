"""Client error taxonomy.

Every failure surfaced by a repository or service is one of these.
``user_message`` is the Portuguese text meant for the end user; ``str(exc)``
carries the same text so callers can render it directly.
"""

from __future__ import annotations

from typing import Any, Optional

GENERIC_ERROR_MESSAGE = "Ocorreu um erro inesperado. Tente novamente."


class HortaShopError(Exception):
    """Base class for all client errors."""

    default_message = GENERIC_ERROR_MESSAGE

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        self.user_message = message or self.default_message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.user_message)


class AuthError(HortaShopError):
    """Missing, expired or rejected token. The caller must force a new login."""

    default_message = "Sessão expirada. Faça login novamente."


class NotFoundError(HortaShopError):
    """The backend answered 404."""

    default_message = "Recurso não encontrado."


class NetworkError(HortaShopError):
    """The request did not complete (connection, timeout, unreadable body)."""

    default_message = "Erro de conexão. Verifique sua internet e tente novamente."


class ServerError(NetworkError):
    """The backend answered with a non-2xx status other than 401/404."""

    default_message = "Erro no servidor. Tente novamente mais tarde."


class ValidationError(HortaShopError):
    """Input rejected locally; no request was sent."""

    default_message = "Dados inválidos."
