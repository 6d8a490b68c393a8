"""HTTP client primitive.

Wraps a ``requests.Session`` with bearer-token injection from the role
session and translates every HTTP outcome into the client error taxonomy
in one place.  No retries happen here; see ``core.sync`` for the
background queue that does retry.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import requests
import structlog

from hortashop.config import settings
from hortashop.config.logging import current_request_id
from hortashop.core.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    ServerError,
)
from hortashop.core.session import Role, SessionManager

logger = structlog.get_logger(__name__)


def extract_error_message(payload: Any) -> Optional[str]:
    """Return the backend's ``message`` field, if the body carries one.

    NestJS validation errors send ``message`` as a list of strings.
    """
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, list):
        message = "; ".join(str(m) for m in message if m)
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


class ApiClient:
    """Authenticated JSON client for the HortaShop backend."""

    def __init__(
        self,
        sessions: SessionManager,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.sessions = sessions
        self._base_url = base_url
        self._timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self._http = http if http is not None else requests.Session()

    def url(self, path: str) -> str:
        return settings.endpoint(path, self._base_url)

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        role: Optional[Role] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        error_messages: Optional[Mapping[int, str]] = None,
        fallback_message: Optional[str] = None,
    ) -> Any:
        """Send a request and return the decoded body of a 2xx response.

        When *role* is given the request is authenticated; a missing token
        raises ``AuthError`` before anything is sent.

        Raises:
            AuthError: no token, or the backend answered 401 (the stored
                token is dropped).
            NotFoundError: the backend answered 404.
            ServerError: any other non-2xx answer.
            NetworkError: the request did not complete.
        """
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if role is not None:
            session = self.sessions.require(role)
            headers["Authorization"] = session.authorization
        request_id = current_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        log = logger.bind(method=method, path=path, role=str(role) if role else None)

        try:
            response = self._http.request(
                method,
                self.url(path),
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            log.warning("http.request_failed", error=str(exc))
            raise NetworkError(fallback_message) from exc

        status = response.status_code
        body = self._decode(response)
        log.info("http.response", status_code=status)

        if 200 <= status < 300:
            return body

        messages = error_messages or {}
        if status == 401:
            if role is not None:
                self.sessions.invalidate(role)
            raise AuthError(messages.get(401), status_code=status, payload=body)
        if status == 404:
            raise NotFoundError(messages.get(404), status_code=status, payload=body)

        message = (
            messages.get(status) or extract_error_message(body) or fallback_message
        )
        log.warning("http.error_response", status_code=status, message=message)
        raise ServerError(message, status_code=status, payload=body)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
