import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
import requests

from hortashop.core.http import ApiClient
from hortashop.core.session import InMemoryTokenStore, Role, SessionManager
from hortashop.shared.infrastructure.bus import InMemoryEventBus

BASE_URL = "http://api.hortashop.test"


def _response(status_code=200, payload=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if payload is not None:
        body = json.dumps(payload).encode()
        response.json.return_value = payload
    elif text is not None:
        body = text.encode()
        response.json.side_effect = ValueError("not json")
    else:
        body = b""
        response.json.side_effect = ValueError("empty body")
    response.content = body
    response.text = body.decode()
    return response


def _jwt(expires_in=timedelta(hours=1)):
    exp = datetime.now(timezone.utc) + expires_in
    return jwt.encode({"sub": "42", "exp": exp}, "test-secret", algorithm="HS256")


@pytest.fixture()
def make_response():
    """Factory for fake ``requests.Response`` objects."""
    return _response


@pytest.fixture()
def make_jwt():
    return _jwt


@pytest.fixture()
def token_store():
    return InMemoryTokenStore()


@pytest.fixture()
def sessions(token_store):
    return SessionManager(token_store)


@pytest.fixture()
def http():
    """Mocked ``requests.Session``; set ``http.request.return_value`` per test."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(200, {})
    return session


@pytest.fixture()
def api(sessions, http):
    return ApiClient(sessions, base_url=BASE_URL, timeout=5, http=http)


@pytest.fixture()
def bus():
    return InMemoryEventBus()


@pytest.fixture()
def buyer_session(sessions):
    return sessions.open(Role.BUYER, "buyer-token")


@pytest.fixture()
def producer_session(sessions):
    return sessions.open(Role.PRODUCER, "producer-token")


@pytest.fixture()
def courier_session(sessions):
    return sessions.open(Role.COURIER, "courier-token")
