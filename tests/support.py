"""Test helpers: a fake backend behind ``httpx.MockTransport`` and sample principals."""

from __future__ import annotations

import io
import itertools
import json
import time
from typing import Callable, Optional, Union

import httpx

from portal.auth import SessionManager
from portal.logger import StructuredLogger
from portal.models.principal import Principal

BASE_URL = "http://backend.test"

_logger_ids = itertools.count()

Route = Union[tuple[int, object], Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """Route table behind an ``httpx.MockTransport``.

    Routes are keyed by ``(method, path)``; a value is either a
    ``(status, json_body)`` pair or a callable receiving the request.
    Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: object = None) -> None:
        self.routes[(method, path)] = (status, body)

    def on(
        self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response],
    ) -> None:
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def json_body(request: httpx.Request) -> object:
    return json.loads(request.content)


def make_logger() -> StructuredLogger:
    return StructuredLogger(
        name=f"tests.portal.{next(_logger_ids)}",
        stream=io.StringIO(),
        to_file=False,
    )


def student_principal(user_id: int = 7, **overrides: object) -> Principal:
    data: dict[str, object] = {
        "email": "ana@example.com",
        "userType": "STUDENT",
        "role": "STUDENT",
        "userId": user_id,
        "firstName": "Ana",
        "lastName": "Silva",
    }
    data.update(overrides)
    return Principal.model_validate(data)


def admin_principal(user_id: int = 1, **overrides: object) -> Principal:
    data: dict[str, object] = {
        "email": "root@example.com",
        "userType": "ADMIN",
        "role": "ADMIN",
        "userId": user_id,
        "firstName": "Root",
    }
    data.update(overrides)
    return Principal.model_validate(data)


def sign_in(
    session: SessionManager, principal: Optional[Principal] = None, token: str = "t1",
) -> Principal:
    principal = principal or student_principal()
    session.establish(token, principal)
    return principal


def notification(nid: int, status: str = "SENT", **extra: object) -> dict[str, object]:
    body: dict[str, object] = {
        "notificationId": nid,
        "subject": f"Subject {nid}",
        "message": f"Message {nid}",
        "type": "GENERAL",
        "status": status,
        "sentAt": "2025-01-0%dT10:00:00" % (nid % 9 + 1),
    }
    body.update(extra)
    return body


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll *predicate* until it holds or *timeout* seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
