"""Tests for the REST client plumbing."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from portal.api_client import ApiClient, ApiError
from tests.support import BASE_URL, FakeBackend, sign_in


def test_bearer_header_follows_session(api, backend, session) -> None:
    backend.add("GET", "/universities", body=[])

    api.universities.list()
    sign_in(session, token="abc")
    api.universities.list()

    first, second = backend.requests
    assert "authorization" not in first.headers
    assert second.headers["authorization"] == "Bearer abc"
    assert second.headers["content-type"] == "application/json"


def test_multipart_upload_sets_boundary(api, backend, session, tmp_path: Path) -> None:
    sign_in(session, token="abc")
    slip = tmp_path / "slip.pdf"
    slip.write_bytes(b"%PDF-1.4 fake")
    backend.add("POST", "/payments/upload", body={"paymentId": 5})

    result = api.payments.upload({"amount": 100}, slip)

    request = backend.calls("POST", "/payments/upload")[0]
    assert result == {"paymentId": 5}
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert request.headers["authorization"] == "Bearer abc"
    body = request.content
    assert b'name="slipFile"; filename="slip.pdf"' in body
    assert b'name="payment"' in body
    assert b'{"amount": 100}' in body


def test_unauthorized_raises_without_touching_session(api, backend, session) -> None:
    sign_in(session, token="abc")
    backend.add("GET", "/payments", status=401, body={"error": "Token expired"})

    with pytest.raises(ApiError) as excinfo:
        api.payments.list()

    assert excinfo.value.is_unauthorized
    assert excinfo.value.detail == "Token expired"
    assert session.token == "abc"


def test_error_detail_prefers_error_over_message(api, backend) -> None:
    backend.add("GET", "/programs", status=400, body={"error": "Bad", "message": "Other"})
    with pytest.raises(ApiError) as excinfo:
        api.programs.list()
    assert excinfo.value.detail == "Bad"
    assert excinfo.value.status_code == 400


def test_error_without_detail_uses_default(api, backend) -> None:
    backend.add("DELETE", "/programs/3", status=500)
    with pytest.raises(ApiError) as excinfo:
        api.programs.delete(3)
    assert excinfo.value.detail is None
    assert excinfo.value.user_message("Failed to delete program") == "Failed to delete program"


def test_timeout_is_a_plain_failure(logger) -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = ApiClient(BASE_URL, lambda: None, logger, transport=httpx.MockTransport(slow))
    try:
        with pytest.raises(ApiError) as excinfo:
            client.universities.list()
    finally:
        client.close()
    assert excinfo.value.is_timeout
    assert excinfo.value.status_code is None
    assert str(excinfo.value) == "The request timed out. Please try again."


def test_empty_and_text_bodies(api, backend) -> None:
    backend.add("DELETE", "/universities/1", status=204)
    backend.on(
        "GET", "/contact-messages/unread-count",
        lambda request: httpx.Response(200, text="not json"),
    )
    assert api.universities.delete(1) is None
    assert api.contact.unread_count() == "not json"


def test_status_updates_use_query_parameters(api, backend) -> None:
    backend.add("PATCH", "/applications/4/status", body={})
    backend.add("PATCH", "/payments/9/status", body={})

    api.applications.update_status(4, "APPROVED")
    api.payments.update_status(9, "REJECTED", "Blurry slip")

    app_request, payment_request = backend.requests
    assert app_request.url.params["status"] == "APPROVED"
    assert payment_request.url.params["status"] == "REJECTED"
    assert payment_request.url.params["reason"] == "Blurry slip"


def test_unknown_route_is_404(backend: FakeBackend, api) -> None:
    with pytest.raises(ApiError) as excinfo:
        api.students.get(123)
    assert excinfo.value.status_code == 404


def test_missing_upload_file_is_an_api_error(api, backend, tmp_path: Path) -> None:
    with pytest.raises(ApiError) as info:
        api.files.upload_cv(tmp_path / "gone.pdf")

    assert info.value.status_code is None
    assert info.value.user_message("CV upload failed") == "Could not read file 'gone.pdf'"
    assert backend.requests == []


def test_resource_groups(api) -> None:
    groups = {
        name for name, value in vars(api).items()
        if not name.startswith("_")
    }
    assert groups == {
        "auth", "universities", "programs", "applications", "students",
        "contact", "payments", "notifications", "files",
    }
    assert not hasattr(api.notifications, "list")
    assert not hasattr(api.applications, "delete")
