"""Tests for durable session storage and the session store."""

from __future__ import annotations

import json

import pytest

from portal.auth import AuthenticationError, SessionManager
from portal.models.enums import UserType
from portal.storage import KEY_TOKEN, KEY_USER, DurableStorage
from tests.support import admin_principal, sign_in, student_principal


class TestDurableStorage:
    def test_set_get_and_overwrite(self, storage: DurableStorage) -> None:
        assert storage.get("missing") is None
        assert storage.set("theme", "dark") is True
        assert storage.set("theme", "light") is True
        assert storage.get("theme") == "light"

    def test_delete_ignores_missing_keys(self, storage: DurableStorage) -> None:
        storage.set("a", "1")
        storage.delete("a", "b")
        assert storage.get("a") is None

    def test_session_entries(self, storage: DurableStorage) -> None:
        assert storage.read_session() == (None, None)
        storage.write_session("tok", '{"email": "x"}')
        assert storage.read_session() == ("tok", '{"email": "x"}')
        storage.clear_session()
        assert storage.read_session() == (None, None)


class TestSessionLoad:
    def test_empty_storage_loads_signed_out(self, storage, logger) -> None:
        session = SessionManager(storage, logger)
        assert not session.is_loaded
        session.load()
        assert session.is_loaded
        assert session.token is None
        assert session.principal is None
        assert not session.is_authenticated

    def test_restores_persisted_session(self, storage, logger) -> None:
        principal = student_principal()
        storage.write_session("t1", principal.to_storage_json())

        session = SessionManager(storage, logger)
        session.load()

        assert session.token == "t1"
        assert session.principal == principal
        assert session.principal.student_id == 7
        assert session.is_student()

    def test_unparseable_principal_starts_signed_out(self, storage, logger) -> None:
        storage.write_session("t1", "{not json")
        session = SessionManager(storage, logger)
        session.load()
        assert session.is_loaded
        assert session.token is None
        assert session.principal is None

    def test_token_without_user_is_ignored(self, storage, logger) -> None:
        storage.set(KEY_TOKEN, "t1")
        session = SessionManager(storage, logger)
        session.load()
        assert not session.is_authenticated

    def test_load_runs_once(self, storage, logger) -> None:
        session = SessionManager(storage, logger)
        session.load()
        storage.write_session("late", student_principal().to_storage_json())
        session.load()
        assert session.token is None


class TestSessionMutation:
    def test_establish_persists_both_entries(self, session, storage) -> None:
        principal = sign_in(session, admin_principal(), token="abc")
        token, user_json = storage.read_session()
        assert token == "abc"
        stored = json.loads(user_json)
        assert stored == {
            "email": "root@example.com",
            "userType": "ADMIN",
            "role": "ADMIN",
            "userId": 1,
            "firstName": "Root",
            "lastName": None,
        }
        assert session.principal == principal

    def test_establish_reports_failed_persist(self, session, db, logger) -> None:
        db.close()

        persisted = session.establish("abc", student_principal())

        assert persisted is False
        assert session.token == "abc"
        assert session.is_student()
        log_output = logger.logger.handlers[0].stream.getvalue()
        assert '"event": "SESSION_PERSIST_FAILED"' in log_output

    def test_clear_removes_memory_and_storage(self, session, storage) -> None:
        sign_in(session)
        session.clear()
        assert session.token is None
        assert session.principal is None
        assert storage.get(KEY_TOKEN) is None
        assert storage.get(KEY_USER) is None

    def test_require_principal(self, session) -> None:
        with pytest.raises(AuthenticationError):
            session.require_principal()
        principal = sign_in(session)
        assert session.require_principal() is principal


class TestPredicates:
    def test_predicates_follow_principal(self, session) -> None:
        assert not session.is_admin()
        assert not session.is_student()

        sign_in(session, student_principal())
        assert session.is_student() and not session.is_admin()
        assert session.has_role("STUDENT")

        sign_in(session, admin_principal(role="SUPER_ADMIN"))
        assert session.is_admin() and not session.is_student()
        assert session.has_role("SUPER_ADMIN")
        assert not session.has_role("ADMIN")

    def test_aliases_match_user_type(self) -> None:
        student = student_principal(user_id=3)
        admin = admin_principal(user_id=4)
        assert (student.student_id, student.admin_id) == (3, None)
        assert (admin.student_id, admin.admin_id) == (None, 4)
        assert admin.user_type == UserType.ADMIN
