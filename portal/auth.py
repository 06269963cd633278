"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the bearer token and
the signed-in ``Principal`` for the lifetime of the client, mirrored into
durable storage so a restart resumes the session.

Usage::

    from portal.auth import SessionManager

    session = SessionManager(storage=storage, logger=logger)
    session.load()
    if session.is_authenticated and session.is_admin():
        ...

Authorization predicates are derived from the principal on every call;
nothing is cached, so a change to the principal is observed immediately.
"""

from __future__ import annotations

import threading
from typing import Optional

from pydantic import ValidationError

from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.models.principal import Principal
from portal.storage import DurableStorage


class AuthenticationError(RuntimeError):
    """Raised by :meth:`SessionManager.require_principal` when nobody is signed in."""


class SessionManager:
    """Injectable holder for the session token and principal.

    Pass a single ``SessionManager`` through the dependency-injection
    layer so every component shares the same session.

    Parameters
    ----------
    storage:
        Durable storage holding the ``token`` and ``user`` entries.
    logger:
        Structured logger instance.
    """

    def __init__(self, storage: DurableStorage, logger: StructuredLogger) -> None:
        self._storage = storage
        self._logger = logger
        self._lock: threading.RLock = threading.RLock()
        self._token: Optional[str] = None
        self._principal: Optional[Principal] = None
        self._loaded: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Restore a persisted session.  Runs once; later calls are no-ops.

        When either entry is missing, or the stored principal cannot be
        parsed, the session stays empty.  ``is_loaded`` is ``True``
        afterwards in every case.
        """
        with self._lock:
            if self._loaded:
                return
            token, user_json = self._storage.read_session()
            if token and user_json:
                try:
                    self._principal = Principal.model_validate_json(user_json)
                    self._token = token
                    self._logger.info(
                        "Session restored for %s", self._principal.email,
                        extra={"event": "SESSION_RESTORED",
                               "user_type": self._principal.user_type},
                    )
                except ValidationError as exc:
                    self._logger.warning(
                        "Stored principal is unreadable; starting signed out: %s", exc,
                        extra={"event": "SESSION_CORRUPT"},
                    )
                    self._principal = None
                    self._token = None
            self._loaded = True

    def establish(self, token: str, principal: Principal) -> bool:
        """Persist *token* and *principal*, then adopt them in memory.

        Returns ``False`` when the durable write failed: the session is
        still active but will not survive a restart.
        """
        with self._lock:
            persisted = self._storage.write_session(token, principal.to_storage_json())
            self._token = token
            self._principal = principal
            self._loaded = True

        if not persisted:
            self._logger.warning(
                "Session for %s is held in memory only.", principal.email,
                extra={"event": "SESSION_PERSIST_FAILED", "user_id": principal.user_id},
            )
        return persisted

    def clear(self) -> None:
        """End the session: durable entries first, then memory."""
        with self._lock:
            self._storage.clear_session()
            self._token = None
            self._principal = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        with self._lock:
            return self._loaded

    @property
    def token(self) -> Optional[str]:
        """The bearer token, or ``None`` when signed out."""
        with self._lock:
            return self._token

    @property
    def principal(self) -> Optional[Principal]:
        with self._lock:
            return self._principal

    def require_principal(self) -> Principal:
        """Return the principal.

        Raises:
            AuthenticationError: If no principal is currently held.
        """
        with self._lock:
            if self._principal is None:
                raise AuthenticationError(
                    "No user is currently authenticated. Login required."
                )
            return self._principal

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return bool(self._token)

    def is_admin(self) -> bool:
        principal = self.principal
        return principal is not None and principal.user_type == UserType.ADMIN

    def is_student(self) -> bool:
        principal = self.principal
        return principal is not None and principal.user_type == UserType.STUDENT

    def has_role(self, role: str) -> bool:
        principal = self.principal
        return principal is not None and principal.role == role
