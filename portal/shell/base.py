"""Role Shell Base.

A shell is the signed-in layout for one principal type.  While mounted
it owns the background loops for that principal: at least the unread
badge, plus whatever a subclass adds.

Lifecycle
---------
1. ``mount()``: starts polling when the session holds a principal of the
   shell's type (**Polling**); otherwise stays **Idle**.
2. ``on_session_changed()``: tears the loops down, then re-evaluates as
   in step 1.  A loop is never left running for a previous principal.
3. ``unmount()``: tears everything down (**Torn down**).  Results of
   fetches still in flight are discarded.
"""

from __future__ import annotations

import threading
from enum import StrEnum
from typing import ClassVar, Optional

from portal.auth import SessionManager
from portal.config import AppConfig
from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.models.principal import Principal
from portal.services.notification_poller import NotificationBadge
from portal.services.notification_service import NotificationService


class ShellState(StrEnum):
    IDLE = "IDLE"
    POLLING = "POLLING"
    TORN_DOWN = "TORN_DOWN"


class RoleShell:
    """Common mount/teardown logic for the student and admin shells.

    Parameters
    ----------
    session:
        The shared session store.
    notification_service:
        Backend notification operations for the badge.
    config:
        Supplies the poll intervals and the stop timeout.
    logger:
        Structured logger instance.
    """

    audience: ClassVar[UserType]

    def __init__(
        self,
        session: SessionManager,
        notification_service: NotificationService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        self._session = session
        self._notification_service = notification_service
        self._config = config
        self._logger = logger
        self._lock: threading.RLock = threading.RLock()
        self._state: ShellState = ShellState.IDLE
        self._mounted: bool = False
        self._badge: Optional[NotificationBadge] = None

    # ==================================================================
    # Lifecycle
    # ==================================================================

    def mount(self) -> None:
        with self._lock:
            if self._mounted:
                return
            self._mounted = True
            self._evaluate()

    def unmount(self) -> None:
        with self._lock:
            self._mounted = False
            self._teardown()
            self._state = ShellState.TORN_DOWN

    def on_session_changed(self) -> None:
        """Re-bind the loops to whoever is signed in now."""
        with self._lock:
            if not self._mounted:
                return
            self._teardown()
            self._evaluate()

    # ==================================================================
    # State
    # ==================================================================

    @property
    def state(self) -> ShellState:
        with self._lock:
            return self._state

    @property
    def badge(self) -> Optional[NotificationBadge]:
        with self._lock:
            return self._badge

    # ==================================================================
    # Internals
    # ==================================================================

    def _evaluate(self) -> None:
        principal = self._session.principal
        if (
            principal is None
            or principal.user_type != self.audience
            or not self._session.is_authenticated
        ):
            self._state = ShellState.IDLE
            self._logger.debug(
                "%s idle: no %s principal.", type(self).__name__, self.audience,
            )
            return

        self._badge = NotificationBadge(
            principal=principal,
            service=self._notification_service,
            logger=self._logger,
            interval_s=self._config.NOTIFICATION_POLL_INTERVAL_S,
            stop_timeout_s=self._config.POLLER_STOP_TIMEOUT_S,
        )
        self._badge.start()
        self._start_loops(principal)
        self._state = ShellState.POLLING

    def _teardown(self) -> None:
        if self._badge is not None:
            self._badge.stop()
            self._badge = None
        self._stop_loops()
        if self._state == ShellState.POLLING:
            self._state = ShellState.IDLE

    def _start_loops(self, principal: Principal) -> None:
        """Hook for shell-specific loops."""

    def _stop_loops(self) -> None:
        """Hook for shell-specific loops."""
