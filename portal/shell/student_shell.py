"""Student Shell.

Besides the unread badge, the student layout keeps the dashboard data
fresh on a slower schedule.
"""

from __future__ import annotations

import threading
from typing import Optional

from portal.auth import SessionManager
from portal.config import AppConfig
from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.models.principal import Principal
from portal.services.dashboard_service import StudentDashboard, StudentDashboardService
from portal.services.notification_service import NotificationService
from portal.services.poller import PollingLoop
from portal.shell.base import RoleShell


class StudentShell(RoleShell):
    """Signed-in layout for students.

    Parameters
    ----------
    dashboard_service:
        Loads the student dashboard snapshot.
    """

    audience = UserType.STUDENT

    def __init__(
        self,
        session: SessionManager,
        notification_service: NotificationService,
        dashboard_service: StudentDashboardService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(session, notification_service, config, logger)
        self._dashboard_service = dashboard_service
        self._dashboard_loop: Optional[PollingLoop[StudentDashboard]] = None
        self._dashboard_lock: threading.Lock = threading.Lock()
        self._dashboard: Optional[StudentDashboard] = None

    @property
    def dashboard(self) -> Optional[StudentDashboard]:
        """Latest dashboard snapshot, or ``None`` before the first load."""
        with self._dashboard_lock:
            return self._dashboard

    def refresh_dashboard(self) -> bool:
        loop = self._dashboard_loop
        return loop.poll_once() if loop is not None else False

    def _start_loops(self, principal: Principal) -> None:
        self._dashboard_loop = PollingLoop(
            name="StudentDashboardRefresh",
            fetch=lambda: self._dashboard_service.load(principal),
            commit=self._set_dashboard,
            interval_s=self._config.DASHBOARD_REFRESH_INTERVAL_S,
            logger=self._logger,
            stop_timeout_s=self._config.POLLER_STOP_TIMEOUT_S,
        )
        self._dashboard_loop.start()

    def _stop_loops(self) -> None:
        if self._dashboard_loop is not None:
            self._dashboard_loop.stop()
            self._dashboard_loop = None
        with self._dashboard_lock:
            self._dashboard = None

    def _set_dashboard(self, snapshot: StudentDashboard) -> None:
        with self._dashboard_lock:
            self._dashboard = snapshot
