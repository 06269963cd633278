"""Admin Shell.

The staff layout polls the shared admin inbox for the badge; the
dashboard itself is loaded on demand.
"""

from __future__ import annotations

from portal.auth import SessionManager
from portal.config import AppConfig
from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.services.dashboard_service import AdminDashboard, AdminDashboardService
from portal.services.notification_service import NotificationService
from portal.shell.base import RoleShell


class AdminShell(RoleShell):
    """Signed-in layout for staff."""

    audience = UserType.ADMIN

    def __init__(
        self,
        session: SessionManager,
        notification_service: NotificationService,
        dashboard_service: AdminDashboardService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(session, notification_service, config, logger)
        self._dashboard_service = dashboard_service

    def load_dashboard(self) -> AdminDashboard:
        return self._dashboard_service.load()
