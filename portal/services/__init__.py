"""
Business Logic Services Package.

Services depend on the REST client for backend access and the session
store for user context.

The ``create_services()`` factory wires every service together, returning
a typed dict that the front-end can consume without knowing the internal
dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from portal.api_client import ApiClient
from portal.auth import SessionManager
from portal.config import AppConfig
from portal.logger import get_logger
from portal.services.application_service import ApplicationService
from portal.services.auth_service import AuthService
from portal.services.catalog_service import CatalogService
from portal.services.contact_service import ContactService
from portal.services.dashboard_service import AdminDashboardService, StudentDashboardService
from portal.services.notification_service import NotificationService
from portal.services.payment_service import PaymentService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    auth_service: AuthService
    notification_service: NotificationService
    catalog_service: CatalogService
    student_dashboard_service: StudentDashboardService
    admin_dashboard_service: AdminDashboardService
    application_service: ApplicationService
    payment_service: PaymentService
    contact_service: ContactService


def create_services(
    api: ApiClient,
    config: AppConfig,
    session: SessionManager,
) -> ServiceContainer:
    """
    Wire all services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to the front-end.

    Args:
        api: Shared REST client (its token provider reads ``session``).
        config: Application configuration.
        session: The shared session store.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")
    workers = config.BULK_ACTION_WORKERS

    return ServiceContainer(
        auth_service=AuthService(api=api, session=session, logger=logger),
        notification_service=NotificationService(
            api=api, logger=logger, max_workers=workers,
        ),
        catalog_service=CatalogService(api=api, logger=logger),
        student_dashboard_service=StudentDashboardService(
            api=api, logger=logger, max_workers=workers,
        ),
        admin_dashboard_service=AdminDashboardService(
            api=api, logger=logger, max_workers=workers,
        ),
        application_service=ApplicationService(api=api, session=session, logger=logger),
        payment_service=PaymentService(api=api, session=session, logger=logger),
        contact_service=ContactService(api=api, logger=logger),
    )
