"""
Route Guard.

Decides what a screen request turns into, given the session store's
current state.  Checks run in a fixed order and the first one that
applies wins:

1. session not yet restored: ``LOADING`` (never a redirect);
2. no token: ``REDIRECT_LOGIN``, remembering where the user was headed;
3. principal type not allowed: ``ACCESS_DENIED``;
4. required role not held: ``INSUFFICIENT_PERMISSIONS``;
5. admin-capable screen, ADMIN-typed principal, yet ``is_admin()`` false:
   ``ADMIN_ACCESS_REQUIRED``;
6. student-only screen, principal not STUDENT-typed: ``STUDENT_AREA``;
7. otherwise ``ALLOW``.

Authorization failures are decisions to render, never exceptions.
Public screens are not guarded.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional, Union

from pydantic import BaseModel, Field

from portal.auth import SessionManager
from portal.models.enums import UserType
from portal.routing.registry import LOGIN_PATH, ScreenEntry, ScreenRegistry


class GuardOutcome(StrEnum):
    LOADING = "LOADING"
    REDIRECT_LOGIN = "REDIRECT_LOGIN"
    ACCESS_DENIED = "ACCESS_DENIED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    ADMIN_ACCESS_REQUIRED = "ADMIN_ACCESS_REQUIRED"
    STUDENT_AREA = "STUDENT_AREA"
    ALLOW = "ALLOW"


class GuardAction(StrEnum):
    """Buttons offered on a terminal guard screen."""

    BACK = "back"
    HOME = "home"
    LOGIN = "login"


class GuardDecision(BaseModel):
    """What to render for a guarded screen request."""

    outcome: GuardOutcome
    title: str = ""
    message: str = ""
    actions: list[GuardAction] = Field(default_factory=list)
    redirect_to: Optional[str] = None
    from_location: Optional[str] = None
    required_role: Optional[str] = None
    current_role: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == GuardOutcome.ALLOW


class RouteGuard:
    """Evaluates screen requests against the session store.

    Parameters
    ----------
    session:
        The shared session store; read fresh on every evaluation.
    registry:
        Route table used when a bare path is evaluated.
    """

    def __init__(self, session: SessionManager, registry: ScreenRegistry) -> None:
        self._session = session
        self._registry = registry

    def evaluate(
        self,
        screen: Union[ScreenEntry, str],
        location: Optional[str] = None,
    ) -> GuardDecision:
        """Decide what the request for *screen* renders.

        Raises
        ------
        KeyError
            If *screen* is a path that matches no registered screen.
        """
        if isinstance(screen, str):
            location = location or screen
            screen, _ = self._registry.resolve(screen)
        if screen.public:
            return GuardDecision(outcome=GuardOutcome.ALLOW)

        allowed = screen.allowed_user_types
        required_role = screen.required_role

        if not self._session.is_loaded:
            return GuardDecision(outcome=GuardOutcome.LOADING)

        if not self._session.is_authenticated:
            return GuardDecision(
                outcome=GuardOutcome.REDIRECT_LOGIN,
                redirect_to=LOGIN_PATH,
                from_location=location or screen.path,
            )

        principal = self._session.principal
        user_type = principal.user_type if principal else None
        role = principal.role if principal else None

        if user_type not in allowed:
            return GuardDecision(
                outcome=GuardOutcome.ACCESS_DENIED,
                title="Access Denied",
                message=(
                    "You don't have permission to access this page. "
                    "This area is restricted to specific user types."
                ),
                actions=[GuardAction.BACK, GuardAction.HOME],
            )

        if required_role and role != required_role:
            return GuardDecision(
                outcome=GuardOutcome.INSUFFICIENT_PERMISSIONS,
                title="Insufficient Permissions",
                message=f"You need {required_role} role to access this page.",
                actions=[GuardAction.BACK, GuardAction.HOME],
                required_role=required_role,
                current_role=role or "None",
            )

        if UserType.ADMIN in allowed or required_role == UserType.ADMIN:
            if user_type == UserType.ADMIN and not self._session.is_admin():
                return GuardDecision(
                    outcome=GuardOutcome.ADMIN_ACCESS_REQUIRED,
                    title="Admin Access Required",
                    message=(
                        "This is an admin-only area. "
                        "Please log in with admin credentials."
                    ),
                    actions=[GuardAction.LOGIN, GuardAction.HOME],
                )

        if UserType.STUDENT in allowed and UserType.ADMIN not in allowed:
            if user_type != UserType.STUDENT:
                return GuardDecision(
                    outcome=GuardOutcome.STUDENT_AREA,
                    title="Student Area",
                    message=(
                        "This area is restricted to students only. "
                        "Please log in with student credentials."
                    ),
                    actions=[GuardAction.LOGIN, GuardAction.HOME],
                )

        return GuardDecision(outcome=GuardOutcome.ALLOW)
