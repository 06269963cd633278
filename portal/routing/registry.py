"""Screen Registry.

Central route table for every screen of the portal.  The console (or
any other front-end) resolves a path here, hands the resulting entry to
the :class:`~portal.routing.guard.RouteGuard`, and renders the screen
only when the guard allows it.

Adding a new screen = one ``register()`` call.
"""

from __future__ import annotations

from typing import Optional

from portal.logger import StructuredLogger
from portal.models.enums import UserType
from portal.models.principal import Principal

ALL_USER_TYPES: frozenset[UserType] = frozenset({UserType.STUDENT, UserType.ADMIN})
STUDENT_ONLY: frozenset[UserType] = frozenset({UserType.STUDENT})
ADMIN_ONLY: frozenset[UserType] = frozenset({UserType.ADMIN})

LOGIN_PATH: str = "/login"
STUDENT_LANDING_PATH: str = "/student/dashboard"
ADMIN_LANDING_PATH: str = "/admin/dashboard"


class ScreenEntry:
    """Metadata for a single registered screen.

    Attributes
    ----------
    path:
        Route pattern; segments starting with ``:`` are parameters
        (e.g. ``/payment/:applicationId``).
    title:
        Human-readable name shown in menus.
    allowed_user_types:
        Principal types that may open the screen.
    required_role:
        Exact role label required in addition, or ``None``.
    public:
        ``True`` for screens that are never guarded.
    """

    __slots__ = (
        "path",
        "title",
        "allowed_user_types",
        "required_role",
        "public",
    )

    def __init__(
        self,
        path: str,
        title: str,
        allowed_user_types: frozenset[UserType],
        required_role: Optional[str] = None,
        public: bool = False,
    ) -> None:
        self.path = path
        self.title = title
        self.allowed_user_types = allowed_user_types
        self.required_role = required_role
        self.public = public

    def match(self, path: str) -> Optional[dict[str, str]]:
        """Return the path parameters if *path* fits this pattern, else ``None``."""
        pattern = _segments(self.path)
        actual = _segments(path)
        if len(pattern) != len(actual):
            return None
        params: dict[str, str] = {}
        for expected, given in zip(pattern, actual):
            if expected.startswith(":"):
                if not given:
                    return None
                params[expected[1:]] = given
            elif expected != given:
                return None
        return params

    def __repr__(self) -> str:
        return f"ScreenEntry(path={self.path!r}, title={self.title!r})"


def _segments(path: str) -> list[str]:
    path = path.split("?", 1)[0]
    return [part for part in path.strip("/").split("/") if part]


class ScreenRegistry:
    """Manages the collection of registered screens.

    Parameters
    ----------
    logger:
        Structured logger for registration events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, ScreenEntry] = {}
        self._logger = logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register(
        self,
        path: str,
        title: str,
        allowed_user_types: frozenset[UserType] = ALL_USER_TYPES,
        required_role: Optional[str] = None,
        *,
        public: bool = False,
    ) -> None:
        """Register a screen under *path*."""
        if path in self._entries:
            self._logger.warning("Screen '%s' already registered; overwriting.", path)
        self._entries[path] = ScreenEntry(
            path=path,
            title=title,
            allowed_user_types=allowed_user_types,
            required_role=required_role,
            public=public,
        )
        self._logger.debug("Screen registered: %s (%s)", path, title)

    def resolve(self, path: str) -> tuple[ScreenEntry, dict[str, str]]:
        """Return the entry for *path* and its parameters.

        Exact registrations win over parameterised patterns.

        Raises
        ------
        KeyError
            If no registered screen matches *path*.
        """
        bare = "/" + "/".join(_segments(path))
        exact = self._entries.get(bare)
        if exact is not None:
            return exact, {}
        for entry in self._entries.values():
            params = entry.match(bare)
            if params is not None:
                return entry, params
        raise KeyError(f"No screen is registered for '{path}'.")

    def screens_for(self, user_type: Optional[UserType]) -> list[ScreenEntry]:
        """Screens visible to *user_type* (public ones included), in order."""
        return [
            entry
            for entry in self._entries.values()
            if entry.public or (user_type is not None and user_type in entry.allowed_user_types)
        ]

    @staticmethod
    def landing_path_for(principal: Optional[Principal]) -> str:
        """Where the shared dashboard entry point sends each principal."""
        if principal is None:
            return LOGIN_PATH
        if principal.user_type == UserType.ADMIN:
            return ADMIN_LANDING_PATH
        if principal.user_type == UserType.STUDENT:
            return STUDENT_LANDING_PATH
        return LOGIN_PATH

    def __len__(self) -> int:
        return len(self._entries)


def build_default_registry(logger: StructuredLogger) -> ScreenRegistry:
    """The portal's full route table."""
    registry = ScreenRegistry(logger)

    # Public
    registry.register("/", "Home", public=True)
    registry.register("/universities", "Universities", public=True)
    registry.register("/programs", "Programs", public=True)
    registry.register("/contact", "Contact", public=True)
    registry.register(LOGIN_PATH, "Login", public=True)
    registry.register("/register", "Register", public=True)

    # Students
    registry.register("/apply", "Apply", STUDENT_ONLY)
    registry.register(STUDENT_LANDING_PATH, "Student Dashboard", STUDENT_ONLY)
    registry.register("/student/notifications", "Notifications", STUDENT_ONLY)
    registry.register("/payment/:applicationId", "Upload Payment", STUDENT_ONLY)

    # Both
    registry.register("/dashboard", "Dashboard", ALL_USER_TYPES)

    # Staff
    registry.register("/admin", "Admin", ADMIN_ONLY)
    registry.register(ADMIN_LANDING_PATH, "Admin Dashboard", ADMIN_ONLY)
    registry.register("/admin/applicants", "Applicants", ADMIN_ONLY)
    registry.register("/admin/students", "Students", ADMIN_ONLY)
    registry.register("/admin/notifications", "Notifications", ADMIN_ONLY)
    registry.register("/admin/payments", "Payments", ADMIN_ONLY)
    registry.register("/admin/messages", "Messages", ADMIN_ONLY)
    registry.register("/admin/universities", "Universities", ADMIN_ONLY)
    registry.register("/admin/programs", "Programs", ADMIN_ONLY)

    logger.info("Route table built with %d screens.", len(registry))
    return registry
