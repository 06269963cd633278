"""
Interactive Console Front-End.

A small rich-based front-end over the service layer.  It holds no
business logic: every command delegates to a service, the route guard
or the active role shell, and renders the result.  Type ``help`` at the
prompt for the command list.
"""

from __future__ import annotations

import shlex
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from portal import __version__
from portal.auth import SessionManager
from portal.config import AppConfig
from portal.logger import StructuredLogger
from portal.models.enums import NotificationView, UserType
from portal.models.forms import LoginCredentials
from portal.models.results import OperationResult
from portal.routing.guard import GuardDecision, GuardOutcome, RouteGuard
from portal.routing.registry import LOGIN_PATH, ScreenRegistry
from portal.services import ServiceContainer
from portal.services.catalog_service import filter_programs, filter_universities
from portal.services.dashboard_service import AdminDashboard, StudentDashboard
from portal.shell import AdminShell, RoleShell, StudentShell

Handler = Callable[[list[str]], None]

_HELP: tuple[tuple[str, str], ...] = (
    ("login [student|admin]", "sign in through the student or admin screen"),
    ("logout", "end the session"),
    ("whoami", "show the signed-in user"),
    ("open <path>", "navigate to a screen"),
    ("universities [search]", "list universities"),
    ("programs [search]", "list programs"),
    ("notifications [all|unread|read]", "list notifications"),
    ("read <id>", "mark one notification as read"),
    ("read-all", "mark every unread notification as read"),
    ("delete <id>", "delete a notification"),
    ("dashboard", "open your dashboard"),
    ("quit", "leave"),
)


class PortalConsole:
    """Command loop over the portal services.

    Parameters
    ----------
    services:
        Fully-wired service container.
    session:
        The shared session store.
    registry:
        Route table.
    config:
        Application configuration (poll intervals for the shells).
    logger:
        Structured logger instance.
    console:
        Optional rich console; tests pass one that records output.
    """

    def __init__(
        self,
        services: ServiceContainer,
        session: SessionManager,
        registry: ScreenRegistry,
        config: AppConfig,
        logger: StructuredLogger,
        console: Optional[Console] = None,
    ) -> None:
        self._services = services
        self._session = session
        self._registry = registry
        self._guard = RouteGuard(session, registry)
        self._config = config
        self._logger = logger
        self.console = console or Console()
        self._shell: Optional[RoleShell] = None
        self._location: str = "/"
        self._running: bool = False

        self._commands: dict[str, Handler] = {
            "login": self._cmd_login,
            "logout": self._cmd_logout,
            "whoami": self._cmd_whoami,
            "open": self._cmd_open,
            "universities": self._cmd_universities,
            "programs": self._cmd_programs,
            "notifications": self._cmd_notifications,
            "read": self._cmd_read,
            "read-all": self._cmd_read_all,
            "delete": self._cmd_delete,
            "dashboard": self._cmd_dashboard,
            "help": self._cmd_help,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    # ==================================================================
    # Loop
    # ==================================================================

    @property
    def location(self) -> str:
        return self._location

    @property
    def shell(self) -> Optional[RoleShell]:
        return self._shell

    def run(self) -> None:
        """Restore the session, then read commands until ``quit``."""
        self._session.load()
        self._bind_shell()
        self.console.print(Panel(
            f"[bold cyan]Study Portal[/bold cyan] v{__version__}\n\n"
            "Type [cyan]help[/cyan] for the list of commands.",
            border_style="cyan",
        ))
        self._running = True
        try:
            while self._running:
                try:
                    line = Prompt.ask(f"[bold]{self._location}[/bold]", console=self.console)
                except (EOFError, KeyboardInterrupt):
                    break
                self.handle(line)
        finally:
            self.close()

    def handle(self, line: str) -> bool:
        """Run one command line.  Returns ``False`` once ``quit`` was given."""
        try:
            parts = shlex.split(line)
        except ValueError as exc:
            self.console.print(f"[red]{exc}[/red]")
            return True
        if not parts:
            return True
        name, args = parts[0].lower(), parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            self.console.print(f"[red]Unknown command:[/red] {name}. Type 'help'.")
            return True
        handler(args)
        return self._running or name not in ("quit", "exit")

    def close(self) -> None:
        if self._shell is not None:
            self._shell.unmount()
            self._shell = None

    # ==================================================================
    # Shell binding
    # ==================================================================

    def _bind_shell(self) -> None:
        """Mount the shell matching the current principal (if any)."""
        principal = self._session.principal
        wanted: Optional[type[RoleShell]] = None
        if principal is not None and self._session.is_authenticated:
            wanted = AdminShell if principal.user_type == UserType.ADMIN else StudentShell

        if self._shell is not None and type(self._shell) is wanted:
            self._shell.on_session_changed()
            return

        self.close()
        if wanted is AdminShell:
            self._shell = AdminShell(
                session=self._session,
                notification_service=self._services["notification_service"],
                dashboard_service=self._services["admin_dashboard_service"],
                config=self._config,
                logger=self._logger,
            )
        elif wanted is StudentShell:
            self._shell = StudentShell(
                session=self._session,
                notification_service=self._services["notification_service"],
                dashboard_service=self._services["student_dashboard_service"],
                config=self._config,
                logger=self._logger,
            )
        if self._shell is not None:
            self._shell.mount()

    # ==================================================================
    # Commands
    # ==================================================================

    def _cmd_login(self, args: list[str]) -> None:
        portal = UserType.ADMIN if args and args[0].lower() == "admin" else UserType.STUDENT
        email = Prompt.ask("Email", console=self.console)
        password = Prompt.ask("Password", password=True, console=self.console)

        result = self._services["auth_service"].login_for_portal(
            LoginCredentials(email=email, password=password), portal,
        )
        self._bind_shell()
        if not result.success:
            field = f" ({result.field})" if result.field else ""
            message = escape(result.error_message or "Login failed")
            self.console.print(f"[red]{message}{field}[/red]")
            return

        self.console.print(f"[green]Welcome back, {result.first_name or 'User'}![/green]")
        self._navigate(self._registry.landing_path_for(self._session.principal))

    def _cmd_logout(self, args: list[str]) -> None:
        self._services["auth_service"].logout()
        self._bind_shell()
        self._location = "/"
        self.console.print("[green]Logged out successfully[/green]")

    def _cmd_whoami(self, args: list[str]) -> None:
        principal = self._session.principal
        if principal is None:
            self.console.print(Panel(
                "[red]Not authenticated[/red]\n\nUse [cyan]login[/cyan] to sign in.",
                title="Authentication Status",
                border_style="red",
            ))
            return
        badge = self._shell.badge if self._shell is not None else None
        unread = badge.display_count if badge is not None else ""
        self.console.print(Panel(
            f"[green]Authenticated[/green]\n\n"
            f"[bold]Name:[/bold] {principal.full_name or principal.display_name}\n"
            f"[bold]Email:[/bold] {principal.email}\n"
            f"[bold]Type:[/bold] {principal.user_type}\n"
            f"[bold]Role:[/bold] {principal.role or 'None'}\n"
            f"[bold]Unread:[/bold] {unread or '0'}",
            title="Authentication Status",
            border_style="green",
        ))

    def _cmd_open(self, args: list[str]) -> None:
        if not args:
            self.console.print("[yellow]Usage: open <path>[/yellow]")
            return
        self._navigate(args[0])

    def _cmd_universities(self, args: list[str]) -> None:
        listing = self._services["catalog_service"].list_universities()
        if listing.error:
            self.console.print(f"[yellow]{escape(listing.error)}; showing bundled catalog.[/yellow]")
        universities = filter_universities(listing.universities, search=" ".join(args))

        table = Table(title="Universities", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right")
        table.add_column("Name")
        table.add_column("Location")
        table.add_column("Students", justify="right")
        table.add_column("Rating", justify="right")
        for u in universities:
            table.add_row(
                str(u.university_id or ""),
                u.name,
                u.location or "Unknown",
                u.students or "",
                f"{u.rating:.1f}" if u.rating is not None else "",
            )
        self.console.print(table)
        self.console.print(
            f"[dim]Showing {len(universities)} of {len(listing.universities)} universities[/dim]"
        )

    def _cmd_programs(self, args: list[str]) -> None:
        listing = self._services["catalog_service"].list_programs()
        if listing.error:
            self.console.print(f"[red]{escape(listing.error)}[/red]")
        programs = filter_programs(listing.programs, search=" ".join(args))

        table = Table(title="Programs", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right")
        table.add_column("Program")
        table.add_column("University")
        table.add_column("Degree")
        table.add_column("Tuition (USD)", justify="right")
        for p in programs:
            table.add_row(
                str(p.program_id or ""),
                p.program_name,
                p.university.name if p.university else "",
                p.degree_type or "",
                f"{p.tuition_fee_usd:,.0f}" if p.tuition_fee_usd is not None else "",
            )
        self.console.print(table)

    def _cmd_notifications(self, args: list[str]) -> None:
        badge = self._require_badge()
        if badge is None:
            return
        try:
            view = NotificationView(args[0].lower()) if args else NotificationView.ALL
        except ValueError:
            self.console.print("[yellow]View must be one of: all, unread, read[/yellow]")
            return

        badge.refresh()
        if badge.last_error:
            self.console.print(f"[yellow]Could not refresh: {badge.last_error}[/yellow]")

        items = badge.feed.filtered(view=view)
        table = Table(
            title=f"Notifications ({badge.unread_count} unread)",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("ID", justify="right")
        table.add_column("")
        table.add_column("Subject")
        table.add_column("Type")
        table.add_column("Sent")
        for n in items:
            table.add_row(
                str(n.notification_id or ""),
                "[bold blue]●[/bold blue]" if n.is_unread else "",
                n.headline or n.message[:40],
                n.type or "",
                n.timestamp.strftime("%Y-%m-%d %H:%M") if n.timestamp else "",
            )
        self.console.print(table)

    def _cmd_read(self, args: list[str]) -> None:
        badge = self._require_badge()
        if badge is None or not self._require_arg(args, "read <id>"):
            return
        self._print_result(badge.mark_as_read(args[0]))

    def _cmd_read_all(self, args: list[str]) -> None:
        badge = self._require_badge()
        if badge is None:
            return
        self._print_result(badge.mark_all_as_read())

    def _cmd_delete(self, args: list[str]) -> None:
        badge = self._require_badge()
        if badge is None or not self._require_arg(args, "delete <id>"):
            return
        self._print_result(badge.delete(args[0]))

    def _cmd_dashboard(self, args: list[str]) -> None:
        self._navigate("/dashboard")

    def _cmd_help(self, args: list[str]) -> None:
        table = Table(title="Commands", show_header=True, header_style="bold cyan")
        table.add_column("Command", style="cyan")
        table.add_column("Description")
        for usage, description in _HELP:
            table.add_row(escape(usage), description)
        self.console.print(table)

    def _cmd_quit(self, args: list[str]) -> None:
        self._running = False

    # ==================================================================
    # Navigation & rendering
    # ==================================================================

    def _navigate(self, path: str) -> None:
        try:
            decision = self._guard.evaluate(path, location=path)
        except KeyError:
            self.console.print(f"[red]Page not found:[/red] {path}")
            return

        if decision.outcome == GuardOutcome.REDIRECT_LOGIN:
            self.console.print(
                f"[yellow]Please log in to continue to {decision.from_location}.[/yellow]"
            )
            self._location = decision.redirect_to or LOGIN_PATH
            return
        if not decision.allowed:
            self._render_denied(decision)
            return

        if path.rstrip("/") == "/dashboard":
            path = self._registry.landing_path_for(self._session.principal)
        self._location = path
        self._render_screen(path)

    def _render_denied(self, decision: GuardDecision) -> None:
        if decision.outcome == GuardOutcome.LOADING:
            self.console.print("[dim]Loading...[/dim]")
            return
        body = decision.message
        if decision.outcome == GuardOutcome.INSUFFICIENT_PERMISSIONS:
            body += f"\n\nYour current role: {decision.current_role}"
        actions = ", ".join(action.value for action in decision.actions)
        self.console.print(Panel(
            f"{body}\n\n[dim]Options: {actions}[/dim]",
            title=decision.title,
            border_style="red",
        ))

    def _render_screen(self, path: str) -> None:
        if path == "/universities":
            self._cmd_universities([])
        elif path == "/programs":
            self._cmd_programs([])
        elif path in ("/student/notifications", "/admin/notifications"):
            self._cmd_notifications([])
        elif path == "/student/dashboard" and isinstance(self._shell, StudentShell):
            self._shell.refresh_dashboard()
            self._render_student_dashboard(self._shell.dashboard)
        elif path == "/admin/dashboard" and isinstance(self._shell, AdminShell):
            self._render_admin_dashboard(self._shell.load_dashboard())
        else:
            entry, _ = self._registry.resolve(path)
            self.console.print(Panel(f"[bold]{entry.title}[/bold]", border_style="cyan"))

    def _render_student_dashboard(self, dashboard: Optional[StudentDashboard]) -> None:
        if dashboard is None:
            self.console.print("[dim]Loading dashboard...[/dim]")
            return
        table = Table(title="My Applications", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right")
        table.add_column("Program")
        table.add_column("University")
        table.add_column("Status")
        for a in dashboard.applications:
            table.add_row(
                str(a.application_id or ""),
                a.program.program_name if a.program else "",
                a.university.name if a.university else "",
                a.application_status or "",
            )
        self.console.print(table)
        self.console.print(
            f"Payments: {len(dashboard.payments)}    "
            f"Unread notifications: {dashboard.unread_notifications}"
        )
        for section, message in dashboard.errors.items():
            self.console.print(f"[yellow]{section}: {message}[/yellow]")

    def _render_admin_dashboard(self, dashboard: AdminDashboard) -> None:
        stats = dashboard.stats
        table = Table(title="Admin Dashboard", show_header=True, header_style="bold cyan")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_column("Details")
        table.add_row("Total Students", str(stats.total_students), "Registered users")
        table.add_row(
            "Total Applications",
            str(stats.total_applications),
            f"{stats.approved_applications} approved, {stats.rejected_applications} rejected",
        )
        table.add_row(
            "Pending Reviews",
            str(stats.pending_applications),
            "Requires attention" if stats.pending_applications else "All reviewed",
        )
        table.add_row(
            "Messages",
            str(stats.total_messages),
            f"{stats.unread_messages} unread" if stats.unread_messages else "All read",
        )
        table.add_row(
            "Notifications",
            str(stats.total_notifications),
            f"{stats.unread_notifications} unread" if stats.unread_notifications else "All read",
        )
        table.add_row("Universities", str(stats.total_universities), "")
        table.add_row("Programs", str(stats.total_programs), "")
        self.console.print(table)
        for section, message in dashboard.errors.items():
            self.console.print(f"[yellow]{message}[/yellow]")

    # ==================================================================
    # Helpers
    # ==================================================================

    def _require_badge(self):
        badge = self._shell.badge if self._shell is not None else None
        if badge is None:
            self.console.print("[yellow]Log in to see notifications.[/yellow]")
        return badge

    def _require_arg(self, args: list[str], usage: str) -> bool:
        if not args:
            self.console.print(f"[yellow]Usage: {usage}[/yellow]")
            return False
        return True

    def _print_result(self, result: OperationResult) -> None:
        colour = "green" if result.success else "red"
        self.console.print(f"[{colour}]{escape(result.message)}[/{colour}]")
