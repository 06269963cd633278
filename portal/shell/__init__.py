"""Role shells: the signed-in layouts that own background polling."""

from portal.shell.admin_shell import AdminShell
from portal.shell.base import RoleShell, ShellState
from portal.shell.student_shell import StudentShell

__all__ = ["AdminShell", "RoleShell", "ShellState", "StudentShell"]
