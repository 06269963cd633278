"""Screen routing: the route table and the guard that protects it."""

from portal.routing.guard import GuardDecision, GuardOutcome, RouteGuard
from portal.routing.registry import ScreenEntry, ScreenRegistry, build_default_registry

__all__ = [
    "GuardDecision",
    "GuardOutcome",
    "RouteGuard",
    "ScreenEntry",
    "ScreenRegistry",
    "build_default_registry",
]
