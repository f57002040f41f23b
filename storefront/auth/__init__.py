"""Authentication package."""
from .session import AuthSession
from .guard import GuardDecision, RouteGuard

__all__ = [
    "AuthSession",
    "GuardDecision",
    "RouteGuard",
]
