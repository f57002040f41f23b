"""Route guard: decides whether a user may see a path, and where to send them if not."""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from storefront.models import Role, User


@dataclass
class GuardDecision:
    allowed: bool
    pending: bool
    redirect: Optional[str] = None


@dataclass
class RouteGuard:
    require_auth: bool = False
    require_role: Optional[Role] = None
    redirect_to: Optional[str] = None

    def login_redirect(self, pathname: str) -> str:
        return self.redirect_to or f"/login?redirect={quote(pathname, safe='')}"

    def evaluate(self, user: Optional[User], initialized: bool, pathname: str = "/") -> GuardDecision:
        if not initialized:
            return GuardDecision(allowed=False, pending=True)

        redirect = None
        allowed = True
        if self.require_auth and user is None:
            allowed = False
            redirect = self.login_redirect(pathname)
        elif self.require_role and user is not None and user.role != self.require_role:
            allowed = False
            redirect = "/"

        pending = not allowed and (self.require_auth or bool(self.require_role))
        return GuardDecision(allowed=allowed, pending=pending, redirect=redirect)
