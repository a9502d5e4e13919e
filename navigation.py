"""
Navigation outcomes returned by guards, the checkout handoff and views
"""
from dataclasses import dataclass
from typing import Optional

# Internal routes
HOME = "/"
LOGIN = "/login"
REGISTER = "/register"
DASHBOARD = "/dashboard"
PLANS = "/plans"
CONTACT = "/contact"
ADMIN = "/admin"


@dataclass(frozen=True)
class Navigation:
    """
    Where the client should go next.

    ``external`` targets are opaque URLs issued by the billing provider and
    are followed verbatim. ``replace`` rewrites the current address without
    adding a history entry. ``alert`` is a blocking message to show first.
    """

    location: str
    external: bool = False
    replace: bool = False
    alert: Optional[str] = None

    @classmethod
    def to(cls, route: str, alert: Optional[str] = None) -> "Navigation":
        return cls(location=route, alert=alert)

    @classmethod
    def redirect(cls, route: str) -> "Navigation":
        return cls(location=route, replace=True)

    @classmethod
    def external_url(cls, url: str) -> "Navigation":
        return cls(location=url, external=True)
