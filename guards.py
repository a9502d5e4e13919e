"""
Route guards - decide on every render whether a view may be shown
"""

import logging
from typing import Callable, Optional

from fastapi import Request

from navigation import DASHBOARD, LOGIN, Navigation
from session_store import SessionState, SessionStore

logger = logging.getLogger(__name__)

Guard = Callable[[SessionState], Optional[Navigation]]


def protected_guard(state: SessionState) -> Optional[Navigation]:
    """Requires a token. Returns None to render, or where to go instead."""
    if not state.token:
        return Navigation.redirect(LOGIN)
    return None


def admin_guard(state: SessionState) -> Optional[Navigation]:
    """Requires a token and an admin user; non-admins go to the dashboard."""
    if not state.token:
        return Navigation.redirect(LOGIN)
    if not state.is_admin:
        return Navigation.redirect(DASHBOARD)
    return None


class GuardedView:
    """
    Keeps a guard applied for as long as a view is mounted.

    The guard is evaluated on mount and again after every change of the
    session; ``on_redirect`` is called each time it starts refusing.
    """

    def __init__(
        self,
        store: SessionStore,
        guard: Guard,
        on_redirect: Callable[[Navigation], None],
    ):
        self.store = store
        self.guard = guard
        self.on_redirect = on_redirect
        self.redirect: Optional[Navigation] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def renders(self) -> bool:
        return self.redirect is None

    def mount(self) -> Optional[Navigation]:
        self._unsubscribe = self.store.subscribe(self._evaluate)
        self._evaluate(self.store.state)
        return self.redirect

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _evaluate(self, state: SessionState) -> None:
        previous = self.redirect
        self.redirect = self.guard(state)
        if self.redirect is not None and self.redirect != previous:
            logger.debug(f"Guard {self.guard.__name__} redirecting to {self.redirect.location}")
            self.on_redirect(self.redirect)


class GuardRedirect(Exception):
    """Raised by the shell dependencies; turned into a redirect response."""

    def __init__(self, navigation: Navigation):
        super().__init__(navigation.location)
        self.navigation = navigation


def _store_from(request: Request) -> SessionStore:
    return request.app.state.context.session_store


async def require_session(request: Request) -> SessionStore:
    """FastAPI dependency applying the protected guard on every request."""
    store = _store_from(request)
    navigation = protected_guard(store.state)
    if navigation is not None:
        raise GuardRedirect(navigation)
    return store


async def require_admin(request: Request) -> SessionStore:
    """FastAPI dependency applying the admin guard on every request."""
    store = _store_from(request)
    navigation = admin_guard(store.state)
    if navigation is not None:
        raise GuardRedirect(navigation)
    return store
