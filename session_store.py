"""
Session Store - single authoritative holder of the logged-in user

The store owns the ``token`` and ``user`` keys of the persistence port and
keeps them in step with its in-memory state: both are set together and
cleared together. Consumers read ``store.state`` or subscribe to change
notifications.

Concurrent operations are not serialized. Whichever response resolves last
overwrites the shared state.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Mapping, Optional

from pydantic import ValidationError as SchemaError

from config.settings import TOKEN_KEY, USER_KEY
from errors import ApiError, AuthError, ClientError, NetworkError, auth_error_from
from models.responses import AuthResponse
from models.user import User
from services.auth_api import AuthAPI
from storage import StoragePort

logger = logging.getLogger(__name__)

REGISTRATION_FAILED = "Registration failed"
LOGIN_FAILED = "Login failed"
UPDATE_FAILED = "Update failed"
SERVER_UNREACHABLE = "Unable to reach the server"


@dataclass(frozen=True)
class SessionState:
    token: Optional[str] = None
    user: Optional[User] = None
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.admin is True


Listener = Callable[[SessionState], None]


class SessionStore:
    """
    Session service, constructed once per client and passed around explicitly.

    Args:
        storage: Persistence port used to survive restarts
        auth_api: Contract with the authentication service
    """

    def __init__(self, storage: StoragePort, auth_api: AuthAPI):
        self._storage = storage
        self._auth_api = auth_api
        self._listeners: List[Listener] = []
        self._state = self._hydrate()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def current_token(self) -> Optional[str]:
        return self._state.token

    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.error("Session listener failed", exc_info=True)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _hydrate(self) -> SessionState:
        token = self._storage.get(TOKEN_KEY) or None
        raw_user = self._storage.get(USER_KEY) or None

        if token is None and raw_user is None:
            return SessionState()

        if token is None or raw_user is None:
            logger.warning("Stored session is incomplete (token and user must both be present) - clearing it")
            self._forget_session()
            return SessionState()

        try:
            user = User.model_validate_json(raw_user)
        except SchemaError as e:
            logger.warning(f"Stored user could not be read - clearing session: {e}")
            self._forget_session()
            return SessionState()

        return SessionState(token=token, user=user)

    def _persist_session(self, token: str, user: User) -> None:
        # A stored token always has its user stored next to it
        self._storage.remove(TOKEN_KEY)
        self._storage.set(USER_KEY, user.model_dump_json())
        self._storage.set(TOKEN_KEY, token)

    def _forget_session(self) -> None:
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)

    def _replace_user(self, user: User) -> bool:
        # A profile response arriving after logout must not resurrect a user without a token
        if not self._state.token:
            logger.info("Discarding profile response received without an active session")
            return False
        self._storage.set(USER_KEY, user.model_dump_json())
        self._set(user=user)
        return True

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def register(self, fields: Mapping[str, Any]) -> dict:
        """
        Create an account. Does not start a session; the visitor logs in next.

        Returns:
            The raw response body of the auth service

        Raises:
            AuthError: registration rejected (message from the backend)
            NetworkError: the request did not complete
        """
        self._set(is_loading=True, error=None)
        try:
            response = await self._auth_api.register(dict(fields))
        except ApiError as e:
            error = auth_error_from(e, REGISTRATION_FAILED)
            self._set(is_loading=False, error=error.message)
            raise error from e
        except NetworkError:
            self._set(is_loading=False, error=SERVER_UNREACHABLE)
            raise
        except AuthError as e:
            self._set(is_loading=False, error=e.message)
            raise
        self._set(is_loading=False)
        logger.info(f"Registered account for {fields.get('email')}")
        return response

    async def login(self, credentials: Mapping[str, Any]) -> AuthResponse:
        """
        Sign in and establish the session.

        On success token and user are written to storage and memory together.
        On failure the current session is left as it was and ``error`` is set.

        Raises:
            AuthError: credentials rejected
            NetworkError: the request did not complete
        """
        self._set(is_loading=True, error=None)
        try:
            result = await self._auth_api.login(credentials["email"], credentials["password"])
        except ApiError as e:
            error = auth_error_from(e, LOGIN_FAILED)
            self._set(is_loading=False, error=error.message)
            raise error from e
        except NetworkError:
            self._set(is_loading=False, error=SERVER_UNREACHABLE)
            raise
        except AuthError as e:
            self._set(is_loading=False, error=e.message)
            raise

        try:
            self._persist_session(result.token, result.user)
        except Exception:
            logger.error("Could not store the session", exc_info=True)
            self._set(is_loading=False)
            raise
        self._set(token=result.token, user=result.user, is_loading=False, error=None)
        logger.info(f"Logged in as user {result.user.id}")
        return result

    async def logout(self) -> None:
        """
        End the session. The remote call is best-effort; the local session
        is always cleared.
        """
        self._set(is_loading=True)
        try:
            await self._auth_api.logout()
        except ClientError as e:
            logger.error(f"Logout API error: {e}")
        finally:
            self._forget_session()
            self._set(token=None, user=None, is_loading=False, error=None)

    async def fetch_profile(self) -> User:
        """
        Re-fetch the current user and replace it wholesale.

        Raises:
            ApiError / NetworkError: propagated to the caller
        """
        self._set(is_loading=True)
        try:
            response = await self._auth_api.get_profile()
        except ClientError:
            self._set(is_loading=False)
            raise
        self._set(is_loading=False)
        self._replace_user(response.user)
        return response.user

    async def refresh_user(self) -> Optional[User]:
        """Background variant of fetch_profile; failures are logged only."""
        try:
            response = await self._auth_api.get_profile()
        except ClientError as e:
            logger.error(f"Failed to refresh user: {e}")
            return None
        if not self._replace_user(response.user):
            return None
        return response.user

    async def update_profile(self, fields: Mapping[str, Any]) -> User:
        """
        Update profile fields and replace the user with the server's copy.

        Raises:
            AuthError: update rejected
            NetworkError: the request did not complete
        """
        self._set(is_loading=True, error=None)
        try:
            response = await self._auth_api.update_profile(dict(fields))
        except ApiError as e:
            error = auth_error_from(e, UPDATE_FAILED)
            self._set(is_loading=False, error=error.message)
            raise error from e
        except NetworkError:
            self._set(is_loading=False, error=SERVER_UNREACHABLE)
            raise
        except AuthError as e:
            self._set(is_loading=False, error=e.message)
            raise
        self._set(is_loading=False)
        self._replace_user(response.user)
        return response.user

    def clear_error(self) -> None:
        self._set(error=None)

    def clear_session(self) -> None:
        """Drop the session after an unrecoverable auth failure."""
        if self._state.token is None and self._state.user is None:
            self._forget_session()
            return
        logger.warning("Session rejected by the server - logging out locally")
        self._forget_session()
        self._set(token=None, user=None, is_loading=False)
