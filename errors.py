"""
Error taxonomy of the account client
"""
from typing import Optional

from models.responses import ErrorPayload


class ClientError(Exception):
    """Base class for every failure surfaced by the client core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClientError):
    """Malformed input, caught before any network call."""


class AuthError(ClientError):
    """Credentials, registration or profile update rejected by the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(ClientError):
    """The request did not complete (connection refused, timeout, ...)."""


class CheckoutError(ClientError):
    """The billing service rejected a checkout or portal request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiError(ClientError):
    """Non-2xx response from the backend, with its parsed error body."""

    def __init__(self, status_code: int, payload: ErrorPayload, path: str = ""):
        super().__init__(payload.describe(f"HTTP {status_code}"))
        self.status_code = status_code
        self.payload = payload
        self.path = path

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


def auth_error_from(exc: ApiError, default: str) -> AuthError:
    return AuthError(exc.payload.describe(default), status_code=exc.status_code)


def checkout_error_from(exc: ApiError, default: str) -> CheckoutError:
    return CheckoutError(exc.payload.describe(default), status_code=exc.status_code)
