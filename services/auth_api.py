"""
Auth API - registration, sign-in and profile endpoints
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError as SchemaError

from errors import AuthError
from models.responses import AuthResponse, ProfileResponse
from services.api_client import ApiClient

logger = logging.getLogger(__name__)


class AuthAPI:
    """Contract with the authentication service."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def register(self, fields: Dict[str, Any]) -> dict:
        """POST /auth/sign_up - returns the raw response body"""
        return await self.client.request(
            "POST", "/auth/sign_up", json={"user": fields}, reset_on_unauthorized=False
        )

    async def login(self, email: str, password: str) -> AuthResponse:
        """POST /auth/sign_in"""
        body = await self.client.request(
            "POST",
            "/auth/sign_in",
            json={"user": {"email": email, "password": password}},
            reset_on_unauthorized=False,
        )
        return _parse(AuthResponse, body, "/auth/sign_in")

    async def logout(self) -> None:
        """DELETE /auth/sign_out"""
        await self.client.request("DELETE", "/auth/sign_out")

    async def get_profile(self) -> ProfileResponse:
        """GET /users/me"""
        body = await self.client.request("GET", "/users/me")
        return _parse(ProfileResponse, body, "/users/me")

    async def update_profile(self, fields: Dict[str, Any]) -> ProfileResponse:
        """PATCH /users/me"""
        body = await self.client.request("PATCH", "/users/me", json={"user": fields})
        return _parse(ProfileResponse, body, "/users/me")


def _parse(model, body: dict, path: str):
    try:
        return model.model_validate(body)
    except SchemaError as e:
        logger.error(f"Unexpected response shape from {path}: {e}")
        raise AuthError("Unexpected response from server") from e
