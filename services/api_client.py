"""
API Client - shared HTTP transport for the backend REST API
"""

import logging
from typing import Any, Callable, List, Optional

import httpx

from config.settings import settings
from errors import ApiError, NetworkError
from models.responses import ErrorPayload

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]
UnauthorizedListener = Callable[[], None]


class ApiClient:
    """
    Async JSON client for the backend.

    Attaches ``Authorization: Bearer <token>`` whenever the token provider
    returns a token, and notifies unauthorized listeners when a
    non-credential request comes back 401 so the session can be dropped.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_provider: Optional[TokenProvider] = None,
    ):
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.token_provider = token_provider
        self._unauthorized_listeners: List[UnauthorizedListener] = []
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def add_unauthorized_listener(self, listener: UnauthorizedListener) -> None:
        self._unauthorized_listeners.append(listener)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        reset_on_unauthorized: bool = True,
    ) -> dict:
        """
        Send a request and return the decoded JSON body.

        Raises:
            NetworkError: the request did not complete
            ApiError: the backend answered with a non-2xx status
        """
        headers = {}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError(f"Request to {path} failed: {e}") from e

        body = self._decode(response)

        if response.status_code == 401 and reset_on_unauthorized:
            logger.info(f"{method} {path} returned 401 - dropping session")
            for listener in list(self._unauthorized_listeners):
                listener()

        if not response.is_success:
            raise ApiError(response.status_code, ErrorPayload.from_body(body), path=path)

        return body if isinstance(body, dict) else {}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def aclose(self) -> None:
        await self._client.aclose()
